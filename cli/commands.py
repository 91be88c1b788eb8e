"""
CLI Commands for asetiler.

This module contains the command implementations for different modes:
- convert: Flatten the first frame into canvas.json (or a raw blob)
- tile: Flatten the first frame and write binary tiles plus manifest.json
- info: Describe the layers, frames and cels of a document
"""

import logging
from pathlib import Path

from asetiler.core.decoder import decode
from asetiler.core.errors import AsepriteError, InvalidTileSize
from asetiler.pipeline import flatten_document
from asetiler.utils.file_io import FileIO
from asetiler.utils.settings import get_settings

logger = logging.getLogger(__name__)


def _resolve(args, settings):
    """Combine command line arguments with configured defaults."""
    source = Path(getattr(args, 'source', None) or settings.get_path('source'))
    output_dir = Path(getattr(args, 'output', None) or settings.get_path('output'))
    include_hidden = not getattr(args, 'skip_hidden', False) and settings.get(
        'include_hidden_layers', True
    )
    return source, output_dir, include_hidden


def _load(source, include_hidden):
    print(f"Reading file from: {source}")
    data = FileIO.read_document(source)
    print("Parsing Aseprite data...")
    document = decode(data)
    print("Compositing frame from cels...")
    image = flatten_document(document, include_hidden=include_hidden)
    return document, image


def convert_mode(args):
    """Flatten the document and write the canvas."""
    settings = get_settings()
    source, output_dir, include_hidden = _resolve(args, settings)
    raw = getattr(args, 'raw', False) or settings.get('export.raw_canvas', False)
    png = getattr(args, 'png', False) or settings.get('export.png_previews', False)

    try:
        _, image = _load(source, include_hidden)
        if raw:
            FileIO.write_canvas_raw(image, output_dir)
        else:
            FileIO.write_canvas_json(image, output_dir / 'canvas.json')
        if png:
            FileIO.write_png(image.pixels, output_dir / 'canvas.png')
    except (AsepriteError, OSError) as e:
        print(f"❌ An error occurred during conversion: {e}")
        logger.debug("Conversion failed", exc_info=True)
        return 1

    print("✅ Conversion successful!")
    return 0


def tile_mode(args):
    """Flatten the document and slice it into binary tiles."""
    settings = get_settings()
    source, output_dir, include_hidden = _resolve(args, settings)
    png = getattr(args, 'png', False) or settings.get('export.png_previews', False)
    tiles_dir = output_dir / settings.get_path('tiles')

    try:
        # 0 is an explicit (invalid) size, not a request for the default
        tile_size = args.tile_size if getattr(args, 'tile_size', None) is not None else settings.get_tile_size()
        _, image = _load(source, include_hidden)
        print(f"Slicing image into {tile_size}x{tile_size} tiles...")
        manifest = FileIO.write_tiles(image, tile_size, tiles_dir, png_previews=png)
        FileIO.write_manifest(manifest, output_dir / 'manifest.json')
    except (AsepriteError, InvalidTileSize, OSError) as e:
        print(f"❌ An error occurred during tiling: {e}")
        logger.debug("Tiling failed", exc_info=True)
        return 1

    print(f"✅ Tiling complete: {manifest.columns} x {manifest.rows} grid")
    return 0


def info_mode(args):
    """Print a summary of the document structure."""
    settings = get_settings()
    source, _, _ = _resolve(args, settings)

    try:
        document = decode(FileIO.read_document(source))
    except (AsepriteError, OSError) as e:
        print(f"❌ Could not read document: {e}")
        return 1

    print(f"\n{'='*60}")
    print(f"📄 {source.name}")
    print(f"{'='*60}")
    print(f"Canvas:  {document.width}x{document.height}")
    print(f"Frames:  {len(document.frames)}")
    print(f"Layers:  {len(document.layers)}")
    for layer in document.layers:
        state = "visible" if layer.visible else "hidden"
        print(f"  [{layer.index}] {layer.name} ({state})")

    table = FileIO.cel_table(document)
    if table.empty:
        print("No cels found")
    else:
        print(f"\n{table.to_string(index=False)}")
    print(f"{'='*60}\n")

    csv_path = getattr(args, 'csv', None)
    if csv_path:
        try:
            FileIO.write_cel_report(document, csv_path)
        except OSError as e:
            print(f"❌ Could not write cel report: {e}")
            return 1
    return 0
