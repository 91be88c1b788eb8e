"""
File I/O utilities for source documents, canvases, tiles and manifests.
"""
import json
from pathlib import Path

import numpy as np
import pandas as pd
from PIL import Image

from asetiler.core.slicer import Manifest, iter_tiles, tile_scratch


class FileIO:
    """Handles all file I/O around the in-memory pipeline."""

    @staticmethod
    def read_document(filepath):
        """
        Read a source document into memory.

        Args:
            filepath: Path to the .aseprite/.ase file

        Returns:
            bytes with the full file contents

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.is_file():
            raise FileNotFoundError(f"Source document not found: {path}")
        return path.read_bytes()

    @staticmethod
    def _ensure_parent(filepath):
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def write_canvas_json(image, filepath):
        """
        Write the flat image as JSON with the pixels embedded as a flat array.

        The layout is {"width", "height", "frames": [{"pixels": [r, g, b, a, ...]}]}.

        Args:
            image: FlatImage to write
            filepath: Destination .json path

        Returns:
            Path that was written
        """
        path = FileIO._ensure_parent(filepath)
        data = {
            'width': image.width,
            'height': image.height,
            'frames': [
                {'pixels': image.pixels.reshape(-1).tolist()}
            ]
        }
        with open(path, 'w') as f:
            json.dump(data, f, separators=(',', ':'))
        print(f"✅ Canvas JSON written: {path}")
        return path

    @staticmethod
    def write_canvas_raw(image, output_dir, stem='canvas'):
        """
        Write the flat image as a raw RGBA blob plus a {width, height} record.

        Args:
            image: FlatImage to write
            output_dir: Directory receiving <stem>.bin and <stem>.json
            stem: Base file name (default: 'canvas')

        Returns:
            tuple: (blob_path, metadata_path)
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        blob_path = output_dir / f"{stem}.bin"
        meta_path = output_dir / f"{stem}.json"

        blob_path.write_bytes(image.to_bytes())
        with open(meta_path, 'w') as f:
            json.dump({'width': image.width, 'height': image.height}, f)

        print(f"✅ Raw canvas written: {blob_path} ({image.width}x{image.height})")
        return blob_path, meta_path

    @staticmethod
    def write_tiles(image, tile_size, tiles_dir, png_previews=False):
        """
        Slice an image and write one tile_<y>_<x>.bin file per grid cell.

        A single scratch buffer is reused for every tile; each tile is
        written out before the next one is produced.

        Args:
            image: FlatImage to slice
            tile_size: Edge length of each tile
            tiles_dir: Directory receiving the tile files
            png_previews: Also write tile_<y>_<x>.png next to each .bin

        Returns:
            Manifest describing the written tiles
        """
        tiles_dir = Path(tiles_dir)
        tiles_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        with tile_scratch(tile_size) as scratch:
            for tile in iter_tiles(image, tile_size, scratch=scratch):
                (tiles_dir / f"{tile.name}.bin").write_bytes(tile.to_bytes())
                if png_previews:
                    FileIO.write_png(tile.pixels, tiles_dir / f"{tile.name}.png")
                count += 1

        manifest = Manifest(image.width, image.height, tile_size)
        print(f"✅ {count} tile(s) of {tile_size}x{tile_size} written to {tiles_dir}")
        return manifest

    @staticmethod
    def write_manifest(manifest, filepath):
        """Write {"width", "height", "tileSize"} to filepath."""
        path = FileIO._ensure_parent(filepath)
        with open(path, 'w') as f:
            json.dump(manifest.to_dict(), f)
        print(f"✅ Manifest written: {path}")
        return path

    @staticmethod
    def load_manifest(filepath):
        """Load a manifest.json written by write_manifest."""
        with open(filepath, 'r') as f:
            return Manifest.from_dict(json.load(f))

    @staticmethod
    def write_png(pixels, filepath):
        """
        Save an (h, w, 4) uint8 array as an RGBA PNG.

        Args:
            pixels: numpy array of RGBA8 pixels
            filepath: Destination .png path

        Returns:
            Path that was written
        """
        path = FileIO._ensure_parent(filepath)
        Image.fromarray(np.ascontiguousarray(pixels)).save(path)
        return path

    @staticmethod
    def cel_table(document):
        """
        Tabulate every cel of every frame.

        Args:
            document: Decoded Document

        Returns:
            pandas DataFrame with one row per cel
        """
        names = {layer.index: layer.name for layer in document.layers}
        rows = []
        for frame_index, frame in enumerate(document.frames):
            for cel in frame.cels:
                rows.append({
                    'frame': frame_index,
                    'layer': cel.layer_index,
                    'layer_name': names.get(cel.layer_index, ''),
                    'x': cel.x,
                    'y': cel.y,
                    'w': cel.w,
                    'h': cel.h,
                    'empty': cel.is_empty,
                })
        columns = ['frame', 'layer', 'layer_name', 'x', 'y', 'w', 'h', 'empty']
        return pd.DataFrame(rows, columns=columns)

    @staticmethod
    def write_cel_report(document, filepath):
        """Write the cel table as CSV."""
        path = FileIO._ensure_parent(filepath)
        FileIO.cel_table(document).to_csv(path, index=False)
        print(f"✅ Cel report written: {path}")
        return path
