"""
asetiler - Main Entry Point

Flattens an Aseprite document and writes the result as JSON, a raw RGBA
blob, or a grid of binary tiles with a manifest.

Requirements:
    pip install numpy Pillow pandas

Usage:
    # Write public/canvas.json from source/canvas.aseprite
    python main.py --mode convert

    # Slice into 512x512 tiles under public/tiles/ plus public/manifest.json
    python main.py --mode tile --tile-size 512

    # Inspect layers and cels
    python main.py --mode info --source art/map.aseprite
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from utils.dependency_checker import check_dependencies


def build_parser():
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="asetiler - Aseprite flattening and tiling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Flatten to canvas.json
  python main.py --mode convert --source source/canvas.aseprite --output public

  # Flatten to a raw RGBA blob with a PNG preview
  python main.py --mode convert --raw --png

  # Slice into 256px tiles
  python main.py --mode tile --tile-size 256

  # Export the cel table
  python main.py --mode info --csv cels.csv
        """
    )

    parser.add_argument(
        "--mode",
        type=str,
        default="tile",
        choices=["convert", "tile", "info"],
        help="Mode: convert, tile, or info"
    )
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Path to the .aseprite file (default from settings)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory (default from settings)"
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Path to a JSON settings file"
    )

    # Tiling arguments
    parser.add_argument(
        "--tile-size",
        type=int,
        default=None,
        help="Tile edge length in pixels (default from settings, 512)"
    )

    # Output format arguments
    parser.add_argument(
        "--raw",
        action="store_true",
        help="convert: write canvas.bin + {width, height} instead of embedded JSON pixels"
    )
    parser.add_argument(
        "--png",
        action="store_true",
        help="Also write PNG previews"
    )
    parser.add_argument(
        "--skip-hidden",
        action="store_true",
        help="Do not paint cels on hidden layers"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="info: write the cel table to this CSV file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    # Check dependencies
    if not check_dependencies():
        return 1

    from asetiler.utils.settings import load_settings
    from cli.commands import convert_mode, tile_mode, info_mode

    if args.settings:
        load_settings(args.settings)

    # Route to appropriate mode
    if args.mode == "convert":
        return convert_mode(args)
    if args.mode == "tile":
        return tile_mode(args)
    return info_mode(args)


if __name__ == "__main__":
    sys.exit(main())
