"""
asetiler - flatten Aseprite documents and cut them into binary tiles.

Example usage:
    from asetiler import flatten, tile_document

    image = flatten(data)
    tiles, manifest = tile_document(data, tile_size=512)
"""
from asetiler.core import (
    AsepriteError,
    InvalidTileSize,
    MalformedDocument,
    NoFrames,
    composite,
    decode,
    slice_image,
)
from asetiler.pipeline import flatten, tile_document

__version__ = "0.1.0"

__all__ = [
    "AsepriteError",
    "InvalidTileSize",
    "MalformedDocument",
    "NoFrames",
    "composite",
    "decode",
    "slice_image",
    "flatten",
    "tile_document",
]
