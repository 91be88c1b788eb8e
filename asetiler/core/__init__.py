"""
Core decode/composite/slice pipeline.
"""
from asetiler.core.document import Cel, Document, FlatImage, Frame, Layer
from asetiler.core.errors import AsepriteError, InvalidTileSize, MalformedDocument, NoFrames
from asetiler.core.decoder import decode
from asetiler.core.compositor import composite
from asetiler.core.slicer import Manifest, Tile, assemble_tiles, iter_tiles, slice_image, tile_scratch

__all__ = [
    'Cel', 'Document', 'FlatImage', 'Frame', 'Layer',
    'AsepriteError', 'InvalidTileSize', 'MalformedDocument', 'NoFrames',
    'decode', 'composite',
    'Manifest', 'Tile', 'assemble_tiles', 'iter_tiles', 'slice_image', 'tile_scratch',
]
