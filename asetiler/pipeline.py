"""
End-to-end helpers chaining decode -> composite -> slice.
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from asetiler.constants import DEFAULT_TILE_SIZE
from asetiler.core.compositor import composite
from asetiler.core.decoder import decode
from asetiler.core.document import Document, FlatImage
from asetiler.core.slicer import Manifest, Tile, slice_image

logger = logging.getLogger(__name__)


def flatten_document(document: Document, frame_index: int = 0,
                     include_hidden: bool = True) -> FlatImage:
    """
    Composite one frame of an already decoded document.

    Args:
        document: Decoded document
        frame_index: Frame to composite (default: first frame)
        include_hidden: Whether cels on hidden layers are painted

    Returns:
        FlatImage sized to the document canvas
    """
    if not 0 <= frame_index < len(document.frames):
        raise IndexError(
            f"Frame {frame_index} out of range (document has {len(document.frames)})"
        )
    if len(document.frames) > 1:
        logger.debug("Document has %d frames; compositing frame %d only",
                     len(document.frames), frame_index)
    return composite(document.frames[frame_index], document.width, document.height,
                     layers=document.layers, include_hidden=include_hidden)


def flatten(data: bytes, include_hidden: bool = True) -> FlatImage:
    """Decode a document and composite its first frame."""
    return flatten_document(decode(data), include_hidden=include_hidden)


def tile_document(data: bytes, tile_size: int = DEFAULT_TILE_SIZE,
                  include_hidden: bool = True) -> Tuple[List[Tile], Manifest]:
    """
    Decode, composite and slice a document in one call.

    Args:
        data: Raw document bytes
        tile_size: Edge length of each tile
        include_hidden: Whether cels on hidden layers are painted

    Returns:
        (tiles, manifest)
    """
    return slice_image(flatten(data, include_hidden=include_hidden), tile_size)
