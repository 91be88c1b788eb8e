"""
Tile slicing for composited images.

The image is cut into square tiles on a grid anchored at (0, 0). Tiles on
the right and bottom edges are padded with transparent pixels where the
grid extends past the canvas.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from asetiler.constants import BYTES_PER_PIXEL, TILE_NAME_TEMPLATE
from asetiler.core.document import FlatImage
from asetiler.core.errors import InvalidTileSize

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Tile:
    """
    One square region of the flat image.

    Attributes:
        origin_x: Left edge of the tile on the canvas
        origin_y: Top edge of the tile on the canvas
        size: Edge length in pixels
        pixels: (size, size, 4) uint8 array
    """

    origin_x: int
    origin_y: int
    size: int
    pixels: np.ndarray

    @property
    def name(self) -> str:
        """File stem used for this tile, e.g. tile_512_0."""
        return TILE_NAME_TEMPLATE.format(y=self.origin_y, x=self.origin_x)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()


@dataclass(frozen=True)
class Manifest:
    """Canvas and tile dimensions accompanying a set of tiles."""

    width: int
    height: int
    tile_size: int

    @property
    def columns(self) -> int:
        return -(-self.width // self.tile_size)

    @property
    def rows(self) -> int:
        return -(-self.height // self.tile_size)

    def to_dict(self) -> Dict[str, int]:
        """Convert to the manifest.json layout."""
        return {
            'width': self.width,
            'height': self.height,
            'tileSize': self.tile_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "Manifest":
        return cls(data['width'], data['height'], data['tileSize'])


def _check_tile_size(tile_size: int) -> None:
    if tile_size <= 0:
        raise InvalidTileSize(f"Tile size must be positive, got {tile_size}")


@contextmanager
def tile_scratch(tile_size: int) -> Iterator[np.ndarray]:
    """
    Provide one reusable tile buffer for iter_tiles.

    Every tile yielded with this buffer shares its memory, so each tile must
    be consumed before the next one is requested. The buffer is made
    read-only when the context exits, and iter_tiles refuses it afterwards.

    Args:
        tile_size: Edge length of the tiles the buffer will hold

    Yields:
        (tile_size, tile_size, 4) uint8 array
    """
    _check_tile_size(tile_size)
    buffer = np.zeros((tile_size, tile_size, BYTES_PER_PIXEL), dtype=np.uint8)
    try:
        yield buffer
    finally:
        buffer.flags.writeable = False


def iter_tiles(image: FlatImage, tile_size: int,
               scratch: Optional[np.ndarray] = None) -> Iterator[Tile]:
    """
    Yield tiles in row-major grid order.

    Args:
        image: Composited image to slice
        tile_size: Edge length of each tile in pixels
        scratch: Optional buffer from tile_scratch; when given, it is cleared
            and refilled for every tile instead of allocating a new one

    Yields:
        Tile objects, origins stepping by tile_size
    """
    _check_tile_size(tile_size)
    if scratch is not None and scratch.shape != (tile_size, tile_size, BYTES_PER_PIXEL):
        raise ValueError(f"Scratch buffer shape {scratch.shape} does not match tile size {tile_size}")
    if scratch is not None and not scratch.flags.writeable:
        raise ValueError("Scratch buffer is read-only; was its tile_scratch context already closed?")

    for ty in range(0, image.height, tile_size):
        for tx in range(0, image.width, tile_size):
            if scratch is None:
                buffer = np.zeros((tile_size, tile_size, BYTES_PER_PIXEL), dtype=np.uint8)
            else:
                buffer = scratch
                buffer.fill(0)

            # Only the overlap with the canvas is copied; the rest stays zero
            rows = min(tile_size, image.height - ty)
            cols = min(tile_size, image.width - tx)
            buffer[:rows, :cols] = image.pixels[ty:ty + rows, tx:tx + cols]
            yield Tile(origin_x=tx, origin_y=ty, size=tile_size, pixels=buffer)


def slice_image(image: FlatImage, tile_size: int) -> Tuple[List[Tile], Manifest]:
    """
    Cut an image into padded square tiles.

    Args:
        image: Composited image to slice
        tile_size: Edge length of each tile in pixels (must be > 0)

    Returns:
        (tiles, manifest) with tiles in row-major grid order

    Raises:
        InvalidTileSize: If tile_size is not positive
    """
    _check_tile_size(tile_size)
    tiles = list(iter_tiles(image, tile_size))
    manifest = Manifest(image.width, image.height, tile_size)
    logger.info("Sliced %dx%d image into %d tile(s) of %dpx (%d cols x %d rows)",
                image.width, image.height, len(tiles), tile_size,
                manifest.columns, manifest.rows)
    return tiles, manifest


def assemble_tiles(tiles: Sequence[Tile], manifest: Manifest) -> FlatImage:
    """
    Rebuild the flat image from tiles placed at their origins.

    Args:
        tiles: Tiles produced by slice_image
        manifest: Manifest produced alongside the tiles

    Returns:
        FlatImage cropped to the manifest's width and height
    """
    image = FlatImage.blank(manifest.width, manifest.height)
    for tile in tiles:
        rows = min(tile.size, manifest.height - tile.origin_y)
        cols = min(tile.size, manifest.width - tile.origin_x)
        if rows <= 0 or cols <= 0:
            continue
        image.pixels[tile.origin_y:tile.origin_y + rows,
                     tile.origin_x:tile.origin_x + cols] = tile.pixels[:rows, :cols]
    return image
