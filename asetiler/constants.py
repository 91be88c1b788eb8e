"""
Binary layout constants for Aseprite documents and tiling defaults.
"""
from enum import IntEnum


class ChunkType(IntEnum):
    """Chunk type identifiers found inside a frame."""
    OLD_PALETTE_4 = 0x0004
    OLD_PALETTE_11 = 0x0011
    LAYER = 0x2004
    CEL = 0x2005
    CEL_EXTRA = 0x2006
    COLOR_PROFILE = 0x2007
    EXTERNAL_FILES = 0x2008
    TAGS = 0x2018
    PALETTE = 0x2019
    USER_DATA = 0x2020
    SLICE = 0x2022
    TILESET = 0x2023


class CelType(IntEnum):
    """How a cel stores its pixels."""
    RAW = 0
    LINKED = 1
    COMPRESSED_IMAGE = 2
    COMPRESSED_TILEMAP = 3


# Header
HEADER_SIZE = 128
HEADER_MAGIC = 0xA5E0
FRAME_HEADER_SIZE = 16
FRAME_MAGIC = 0xF1FA
CHUNK_HEADER_SIZE = 6

# Only 32 bpp RGBA documents are decoded; indexed and grayscale would need
# color conversion.
COLOR_DEPTH_RGBA = 32
BYTES_PER_PIXEL = 4

# Layer flags
LAYER_FLAG_VISIBLE = 0x1

# Tiling
DEFAULT_TILE_SIZE = 512
TILE_NAME_TEMPLATE = "tile_{y}_{x}"
