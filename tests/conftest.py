"""Pytest configuration and shared fixtures for testing."""
import struct
import zlib

import numpy as np
import pytest

from asetiler.constants import (
    FRAME_MAGIC,
    HEADER_MAGIC,
    HEADER_SIZE,
    CelType,
    ChunkType,
)


class AseBuilder:
    """Assemble Aseprite byte buffers in memory."""

    @staticmethod
    def solid(w, h, rgba):
        """Create an (h, w, 4) array filled with one color."""
        return np.tile(np.array(rgba, dtype=np.uint8), (h, w, 1))

    @staticmethod
    def chunk(chunk_type, payload):
        return struct.pack('<IH', len(payload) + 6, chunk_type) + payload

    @staticmethod
    def layer(name, flags=1, opacity=255):
        encoded = name.encode('utf-8')
        payload = struct.pack('<HHHHHHB3x', flags, 0, 0, 0, 0, 0, opacity)
        payload += struct.pack('<H', len(encoded)) + encoded
        return AseBuilder.chunk(ChunkType.LAYER, payload)

    @staticmethod
    def cel(layer_index, x, y, pixels=None, size=None, compressed=False, z_index=0):
        """Cel chunk; pixels is an (h, w, 4) array or None for an empty payload."""
        cel_type = CelType.COMPRESSED_IMAGE if compressed else CelType.RAW
        payload = struct.pack('<HhhBHh5x', layer_index, x, y, 255, cel_type, z_index)
        if pixels is None:
            w, h = size or (0, 0)
            payload += struct.pack('<HH', w, h)
        else:
            h, w = pixels.shape[:2]
            raw = np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()
            payload += struct.pack('<HH', w, h)
            payload += zlib.compress(raw) if compressed else raw
        return AseBuilder.chunk(ChunkType.CEL, payload)

    @staticmethod
    def linked_cel(layer_index, frame_position):
        payload = struct.pack('<HhhBHh5x', layer_index, 0, 0, 255, CelType.LINKED, 0)
        payload += struct.pack('<H', frame_position)
        return AseBuilder.chunk(ChunkType.CEL, payload)

    @staticmethod
    def frame(chunks, duration=100):
        body = b''.join(chunks)
        header = struct.pack('<IHHH2xI', 16 + len(body), FRAME_MAGIC,
                             min(len(chunks), 0xFFFF), duration, len(chunks))
        return header + body

    @staticmethod
    def document(width, height, frames, depth=32):
        body = b''.join(frames)
        header = struct.pack('<IHHHHH', HEADER_SIZE + len(body), HEADER_MAGIC,
                             len(frames), width, height, depth)
        return header.ljust(HEADER_SIZE, b'\x00') + body


@pytest.fixture
def ase():
    """Builder for in-memory Aseprite documents."""
    return AseBuilder


@pytest.fixture
def red():
    return (255, 0, 0, 255)


@pytest.fixture
def blue():
    return (0, 0, 255, 255)


@pytest.fixture
def two_layer_bytes(ase, red, blue):
    """8x6 canvas: red 4x4 background at (0,0), blue 4x4 on top at (2,2)."""
    frame = ase.frame([
        ase.layer('Background'),
        ase.layer('Foreground'),
        ase.cel(0, 0, 0, ase.solid(4, 4, red)),
        ase.cel(1, 2, 2, ase.solid(4, 4, blue)),
    ])
    return ase.document(8, 6, [frame])


@pytest.fixture
def random_image():
    """Factory for FlatImages filled with reproducible noise."""
    from asetiler.core.document import FlatImage

    def _make(width, height, seed=0):
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        return FlatImage(width, height, pixels)

    return _make
