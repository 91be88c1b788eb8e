"""
Aseprite binary decoder.

Reads the header, frame and chunk structure directly from the documented
little-endian layout and builds a Document. Only layer and cel chunks carry
information the compositor needs; every other chunk is skipped by size.
"""
from __future__ import annotations

import logging
import struct
import zlib
from typing import List, Optional

import numpy as np

from asetiler.constants import (
    BYTES_PER_PIXEL,
    CHUNK_HEADER_SIZE,
    COLOR_DEPTH_RGBA,
    FRAME_HEADER_SIZE,
    FRAME_MAGIC,
    HEADER_MAGIC,
    HEADER_SIZE,
    CelType,
    ChunkType,
)
from asetiler.core.document import Cel, Document, Frame, Layer
from asetiler.core.errors import MalformedDocument, NoFrames

logger = logging.getLogger(__name__)

_HEADER = struct.Struct('<IHHHHH')
_FRAME_HEADER = struct.Struct('<IHHH2xI')
_CHUNK_HEADER = struct.Struct('<IH')
_LAYER = struct.Struct('<HHHHHHB3x')
_CEL = struct.Struct('<HhhBHh5x')
_U16 = struct.Struct('<H')
_SIZE = struct.Struct('<HH')


class _Reader:
    """Bounded cursor over a slice of the input buffer."""

    def __init__(self, data: memoryview, start: int, end: int):
        self.data = data
        self.pos = start
        self.end = end

    @property
    def remaining(self) -> int:
        return self.end - self.pos

    def unpack(self, fmt: struct.Struct, what: str) -> tuple:
        if self.remaining < fmt.size:
            raise MalformedDocument(f"Truncated {what}", self.pos)
        values = fmt.unpack_from(self.data, self.pos)
        self.pos += fmt.size
        return values

    def take(self, count: int, what: str) -> bytes:
        if count < 0 or self.remaining < count:
            raise MalformedDocument(f"Truncated {what}", self.pos)
        chunk = bytes(self.data[self.pos:self.pos + count])
        self.pos += count
        return chunk

    def rest(self) -> bytes:
        return self.take(self.remaining, "payload")


def decode(data: bytes) -> Document:
    """
    Parse an Aseprite byte buffer into a Document.

    Args:
        data: Complete contents of a .aseprite/.ase file

    Returns:
        Document with layers, frames and cels

    Raises:
        MalformedDocument: If the buffer does not follow the header/frame/chunk
            structure or holds data the decoder cannot represent
        NoFrames: If the document declares zero frames
    """
    view = memoryview(bytes(data))
    if len(view) < HEADER_SIZE:
        raise MalformedDocument(
            f"Buffer of {len(view)} bytes is shorter than the {HEADER_SIZE}-byte header"
        )

    file_size, magic, frame_count, width, height, depth = _HEADER.unpack_from(view, 0)
    if magic != HEADER_MAGIC:
        raise MalformedDocument(f"Bad header magic 0x{magic:04X}", 4)
    if file_size < HEADER_SIZE or file_size > len(view):
        raise MalformedDocument(
            f"Header declares {file_size} bytes but buffer holds {len(view)}", 0
        )
    if width == 0 or height == 0:
        raise MalformedDocument(f"Invalid canvas size {width}x{height}", 8)
    if depth != COLOR_DEPTH_RGBA:
        raise MalformedDocument(f"Unsupported color depth {depth} (only RGBA is decoded)", 12)

    if frame_count == 0:
        raise NoFrames("Document contains no frames")

    document = Document(width=width, height=height, color_depth=depth)

    logger.debug("Header: %dx%d, %d frame(s), %d bytes", width, height, frame_count, file_size)

    offset = HEADER_SIZE
    for frame_index in range(frame_count):
        frame, offset = _read_frame(view, offset, file_size, frame_index, document)
        document.frames.append(frame)

    logger.info(
        "Decoded %dx%d document: %d layer(s), %d frame(s)",
        width, height, len(document.layers), len(document.frames)
    )
    return document


def _read_frame(view: memoryview, offset: int, file_end: int,
                frame_index: int, document: Document):
    """Decode one frame starting at offset; return it with the next offset."""
    header = _Reader(view, offset, file_end)
    frame_bytes, magic, old_chunks, duration, new_chunks = header.unpack(
        _FRAME_HEADER, f"frame {frame_index} header"
    )
    if magic != FRAME_MAGIC:
        raise MalformedDocument(f"Bad magic 0x{magic:04X} in frame {frame_index}", offset + 4)
    if frame_bytes < FRAME_HEADER_SIZE or offset + frame_bytes > file_end:
        raise MalformedDocument(f"Frame {frame_index} length {frame_bytes} is out of range", offset)

    frame = Frame(duration=duration)
    frame_end = offset + frame_bytes
    chunk_count = new_chunks or old_chunks
    pos = offset + FRAME_HEADER_SIZE

    for _ in range(chunk_count):
        chunk_size, chunk_type = _Reader(view, pos, frame_end).unpack(_CHUNK_HEADER, "chunk header")
        if chunk_size < CHUNK_HEADER_SIZE or pos + chunk_size > frame_end:
            raise MalformedDocument(f"Chunk length {chunk_size} is out of range", pos)

        payload = _Reader(view, pos + CHUNK_HEADER_SIZE, pos + chunk_size)
        if chunk_type == ChunkType.LAYER:
            document.layers.append(_read_layer(payload, len(document.layers)))
        elif chunk_type == ChunkType.CEL:
            frame.cels.append(_read_cel(payload, document.frames))
        else:
            logger.debug("Skipping chunk 0x%04X (%d bytes)", chunk_type, chunk_size)
        pos += chunk_size

    return frame, frame_end


def _read_layer(reader: _Reader, index: int) -> Layer:
    flags, layer_type, child_level, _, _, blend_mode, opacity = reader.unpack(_LAYER, "layer chunk")
    (name_length,) = reader.unpack(_U16, "layer name")
    name = reader.take(name_length, "layer name").decode('utf-8', errors='replace')
    logger.debug("Layer %d: %r (flags=0x%X)", index, name, flags)
    return Layer(
        index=index,
        name=name,
        flags=flags,
        layer_type=layer_type,
        child_level=child_level,
        blend_mode=blend_mode,
        opacity=opacity,
    )


def _read_cel(reader: _Reader, previous_frames: List[Frame]) -> Cel:
    layer_index, x, y, opacity, cel_type, z_index = reader.unpack(_CEL, "cel chunk")

    if cel_type == CelType.LINKED:
        (frame_position,) = reader.unpack(_U16, "linked cel")
        source = _linked_source(previous_frames, frame_position, layer_index)
        return Cel(layer_index, source.x, source.y, source.w, source.h,
                   pixels=source.pixels, opacity=opacity, z_index=z_index)

    w, h = reader.unpack(_SIZE, "cel size")
    cel = Cel(layer_index, x, y, w, h, opacity=opacity, z_index=z_index)

    if cel_type == CelType.RAW:
        cel.pixels = _pixels(reader.rest(), w, h)
    elif cel_type == CelType.COMPRESSED_IMAGE:
        compressed = reader.rest()
        if compressed:
            try:
                raw = zlib.decompress(compressed)
            except zlib.error as exc:
                raise MalformedDocument(f"Corrupt compressed cel on layer {layer_index}: {exc}") from exc
            cel.pixels = _pixels(raw, w, h)
    elif cel_type == CelType.COMPRESSED_TILEMAP:
        logger.warning("Tilemap cel on layer %d is not supported; treating it as empty", layer_index)
    else:
        raise MalformedDocument(f"Unknown cel type {cel_type} on layer {layer_index}")

    return cel


def _pixels(raw: bytes, w: int, h: int) -> Optional[np.ndarray]:
    """Interpret raw bytes as an (h, w, 4) RGBA8 array; empty payloads give None."""
    if not raw or w == 0 or h == 0:
        return None
    expected = w * h * BYTES_PER_PIXEL
    if len(raw) != expected:
        raise MalformedDocument(
            f"Cel payload holds {len(raw)} bytes, expected {expected} for {w}x{h} RGBA"
        )
    return np.frombuffer(raw, dtype=np.uint8).reshape(h, w, BYTES_PER_PIXEL)


def _linked_source(frames: List[Frame], frame_position: int, layer_index: int) -> Cel:
    if frame_position >= len(frames):
        raise MalformedDocument(
            f"Linked cel on layer {layer_index} points to frame {frame_position}, "
            f"which has not been decoded"
        )
    source = frames[frame_position].cel_for_layer(layer_index)
    if source is None:
        raise MalformedDocument(
            f"Linked cel points to frame {frame_position}, which has no cel on layer {layer_index}"
        )
    return source
