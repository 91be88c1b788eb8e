"""
In-memory representation of a decoded sprite document.

Pixel buffers are numpy uint8 arrays shaped (rows, cols, 4) holding RGBA8
quadruplets in row-major order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from asetiler.constants import LAYER_FLAG_VISIBLE


@dataclass
class Layer:
    """
    Layer declared by a layer chunk.

    Layers are numbered in the order their chunks appear, which is the
    index cels refer to.

    Attributes:
        index: Position of the layer in declaration order
        name: Layer name
        flags: Raw layer flags (bit 0 = visible)
        layer_type: 0 normal, 1 group, 2 tilemap
        child_level: Nesting depth inside groups
        blend_mode: Blend mode id (informational only)
        opacity: Layer opacity 0-255 (informational only)
    """

    index: int
    name: str
    flags: int = LAYER_FLAG_VISIBLE
    layer_type: int = 0
    child_level: int = 0
    blend_mode: int = 0
    opacity: int = 255

    @property
    def visible(self) -> bool:
        """True when the visible flag is set."""
        return bool(self.flags & LAYER_FLAG_VISIBLE)


@dataclass(eq=False)
class Cel:
    """
    A layer's positioned pixel payload inside one frame.

    Attributes:
        layer_index: Paint order key (ascending = back to front)
        x: Left edge on the canvas, may be negative
        y: Top edge on the canvas, may be negative
        w: Width of the pixel payload
        h: Height of the pixel payload
        pixels: (h, w, 4) uint8 array, or None for an empty cel
        opacity: Cel opacity 0-255 (informational only)
        z_index: Z-index offset stored in the file (informational only)
    """

    layer_index: int
    x: int
    y: int
    w: int
    h: int
    pixels: Optional[np.ndarray] = None
    opacity: int = 255
    z_index: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the cel carries no visual contribution."""
        return self.pixels is None


@dataclass
class Frame:
    """One still image made of possibly overlapping cels."""

    cels: List[Cel] = field(default_factory=list)
    duration: int = 0

    def cel_for_layer(self, layer_index: int) -> Optional[Cel]:
        """Return the first cel painted on the given layer, if any."""
        for cel in self.cels:
            if cel.layer_index == layer_index:
                return cel
        return None


@dataclass
class Document:
    """
    Decoded document: canvas size, layers and frames.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        frames: Frames in file order
        layers: Layers in declaration order
        color_depth: Bits per pixel declared by the header
    """

    width: int
    height: int
    frames: List[Frame] = field(default_factory=list)
    layers: List[Layer] = field(default_factory=list)
    color_depth: int = 32


@dataclass(eq=False)
class FlatImage:
    """
    Composited RGBA8 canvas for a single frame.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        pixels: (height, width, 4) uint8 array
    """

    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def blank(cls, width: int, height: int) -> "FlatImage":
        """Create a fully transparent image."""
        return cls(width, height, np.zeros((height, width, 4), dtype=np.uint8))

    def to_bytes(self) -> bytes:
        """Return the raw width*height*4 byte blob."""
        return self.pixels.tobytes()
