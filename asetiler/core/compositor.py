"""
Layer compositing.

Cels are painted back to front in ascending layer order. A source pixel
with non-zero alpha replaces the destination outright; fully transparent
pixels leave it untouched. There is no alpha blending.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from asetiler.core.document import Cel, FlatImage, Frame, Layer

logger = logging.getLogger(__name__)


def paint_order(cels: Iterable[Cel]) -> List[Cel]:
    """Sort cels by layer index; cels sharing an index keep encounter order."""
    return sorted(cels, key=lambda cel: cel.layer_index)


def composite(frame: Frame, canvas_width: int, canvas_height: int,
              layers: Optional[List[Layer]] = None,
              include_hidden: bool = True) -> FlatImage:
    """
    Flatten a frame's cels into a single RGBA8 image.

    Args:
        frame: Frame whose cels are painted
        canvas_width: Output width in pixels
        canvas_height: Output height in pixels
        layers: Document layers, used only to look up visibility
        include_hidden: If False and layers are given, cels on hidden
            layers are skipped

    Returns:
        A new FlatImage; cel buffers are copied, never referenced
    """
    image = FlatImage.blank(canvas_width, canvas_height)
    hidden = set()
    if layers is not None and not include_hidden:
        hidden = {layer.index for layer in layers if not layer.visible}

    painted = 0
    for cel in paint_order(frame.cels):
        if cel.pixels is None or cel.layer_index in hidden:
            continue
        if _paint_cel(image, cel):
            painted += 1

    logger.debug("Composited %d of %d cel(s) onto %dx%d canvas",
                 painted, len(frame.cels), canvas_width, canvas_height)
    return image


def _paint_cel(image: FlatImage, cel: Cel) -> bool:
    """Copy the in-bounds, non-transparent part of a cel. Returns False if fully clipped."""
    # Clip the cel rectangle against the canvas
    left = max(cel.x, 0)
    top = max(cel.y, 0)
    right = min(cel.x + cel.w, image.width)
    bottom = min(cel.y + cel.h, image.height)
    if left >= right or top >= bottom:
        return False

    source = cel.pixels[top - cel.y:bottom - cel.y, left - cel.x:right - cel.x]
    target = image.pixels[top:bottom, left:right]
    opaque = source[..., 3] > 0
    target[opaque] = source[opaque]
    return True
