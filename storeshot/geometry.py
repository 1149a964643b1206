"""
Geometry resolution for fit and fill exports.

Handles:
1. Fit mode: where to draw the whole source inside the target
2. Fill mode: which part of the source to crop so it stretches onto the target
3. Zoom adjustment for both (in opposite directions, see below)

Zoom semantics differ by mode. In fit mode the image zooms: the drawn
rectangle grows with the factor and may spill past the target edges. In fill
mode the viewport zooms: the crop shrinks as the factor grows, so a higher
zoom crops in tighter.

Every coordinate is rounded exactly once, here, and drawn as-is.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .errors import DecodeError
from .params import ExportParameters, FitMode, clamp_zoom


@dataclass(frozen=True)
class Rect:
    """Integer rectangle in pixel space."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """PIL-style (left, upper, right, lower) box."""
        return (self.x, self.y, self.right, self.bottom)


@dataclass(frozen=True)
class DrawPlan:
    """Resolved geometry for one export."""
    mode: FitMode
    source_rect: Rect  # region of the source to sample
    dest_rect: Rect    # where that region lands on the target surface


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def resolve_fit(
    src_w: int,
    src_h: int,
    target_w: int,
    target_h: int,
    zoom: float = 100,
) -> Rect:
    """
    Destination rectangle for drawing the entire source inside the target.

    Args:
        src_w, src_h: Source dimensions
        target_w, target_h: Target surface dimensions
        zoom: Zoom percentage (clamped to 50-200)

    Returns:
        Rect on the target surface. With zoom > 100 it can extend past the
        target bounds; drawing clips it.
    """
    factor = clamp_zoom(zoom)
    src_aspect = src_w / src_h
    dst_aspect = target_w / target_h

    if src_aspect > dst_aspect:
        base_w = float(target_w)
        base_h = target_w / src_aspect
    else:
        base_h = float(target_h)
        base_w = target_h * src_aspect

    draw_w = max(1, round_half_up(base_w * factor))
    draw_h = max(1, round_half_up(base_h * factor))
    x = round_half_up((target_w - draw_w) / 2)
    y = round_half_up((target_h - draw_h) / 2)
    return Rect(x, y, draw_w, draw_h)


def resolve_fill(
    src_w: int,
    src_h: int,
    target_w: int,
    target_h: int,
    zoom: float = 100,
) -> Rect:
    """
    Source crop that matches the target aspect as closely as possible.

    Args:
        src_w, src_h: Source dimensions
        target_w, target_h: Target surface dimensions
        zoom: Zoom percentage (clamped to 50-200)

    Returns:
        Rect inside the source, centred and clamped to the source bounds.
    """
    factor = clamp_zoom(zoom)
    src_aspect = src_w / src_h
    dst_aspect = target_w / target_h

    if src_aspect > dst_aspect:
        # Source is wider: keep full height, trim the sides
        base_h = float(src_h)
        base_w = src_h * dst_aspect
    else:
        base_w = float(src_w)
        base_h = src_w / dst_aspect

    crop_w = max(1, round_half_up(min(src_w, base_w / factor)))
    crop_h = max(1, round_half_up(min(src_h, base_h / factor)))
    crop_x = max(0, min(src_w - crop_w, round_half_up((src_w - crop_w) / 2)))
    crop_y = max(0, min(src_h - crop_h, round_half_up((src_h - crop_h) / 2)))
    return Rect(crop_x, crop_y, crop_w, crop_h)


def resolve(src_w: int, src_h: int, params: ExportParameters) -> DrawPlan:
    """Resolve the draw plan for a source of the given size."""
    if src_w <= 0 or src_h <= 0:
        raise DecodeError(f"Source has no pixels ({src_w}x{src_h})")

    target_w, target_h = params.target_size

    if params.mode is FitMode.FIT:
        return DrawPlan(
            mode=FitMode.FIT,
            source_rect=Rect(0, 0, src_w, src_h),
            dest_rect=resolve_fit(src_w, src_h, target_w, target_h, params.zoom),
        )

    return DrawPlan(
        mode=FitMode.FILL,
        source_rect=resolve_fill(src_w, src_h, target_w, target_h, params.zoom),
        dest_rect=Rect(0, 0, target_w, target_h),
    )
