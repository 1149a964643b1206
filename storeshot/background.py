"""
Letterbox background painting for fit-mode exports.

Supports:
- Transparent: cleared surface, alpha kept by PNG/WebP, flattened by JPEG
- Solid: single color (any CSS color Pillow understands, alpha allowed)
- Gradient: vertical linear gradient, start color on the first row and end
  color on the last
"""

import logging
from typing import List, Tuple

from PIL import Image, ImageColor, ImageDraw

from .params import ExportParameters, FitBackground
from .surface import clear, new_surface

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


def parse_color(color: str) -> RGBA:
    """Parse a CSS color string to an RGBA tuple."""
    return ImageColor.getcolor(color, "RGBA")


def gradient_rows(start: str, end: str, height: int) -> List[RGBA]:
    """Color for each row of a top-to-bottom gradient."""
    c1 = parse_color(start)
    c2 = parse_color(end)
    span = max(height - 1, 1)

    rows = []
    for y in range(height):
        ratio = y / span
        rows.append(tuple(round(a + (b - a) * ratio) for a, b in zip(c1, c2)))
    return rows


def paint_background(surface: Image.Image, params: ExportParameters) -> Image.Image:
    """
    Return a new surface of the same size filled per `params.background`.

    Args:
        surface: Target-sized surface (only its size is used)
        params: Export parameters carrying the background policy and colors

    Returns:
        Painted surface, ready for the image to be drawn on top
    """
    width, height = surface.size

    if params.background is FitBackground.SOLID:
        return new_surface(width, height, parse_color(params.solid_color))

    if params.background is FitBackground.GRADIENT:
        bg = new_surface(width, height)
        draw = ImageDraw.Draw(bg)
        for y, color in enumerate(gradient_rows(params.gradient_start, params.gradient_end, height)):
            draw.line([(0, y), (width, y)], fill=color)
        logger.debug(f"Gradient {params.gradient_start} -> {params.gradient_end} over {height} rows")
        return bg

    return clear(surface)
