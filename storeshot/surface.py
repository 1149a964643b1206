"""
Render surfaces and the two draw operations.

Surfaces are RGBA Pillow images. Each operation returns a new surface and
leaves its input untouched, so a surface handed to the next stage is never
aliased by the previous one.
"""

import logging
from typing import Tuple, Union

from PIL import Image

from .errors import UnsupportedSurfaceError
from .geometry import Rect

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)

# Closest Pillow match for a browser canvas with high smoothing quality
RESAMPLE = Image.Resampling.LANCZOS


def new_surface(
    width: int,
    height: int,
    color: Union[str, Tuple[int, ...]] = TRANSPARENT,
) -> Image.Image:
    """
    Create an RGBA surface.

    Raises:
        UnsupportedSurfaceError: if Pillow cannot allocate the surface
    """
    try:
        return Image.new("RGBA", (width, height), color)
    except (ValueError, MemoryError, OSError) as e:
        raise UnsupportedSurfaceError(f"Cannot create {width}x{height} surface: {e}") from e


def clear(surface: Image.Image) -> Image.Image:
    """Fully transparent surface of the same size."""
    return new_surface(surface.width, surface.height)


def _composite_clipped(surface: Image.Image, layer: Image.Image, x: int, y: int) -> Image.Image:
    """Source-over `layer` at (x, y), discarding whatever falls outside `surface`."""
    left = max(0, x)
    top = max(0, y)
    right = min(surface.width, x + layer.width)
    bottom = min(surface.height, y + layer.height)

    result = surface.copy()
    if right <= left or bottom <= top:
        logger.debug(f"Layer at ({x}, {y}) is fully outside {surface.size}")
        return result

    visible = layer.crop((left - x, top - y, right - x, bottom - y))
    result.alpha_composite(visible, dest=(left, top))
    return result


def draw_fit(surface: Image.Image, source: Image.Image, rect: Rect) -> Image.Image:
    """Scale the whole source to `rect` and composite it onto the surface."""
    scaled = source.resize(rect.size, RESAMPLE)
    return _composite_clipped(surface, scaled, rect.x, rect.y)


def draw_fill(surface: Image.Image, source: Image.Image, crop: Rect) -> Image.Image:
    """Stretch the `crop` region of the source over the entire surface."""
    stretched = source.resize(surface.size, RESAMPLE, box=crop.box)
    return _composite_clipped(surface, stretched, 0, 0)
