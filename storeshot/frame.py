"""
Device frame compositing.

Wraps a finished target-sized image in a flat bezel: a larger surface filled
with the bezel color, the image clipped to a rounded screen rectangle, and
for the iPhone frame a notch pill cutting into the top of the screen.
"""

import logging
from typing import Optional, Tuple

from PIL import Image, ImageChops, ImageDraw

from .geometry import Rect, round_half_up
from .params import (
    BEZEL_COLOR,
    FRAME_CORNER_RADIUS,
    FRAME_PADDING,
    DeviceFrame,
)
from .surface import new_surface

logger = logging.getLogger(__name__)

NOTCH_MAX_WIDTH = 120
NOTCH_WIDTH_RATIO = 0.35
NOTCH_HEIGHT = 28
NOTCH_BLEED = 2  # pixels the notch extends above the screen edge
NOTCH_RADIUS = 14


def framed_size(width: int, height: int, frame: DeviceFrame) -> Tuple[int, int]:
    """Output size after `frame` is applied to a width x height image."""
    pad = FRAME_PADDING[frame]
    return (width + pad.horizontal, height + pad.vertical)


def notch_rect(width: int, frame: DeviceFrame) -> Optional[Rect]:
    """
    Notch rectangle on the framed surface, or None for frames without one.

    Args:
        width: Width of the unframed image
        frame: Device frame
    """
    if frame is not DeviceFrame.IPHONE:
        return None

    pad = FRAME_PADDING[frame]
    notch_w = max(1, round_half_up(min(NOTCH_MAX_WIDTH, width * NOTCH_WIDTH_RATIO)))
    x = pad.left + round_half_up((width - notch_w) / 2)
    y = pad.top - NOTCH_BLEED
    return Rect(x, y, notch_w, NOTCH_HEIGHT + 2 * NOTCH_BLEED)


def _screen_mask(size: Tuple[int, int], screen: Rect, radius: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    draw = ImageDraw.Draw(mask)
    draw.rounded_rectangle([screen.x, screen.y, screen.right - 1, screen.bottom - 1], radius=radius, fill=255)
    return mask


def apply_device_frame(image: Image.Image, frame: DeviceFrame) -> Image.Image:
    """
    Composite `image` into a device bezel.

    Args:
        image: RGBA image at target size
        frame: Device frame; NONE returns the image unchanged

    Returns:
        New, larger RGBA surface (or `image` itself for NONE)
    """
    if frame is DeviceFrame.NONE:
        return image

    pad = FRAME_PADDING[frame]
    width, height = image.size
    size = framed_size(width, height, frame)
    screen = Rect(pad.left, pad.top, width, height)

    framed = new_surface(*size, color=BEZEL_COLOR)

    # Screen layer: the image at its offset, alpha cut to the rounded screen
    layer = new_surface(*size)
    layer.paste(image, (pad.left, pad.top))
    mask = _screen_mask(size, screen, FRAME_CORNER_RADIUS[frame])
    layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
    framed = Image.alpha_composite(framed, layer)

    notch = notch_rect(width, frame)
    if notch is not None:
        draw = ImageDraw.Draw(framed)
        draw.rounded_rectangle(
            [notch.x, notch.y, notch.right - 1, notch.bottom - 1],
            radius=NOTCH_RADIUS,
            fill=BEZEL_COLOR,
        )

    logger.debug(f"Framed {width}x{height} as {frame.value} -> {size[0]}x{size[1]}")
    return framed
