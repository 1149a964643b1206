"""
Final encode of a rendered surface.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from PIL import Image, features

from .errors import EncodingError
from .params import OutputFormat

logger = logging.getLogger(__name__)

QUALITY_MIN = 40
QUALITY_MAX = 95

# Transparent pixels come out black in JPEG, as with a browser canvas
JPEG_MATTE = (0, 0, 0)


@dataclass(frozen=True)
class EncodedResult:
    """Encoded image bytes plus what they are."""
    data: bytes
    output_format: OutputFormat
    width: int
    height: int

    @property
    def mime_type(self) -> str:
        return self.output_format.mime_type

    @property
    def extension(self) -> str:
        return self.output_format.extension

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.width, self.height)


def effective_quality(output_format: OutputFormat, quality: int) -> Optional[int]:
    """Quality actually passed to the codec; None for PNG, which ignores it."""
    if output_format is OutputFormat.PNG:
        return None
    return max(QUALITY_MIN, min(QUALITY_MAX, int(quality)))


def _flatten(image: Image.Image, matte: Tuple[int, int, int]) -> Image.Image:
    if image.mode != "RGBA":
        return image.convert("RGB")
    rgb_image = Image.new("RGB", image.size, matte)
    rgb_image.paste(image, mask=image.getchannel("A"))
    return rgb_image


def encode(
    image: Image.Image,
    output_format: Union[OutputFormat, str],
    quality: int = 82,
) -> EncodedResult:
    """
    Serialize `image` to bytes.

    Args:
        image: Final RGBA surface
        output_format: webp, jpeg or png (mime types accepted)
        quality: Nominal 0-100; clamped to 40-95, ignored for PNG

    Returns:
        EncodedResult

    Raises:
        EncodingError: if the codec is unavailable or produces no output
    """
    fmt = OutputFormat.parse(output_format)
    q = effective_quality(fmt, quality)

    if fmt is OutputFormat.WEBP and not features.check("webp"):
        raise EncodingError("Pillow was built without WebP support")

    save_kwargs = {}
    if q is not None:
        save_kwargs["quality"] = q

    if not fmt.supports_alpha:
        image = _flatten(image, JPEG_MATTE)

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt.pil_format, **save_kwargs)
    except (OSError, ValueError, KeyError) as e:
        raise EncodingError(f"{fmt.value} encode failed: {e}") from e

    data = buffer.getvalue()
    if not data:
        raise EncodingError(f"{fmt.value} encoder produced no output")

    logger.debug(f"Encoded {image.width}x{image.height} as {fmt.value} (quality={q}): {len(data)} bytes")
    return EncodedResult(data=data, output_format=fmt, width=image.width, height=image.height)
