"""
Decoded source images.

A SourceImage belongs to exactly one export. It is released when that export
finishes, whether it succeeded or not; use `open_source` to get that for free.
"""

import io
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError

logger = logging.getLogger(__name__)


class SourceImage:
    """Decoded RGBA raster with its natural (orientation-corrected) size."""

    def __init__(self, image: Image.Image, name: Optional[str] = None, format: Optional[str] = None):
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        self._image = image
        self.name = name
        self.format = format

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise ValueError("Source image has been released")
        return self._image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def closed(self) -> bool:
        return self._image is None

    def close(self):
        """Release the pixel buffer. Safe to call more than once."""
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> "SourceImage":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self) -> str:
        if self.closed:
            return f"SourceImage(name={self.name!r}, released)"
        return f"SourceImage(name={self.name!r}, {self.width}x{self.height})"


def load_source(data: bytes, name: Optional[str] = None) -> SourceImage:
    """
    Decode image bytes into a SourceImage.

    Only the first frame of multi-frame files is used. EXIF orientation is
    applied so width/height match what a viewer shows.

    Raises:
        DecodeError: if the bytes are empty or not a decodable image
    """
    if not data:
        raise DecodeError(f"Empty image data{f' for {name}' if name else ''}")

    try:
        with Image.open(io.BytesIO(data)) as raw:
            oriented = ImageOps.exif_transpose(raw)
            decoded = oriented.convert("RGBA")
            source_format = raw.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Failed to load image{f' {name}' if name else ''}: {e}") from e

    logger.debug(f"Decoded {name or 'image'}: {decoded.width}x{decoded.height}")
    return SourceImage(decoded, name=name, format=source_format)


@contextmanager
def open_source(data: bytes, name: Optional[str] = None) -> Iterator[SourceImage]:
    """Decode `data` and guarantee the decoded image is released on exit."""
    source = load_source(data, name=name)
    try:
        yield source
    finally:
        source.close()
