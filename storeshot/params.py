"""
Export parameters and per-device constants.

ExportParameters is the full, immutable description of one export. The
pipeline reads nothing else: no module-level settings, no shared state.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from PIL import ImageColor


class FitMode(Enum):
    """How the source is mapped onto the target canvas."""
    FILL = "fill"  # crop and stretch to exact target
    FIT = "fit"    # scale whole image, letterbox the rest


class OutputFormat(Enum):
    """Encodings the exporter can produce."""
    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"

    @property
    def pil_format(self) -> str:
        return self.name

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value

    @property
    def supports_alpha(self) -> bool:
        return self is not OutputFormat.JPEG

    @classmethod
    def parse(cls, value: "OutputFormat | str") -> "OutputFormat":
        """Accept an enum member, its value, a mime type or 'jpg'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key.startswith("image/"):
            key = key[len("image/"):]
        if key == "jpg":
            key = "jpeg"
        return cls(key)


class FitBackground(Enum):
    """Letterbox fill used in fit mode."""
    TRANSPARENT = "transparent"
    SOLID = "solid"
    GRADIENT = "gradient"


class DeviceFrame(Enum):
    """Decorative bezel drawn around the exported image."""
    NONE = "none"
    IPHONE = "iphone"
    IPAD = "ipad"
    ANDROID = "android"


@dataclass(frozen=True)
class FramePadding:
    """Bezel insets in pixels."""
    top: int
    right: int
    bottom: int
    left: int

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom


FRAME_PADDING: Dict[DeviceFrame, FramePadding] = {
    DeviceFrame.NONE: FramePadding(top=0, right=0, bottom=0, left=0),
    DeviceFrame.IPHONE: FramePadding(top=52, right=40, bottom=48, left=40),
    DeviceFrame.IPAD: FramePadding(top=72, right=60, bottom=72, left=60),
    DeviceFrame.ANDROID: FramePadding(top=44, right=32, bottom=44, left=32),
}

FRAME_CORNER_RADIUS: Dict[DeviceFrame, int] = {
    DeviceFrame.IPHONE: 36,
    DeviceFrame.IPAD: 32,
    DeviceFrame.ANDROID: 28,
}

BEZEL_COLOR = "#1a1a1a"

DEFAULT_SOLID_COLOR = "#000000"
DEFAULT_GRADIENT_START = "#1a1a2e"
DEFAULT_GRADIENT_END = "#16213e"
DEFAULT_QUALITY = 82

ZOOM_MIN_FACTOR = 0.5
ZOOM_MAX_FACTOR = 2.0

# Range offered to users; values outside it are still accepted and clamped
ZOOM_UI_RANGE = (80, 120)


def clamp_zoom(zoom_percent: float) -> float:
    """Convert a zoom percentage to a factor in [0.5, 2.0]."""
    return max(ZOOM_MIN_FACTOR, min(ZOOM_MAX_FACTOR, zoom_percent / 100))


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Invalid {enum_cls.__name__} '{value}', expected one of: {allowed}") from None


@dataclass(frozen=True)
class ExportParameters:
    """Everything needed to export one image."""
    target_width: int
    target_height: int
    mode: FitMode = FitMode.FILL
    output_format: OutputFormat = OutputFormat.WEBP
    quality: int = DEFAULT_QUALITY
    background: FitBackground = FitBackground.TRANSPARENT
    solid_color: str = DEFAULT_SOLID_COLOR
    gradient_start: str = DEFAULT_GRADIENT_START
    gradient_end: str = DEFAULT_GRADIENT_END
    device_frame: DeviceFrame = DeviceFrame.NONE
    zoom: float = 100

    def __post_init__(self):
        # Accept plain strings from forms and JSON
        object.__setattr__(self, "mode", _coerce(FitMode, self.mode))
        try:
            object.__setattr__(self, "output_format", OutputFormat.parse(self.output_format))
        except ValueError:
            raise ValueError(f"Invalid output format '{self.output_format}', expected webp, jpeg or png") from None
        object.__setattr__(self, "background", _coerce(FitBackground, self.background))
        object.__setattr__(self, "device_frame", _coerce(DeviceFrame, self.device_frame))

        try:
            width, height = int(self.target_width), int(self.target_height)
        except (TypeError, ValueError):
            raise ValueError(
                f"Invalid target size {self.target_width}x{self.target_height}, expected integers"
            ) from None
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Target size must be positive, got {self.target_width}x{self.target_height}"
            )
        object.__setattr__(self, "target_width", width)
        object.__setattr__(self, "target_height", height)
        try:
            object.__setattr__(self, "quality", int(self.quality))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid quality '{self.quality}', expected an integer") from None
        try:
            zoom = float(self.zoom)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid zoom '{self.zoom}', expected a percentage") from None
        if not math.isfinite(zoom):
            raise ValueError(f"Invalid zoom '{self.zoom}', expected a finite percentage")
        object.__setattr__(self, "zoom", zoom)

        for name in ("solid_color", "gradient_start", "gradient_end"):
            color = getattr(self, name)
            try:
                ImageColor.getrgb(color)
            except ValueError:
                raise ValueError(f"Invalid color for {name}: '{color}'") from None

    @property
    def target_size(self) -> Tuple[int, int]:
        return (self.target_width, self.target_height)

    @property
    def zoom_factor(self) -> float:
        return clamp_zoom(self.zoom)

    @property
    def padding(self) -> FramePadding:
        return FRAME_PADDING[self.device_frame]

    @property
    def framed_size(self) -> Tuple[int, int]:
        """Final output size once the device frame (if any) is applied."""
        pad = self.padding
        return (self.target_width + pad.horizontal, self.target_height + pad.vertical)

    @property
    def corner_radius(self) -> Optional[int]:
        return FRAME_CORNER_RADIUS.get(self.device_frame)
