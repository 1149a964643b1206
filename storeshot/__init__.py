# StoreShot Export Module
# Store screenshot resizing, letterboxing, device framing and encoding with Pillow

from .errors import ExportError, DecodeError, UnsupportedSurfaceError, EncodingError
from .params import (
    ExportParameters,
    FitMode,
    OutputFormat,
    FitBackground,
    DeviceFrame,
    FramePadding,
    FRAME_PADDING,
)
from .geometry import Rect, DrawPlan, resolve, resolve_fit, resolve_fill
from .encoder import EncodedResult, encode
from .source import SourceImage, load_source, open_source
from .exporter import ExportStage, render, export_image, export_processed
from .presets import StorePresets, get_dimensions, get_preset_options
from .packager import BatchResult, build_archive, export_batch, output_filename
from .handles import HandleRegistry
from .observer import ExportObserver, LoggingObserver, NullObserver

__all__ = [
    "ExportError",
    "DecodeError",
    "UnsupportedSurfaceError",
    "EncodingError",
    "ExportParameters",
    "FitMode",
    "OutputFormat",
    "FitBackground",
    "DeviceFrame",
    "FramePadding",
    "FRAME_PADDING",
    "Rect",
    "DrawPlan",
    "resolve",
    "resolve_fit",
    "resolve_fill",
    "EncodedResult",
    "encode",
    "SourceImage",
    "load_source",
    "open_source",
    "ExportStage",
    "render",
    "export_image",
    "export_processed",
    "StorePresets",
    "get_dimensions",
    "get_preset_options",
    "BatchResult",
    "build_archive",
    "export_batch",
    "output_filename",
    "HandleRegistry",
    "ExportObserver",
    "LoggingObserver",
    "NullObserver",
]
