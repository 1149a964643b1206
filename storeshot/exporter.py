"""
Export orchestrator - runs one image through the whole pipeline.

Workflow:
1. Load: decode the source bytes
2. Resolve: compute crop or placement rectangles
3. Paint: letterbox background (fit mode only)
4. Draw: composite the source onto the target surface
5. Frame: wrap in a device bezel (if one is selected)
6. Encode: serialize to the output format

export_processed runs load, render and encode in worker threads so a large
resample never blocks the event loop.

Each call is independent. Nothing is cached or shared between calls, and a
failure at any stage raises without producing output.
"""

import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from PIL import Image

from .background import paint_background
from .encoder import EncodedResult, encode
from .errors import ExportError
from .frame import apply_device_frame
from .geometry import resolve
from .params import DeviceFrame, ExportParameters, FitBackground, FitMode
from .source import SourceImage, load_source
from .surface import clear, draw_fill, draw_fit, new_surface

logger = logging.getLogger(__name__)


class ExportStage(Enum):
    """Pipeline stages, in execution order."""
    LOADING = "loading"
    RESOLVING = "resolving"
    PAINTING = "painting"
    DRAWING = "drawing"
    FRAMING = "framing"
    ENCODING = "encoding"
    DONE = "done"


@contextmanager
def _stage(stage: ExportStage) -> Iterator[None]:
    """Tag export errors raised inside the block with `stage`."""
    logger.debug(f"Export stage: {stage.value}")
    try:
        yield
    except ExportError as e:
        if e.stage is None:
            e.stage = stage
        raise


def render(source: SourceImage, params: ExportParameters) -> Image.Image:
    """
    Compose the final (unencoded) surface for `source`.

    Args:
        source: Decoded source image
        params: Export parameters

    Returns:
        RGBA image of params.framed_size
    """
    with _stage(ExportStage.RESOLVING):
        plan = resolve(source.width, source.height, params)
        surface = new_surface(*params.target_size)

    if plan.mode is FitMode.FIT:
        with _stage(ExportStage.PAINTING):
            surface = paint_background(surface, params)
        with _stage(ExportStage.DRAWING):
            if params.background is FitBackground.TRANSPARENT:
                surface = clear(surface)
            surface = draw_fit(surface, source.image, plan.dest_rect)
    else:
        with _stage(ExportStage.DRAWING):
            surface = draw_fill(clear(surface), source.image, plan.source_rect)

    if params.device_frame is not DeviceFrame.NONE:
        with _stage(ExportStage.FRAMING):
            surface = apply_device_frame(surface, params.device_frame)

    return surface


def export_image(source: SourceImage, params: ExportParameters) -> EncodedResult:
    """Render and encode an already decoded source."""
    surface = render(source, params)
    with _stage(ExportStage.ENCODING):
        return encode(surface, params.output_format, params.quality)


async def export_processed(
    data: bytes,
    params: ExportParameters,
    name: Optional[str] = None,
) -> EncodedResult:
    """
    Export one image from its encoded bytes.

    Decoding, rendering and encoding each run in a worker thread so the
    event loop stays responsive. The decoded source is released
    before this returns, on success and on failure.

    Args:
        data: Source file contents
        params: Export parameters
        name: Optional source name, used in logs and errors

    Returns:
        EncodedResult

    Raises:
        DecodeError, UnsupportedSurfaceError, EncodingError
    """
    label = name or "image"
    logger.info(
        f"Exporting {label}: {params.target_width}x{params.target_height} "
        f"mode={params.mode.value} format={params.output_format.value} "
        f"frame={params.device_frame.value} zoom={params.zoom}"
    )

    with _stage(ExportStage.LOADING):
        source = await asyncio.to_thread(load_source, data, name)

    try:
        surface = await asyncio.to_thread(render, source, params)
    finally:
        source.close()

    with _stage(ExportStage.ENCODING):
        result = await asyncio.to_thread(encode, surface, params.output_format, params.quality)

    logger.info(f"Exported {label}: {result.width}x{result.height} {result.mime_type}, {result.size} bytes")
    logger.debug(f"Export stage: {ExportStage.DONE.value}")
    return result
