from fastapi import FastAPI, HTTPException, File, UploadFile, Form, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List, Tuple
import logging
import traceback
from urllib.parse import quote

from storeshot import (
    ExportParameters, FitMode, OutputFormat, FitBackground, DeviceFrame,
    DecodeError, UnsupportedSurfaceError, EncodingError,
    HandleRegistry, LoggingObserver, export_processed, export_batch, build_archive,
    load_source, output_filename, get_dimensions, get_preset_options,
)
from storeshot.api_models import (
    ExportOptionsResponse, SourceInfoResponse, PreviewItem, PreviewResponse,
)
from storeshot.packager import format_bytes
from storeshot.params import (
    DEFAULT_SOLID_COLOR, DEFAULT_GRADIENT_START, DEFAULT_GRADIENT_END, ZOOM_UI_RANGE,
)
from storeshot.presets import grouped_presets


class Settings(BaseSettings):
    log_level: str = "INFO"
    default_preset: str = "ios_iphone_69"
    default_format: str = "webp"
    default_quality: int = 82
    handle_grace_seconds: float = 1.0  # delay before a released handle is freed
    handle_max_age_seconds: float = 300.0  # unreleased handles are freed after this
    handle_max_entries: int = 256
    batch_archive_name: str = "storeshot_batch.zip"
    max_upload_bytes: int = 50 * 1024 * 1024
    cors_origins: str = "*"  # Comma-separated
    host: str = "127.0.0.1"  # Local companion service, keep off public interfaces
    port: int = 8000

    model_config = SettingsConfigDict(env_prefix="STORESHOT_", env_file=".env", extra="ignore")


settings = Settings()

# Logging setup
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="StoreShot Processor", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-StoreShot-Failed"],
)

# Initialize services
registry = HandleRegistry(
    grace_seconds=settings.handle_grace_seconds,
    max_age=settings.handle_max_age_seconds,
    max_entries=settings.handle_max_entries,
)
observer = LoggingObserver()


def export_parameters(
    preset: Optional[str] = Form(None),
    width: Optional[int] = Form(None),
    height: Optional[int] = Form(None),
    mode: str = Form(FitMode.FILL.value),
    output_format: str = Form(settings.default_format),
    quality: int = Form(settings.default_quality),
    background: str = Form(FitBackground.TRANSPARENT.value),
    solid_color: str = Form(DEFAULT_SOLID_COLOR),
    gradient_start: str = Form(DEFAULT_GRADIENT_START),
    gradient_end: str = Form(DEFAULT_GRADIENT_END),
    device_frame: str = Form(DeviceFrame.NONE.value),
    zoom: float = Form(100),
) -> ExportParameters:
    """Build ExportParameters from multipart form fields."""
    try:
        target_w, target_h = get_dimensions(preset=preset or settings.default_preset, width=width, height=height)
        return ExportParameters(
            target_width=target_w,
            target_height=target_h,
            mode=mode,
            output_format=output_format,
            quality=quality,
            background=background,
            solid_color=solid_color,
            gradient_start=gradient_start,
            gradient_end=gradient_end,
            device_frame=device_frame,
            zoom=zoom,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


async def _read_upload(upload: UploadFile) -> bytes:
    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"{upload.filename} is {format_bytes(len(content))}, limit is {format_bytes(settings.max_upload_bytes)}",
        )
    return content


def _http_error(e: Exception, action: str) -> HTTPException:
    """Map an export failure to an HTTP error."""
    if isinstance(e, DecodeError):
        return HTTPException(status_code=400, detail=f"{action} failed: {e}")
    if isinstance(e, UnsupportedSurfaceError):
        return HTTPException(status_code=503, detail=f"{action} failed: {e}")
    if isinstance(e, EncodingError):
        return HTTPException(status_code=500, detail=f"{action} failed: {e}")
    if isinstance(e, ValueError):
        return HTTPException(status_code=422, detail=f"{action} failed: {e}")

    tb = traceback.format_exc()
    logger.error(f"{action} error: {e}")
    logger.error(f"Traceback:\n{tb}")
    return HTTPException(status_code=500, detail=f"{action} failed: {e}")


def _attachment(filename: str) -> dict:
    quoted = quote(filename)
    if quoted != filename:
        return {"Content-Disposition": f"attachment; filename*=utf-8''{quoted}"}
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "storeshot-processor"}


@app.get("/")
async def root():
    return {
        "service": "StoreShot Processor",
        "version": app.version,
        "description": "Resize, letterbox, frame and re-encode store screenshots locally",
        "endpoints": [
            "/export/options", "/inspect", "/export", "/export/preview",
            "/preview/{handle}", "/export/batch", "/health",
        ],
        "config": {
            "default_preset": settings.default_preset,
            "default_format": settings.default_format,
            "default_quality": settings.default_quality,
        },
    }


@app.get("/export/options", response_model=ExportOptionsResponse)
async def get_export_options():
    """
    Get available options for screenshot export.

    Returns presets, modes, formats, backgrounds, frames and defaults.
    """
    return ExportOptionsResponse(
        presets=get_preset_options(),
        groups=grouped_presets(),
        modes=[m.value for m in FitMode],
        formats=[f.value for f in OutputFormat],
        backgrounds=[b.value for b in FitBackground],
        frames=[f.value for f in DeviceFrame],
        zoom_range=list(ZOOM_UI_RANGE),
        defaults={
            "preset": settings.default_preset,
            "mode": FitMode.FILL.value,
            "output_format": settings.default_format,
            "quality": settings.default_quality,
            "background": FitBackground.TRANSPARENT.value,
            "solid_color": DEFAULT_SOLID_COLOR,
            "gradient_start": DEFAULT_GRADIENT_START,
            "gradient_end": DEFAULT_GRADIENT_END,
            "device_frame": DeviceFrame.NONE.value,
            "zoom": 100,
        },
    )


@app.post("/inspect", response_model=SourceInfoResponse)
async def inspect_source(file: UploadFile = File(...)):
    """Report the natural size and byte size of an uploaded image."""
    content = await _read_upload(file)
    try:
        source = load_source(content, name=file.filename)
    except DecodeError as e:
        raise _http_error(e, "Inspect")

    with source:
        return SourceInfoResponse(
            filename=file.filename,
            width=source.width,
            height=source.height,
            size=len(content),
            size_label=format_bytes(len(content)),
            format=source.format,
        )


@app.post("/export")
async def export_single(
    file: UploadFile = File(...),
    params: ExportParameters = Depends(export_parameters),
):
    """
    Export one image and return it as a download.

    The filename follows {basename}_{W}x{H}.{ext}.
    """
    observer.on_event(
        "download_clicked",
        target=f"{params.target_width}x{params.target_height}",
        mode=params.mode.value,
        format=params.output_format.value,
        quality=params.quality,
    )
    content = await _read_upload(file)

    try:
        result = await export_processed(content, params, name=file.filename)
    except Exception as e:
        observer.on_event("export_failed", error=type(e).__name__)
        raise _http_error(e, "Export")

    filename = output_filename(file.filename, params.target_width, params.target_height, params.output_format)
    observer.on_event("download_completed", out_size=result.size)
    return Response(content=result.data, media_type=result.mime_type, headers=_attachment(filename))


@app.post("/export/preview", response_model=PreviewResponse)
async def export_preview(
    files: List[UploadFile] = File(...),
    replace: Optional[str] = Form(None),  # comma-separated handles from the previous preview
    params: ExportParameters = Depends(export_parameters),
):
    """
    Render previews for every uploaded image.

    Previews are held under handles until released. Handles passed in
    `replace` belong to the previous preview and are released first.
    """
    observer.on_event(
        "preview_clicked",
        target=f"{params.target_width}x{params.target_height}",
        mode=params.mode.value,
        format=params.output_format.value,
        count=len(files),
    )

    previous = [h.strip() for h in (replace or "").split(",") if h.strip()]
    registry.release_all(previous)

    previews: List[PreviewItem] = []
    try:
        for i, upload in enumerate(files):
            content = await _read_upload(upload)
            result = await export_processed(content, params, name=upload.filename)
            handle = registry.register(result)
            previews.append(PreviewItem(
                handle=handle,
                url=f"/preview/{handle}",
                filename=output_filename(
                    upload.filename, params.target_width, params.target_height, params.output_format, index=i
                ),
                source_name=upload.filename,
                mime_type=result.mime_type,
                width=result.width,
                height=result.height,
                size=result.size,
            ))
    except Exception as e:
        # No partial preview sets
        registry.release_all([p.handle for p in previews], delay=0)
        if isinstance(e, HTTPException):
            raise
        observer.on_event("export_failed", error=type(e).__name__)
        raise _http_error(e, "Preview")

    observer.on_event("preview_ready", count=len(previews))
    return PreviewResponse(status="ok", previews=previews, released=len(previous))


@app.get("/preview/{handle}")
async def get_preview(handle: str):
    """Serve a rendered preview by handle."""
    result = registry.get(handle)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Unknown or released preview: {handle}")
    return Response(content=result.data, media_type=result.mime_type)


@app.delete("/preview/{handle}")
async def release_preview(handle: str):
    """Release a preview handle; it is freed after the grace period."""
    if handle not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown or released preview: {handle}")
    registry.release(handle)
    return {"status": "released", "handle": handle}


@app.post("/export/batch")
async def export_batch_archive(
    files: List[UploadFile] = File(...),
    stop_on_error: bool = Form(True),
    params: ExportParameters = Depends(export_parameters),
):
    """
    Export every uploaded image and return them as one ZIP.

    Images are processed one at a time. With stop_on_error=false, files that
    fail are left out and listed in the X-StoreShot-Failed header.
    """
    observer.on_event(
        "batch_download_clicked",
        count=len(files),
        target=f"{params.target_width}x{params.target_height}",
        mode=params.mode.value,
        format=params.output_format.value,
    )

    items: List[Tuple[str, bytes]] = []
    for upload in files:
        items.append((upload.filename, await _read_upload(upload)))

    try:
        batch = await export_batch(items, params, stop_on_error=stop_on_error)
    except Exception as e:
        observer.on_event("export_failed", error=type(e).__name__)
        raise _http_error(e, "Batch export")

    if not batch.entries:
        names = ", ".join(name for name, _ in batch.failures)
        raise HTTPException(status_code=400, detail=f"Batch export failed: no image could be exported ({names})")

    archive = build_archive(batch.entries)
    headers = _attachment(settings.batch_archive_name)
    if batch.failures:
        headers["X-StoreShot-Failed"] = ",".join(quote(name) for name, _ in batch.failures)

    observer.on_event("batch_download_completed", count=len(batch.entries), failed=len(batch.failures))
    return Response(content=archive, media_type="application/zip", headers=headers)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
