"""
Packaging - filenames, batch sequencing and ZIP archives.

Batches are exported strictly one after another so only one decoded source
and its working surfaces are alive at a time.
"""

import io
import logging
import os
import re
import zipfile
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from .encoder import EncodedResult
from .errors import ExportError
from .exporter import export_processed
from .params import ExportParameters, OutputFormat

logger = logging.getLogger(__name__)

ExportFn = Callable[[bytes, ExportParameters, Optional[str]], Awaitable[EncodedResult]]


@dataclass
class BatchResult:
    """Outcome of a batch export."""
    entries: List[Tuple[str, EncodedResult]] = field(default_factory=list)
    failures: List[Tuple[str, ExportError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def format_bytes(size: float) -> str:
    """Human-readable byte count: '0 B', '512 B', '1.50 KB', '2.00 MB'."""
    if size is None or size <= 0 or size != size or size == float("inf"):
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    i = 0
    value = float(size)
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.0f} {units[i]}" if i == 0 else f"{value:.2f} {units[i]}"


def output_filename(
    original_name: Optional[str],
    width: int,
    height: int,
    output_format: OutputFormat,
    index: Optional[int] = None,
) -> str:
    """
    Build `{basename}_{W}x{H}.{ext}` for an exported file.

    Args:
        original_name: Uploaded file name (directories are dropped)
        width, height: Target size (unframed)
        output_format: Format, for the extension
        index: Position in a batch; used for the fallback name
    """
    base = os.path.basename(original_name or "")
    base = re.sub(r"\.[^.]+$", "", base)
    if not base:
        base = "image" if index is None else f"image_{index + 1}"
    return f"{base}_{width}x{height}.{OutputFormat.parse(output_format).extension}"


def _unique(name: str, used: set) -> str:
    if name not in used:
        return name
    stem, ext = os.path.splitext(name)
    n = 2
    while f"{stem}-{n}{ext}" in used:
        n += 1
    return f"{stem}-{n}{ext}"


def build_archive(entries: Sequence[Tuple[str, EncodedResult]]) -> bytes:
    """ZIP the encoded results under their file names."""
    buffer = io.BytesIO()
    used: set = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, result in entries:
            arcname = _unique(name, used)
            used.add(arcname)
            zf.writestr(arcname, result.data)
    logger.info(f"Packaged {len(entries)} files into archive ({format_bytes(buffer.tell())})")
    return buffer.getvalue()


async def export_batch(
    items: Sequence[Tuple[str, bytes]],
    params: ExportParameters,
    stop_on_error: bool = True,
    export: ExportFn = export_processed,
) -> BatchResult:
    """
    Export several images with the same parameters, one at a time.

    Args:
        items: (original file name, file bytes) pairs
        params: Shared export parameters
        stop_on_error: Re-raise the first failure instead of recording it
        export: Single-image export coroutine

    Returns:
        BatchResult with named entries and any recorded failures
    """
    result = BatchResult()
    for i, (name, data) in enumerate(items):
        filename = output_filename(name, params.target_width, params.target_height, params.output_format, index=i)
        try:
            encoded = await export(data, params, name)
        except ExportError as e:
            if stop_on_error:
                raise
            logger.warning(f"Skipping {name or filename}: {e}")
            result.failures.append((name or filename, e))
            continue
        result.entries.append((filename, encoded))

    logger.info(f"Batch finished: {len(result.entries)} exported, {len(result.failures)} failed")
    return result
