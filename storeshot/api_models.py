"""
Export API models for FastAPI endpoints.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class ExportOptionsResponse(BaseModel):
    """Response with available export options."""
    presets: List[dict]
    groups: Dict[str, List[dict]]
    modes: List[str]
    formats: List[str]
    backgrounds: List[str]
    frames: List[str]
    zoom_range: List[int]
    defaults: dict


class SourceInfoResponse(BaseModel):
    """Basic facts about an uploaded source image."""
    filename: Optional[str] = None
    width: int
    height: int
    size: int                       # bytes
    size_label: str                 # e.g. "1.25 MB"
    format: Optional[str] = None    # decoder format name, e.g. "PNG"


class PreviewItem(BaseModel):
    """One rendered preview, fetchable by handle."""
    handle: str
    url: str
    filename: str
    source_name: Optional[str] = None
    mime_type: str
    width: int
    height: int
    size: int


class PreviewResponse(BaseModel):
    """Response from preview generation."""
    status: str
    previews: List[PreviewItem] = Field(default_factory=list)
    released: int = 0               # previous handles scheduled for release
