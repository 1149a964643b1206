"""
Export error taxonomy.

Every error is scoped to a single export call. Callers decide whether a
failure aborts a batch or is recorded and skipped.
"""

from enum import Enum
from typing import Optional


class ExportError(Exception):
    """Base class for failures inside one export call."""

    def __init__(self, message: str, stage: Optional[Enum] = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage is not None:
            return f"{message} (stage: {getattr(self.stage, 'value', self.stage)})"
        return message


class DecodeError(ExportError):
    """Source image cannot be read or decoded."""


class UnsupportedSurfaceError(ExportError):
    """A drawing surface of the requested size cannot be created."""


class EncodingError(ExportError):
    """The final surface could not be serialized to the requested format."""
