"""
Export Observer Interface

Usage events are emitted by callers around exports, never by the pipeline.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ExportObserver(ABC):
    """Receives usage events from whatever drives the exporter."""

    @abstractmethod
    def on_event(self, name: str, **data) -> None:
        """
        Handle one event.

        Args:
            name: Event name, e.g. "download_clicked"
            data: Event fields (sizes, counts, parameters)
        """
        pass


class NullObserver(ExportObserver):
    """Drops every event."""

    def on_event(self, name: str, **data) -> None:
        pass


class LoggingObserver(ExportObserver):
    """Writes events to the log."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def on_event(self, name: str, **data) -> None:
        fields = " ".join(f"{k}={v}" for k, v in sorted(data.items()))
        logger.log(self.level, f"event={name} {fields}".rstrip())
