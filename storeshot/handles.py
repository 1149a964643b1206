"""
Short-lived handles for encoded blobs.

Previews and downloads are served by handle. A handle must be released once
its consumer is done; the blob is then freed after a grace period so an
in-flight fetch can still complete. Handles a client never releases are
freed once they reach `max_age`, and the registry never holds more than
`max_entries` blobs; the oldest are evicted first.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, Optional

from .encoder import EncodedResult

logger = logging.getLogger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class HandleRegistry:
    """In-memory map of handle id -> EncodedResult with delayed release."""

    def __init__(
        self,
        grace_seconds: float = 1.0,
        max_age: Optional[float] = 300.0,
        max_entries: Optional[int] = 256,
    ):
        self.grace_seconds = grace_seconds
        self.max_age = max_age
        self.max_entries = max_entries
        self._blobs: Dict[str, EncodedResult] = {}
        self._pending: Dict[str, asyncio.TimerHandle] = {}
        self._expiry: Dict[str, asyncio.TimerHandle] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, handle: str) -> bool:
        return handle in self._blobs

    def register(self, result: EncodedResult) -> str:
        if self.max_entries is not None:
            # Insertion order is age order
            while self._blobs and len(self._blobs) >= self.max_entries:
                oldest = next(iter(self._blobs))
                logger.info(f"Handle limit {self.max_entries} reached, evicting {oldest}")
                self._free(oldest)

        handle = uuid.uuid4().hex
        self._blobs[handle] = result

        loop = _running_loop()
        if self.max_age is not None and self.max_age > 0 and loop is not None:
            self._expiry[handle] = loop.call_later(self.max_age, self._expire, handle)

        logger.debug(f"Registered handle {handle} ({result.size} bytes)")
        return handle

    def get(self, handle: str) -> Optional[EncodedResult]:
        return self._blobs.get(handle)

    def _expire(self, handle: str):
        if handle in self._blobs:
            logger.info(f"Handle {handle} expired without being released")
        self._free(handle)

    def _free(self, handle: str):
        for timers in (self._pending, self._expiry):
            timer = timers.pop(handle, None)
            if timer is not None:
                timer.cancel()
        if self._blobs.pop(handle, None) is not None:
            logger.debug(f"Freed handle {handle}")

    def release(self, handle: str, delay: Optional[float] = None):
        """
        Free `handle` after `delay` seconds (default: the grace period).

        Without a running event loop, or with a zero delay, the blob is freed
        immediately. Releasing an unknown or already released handle is a
        no-op.
        """
        if handle not in self._blobs or handle in self._pending:
            return

        delay = self.grace_seconds if delay is None else delay
        loop = _running_loop()
        if delay <= 0 or loop is None:
            self._free(handle)
            return
        self._pending[handle] = loop.call_later(delay, self._free, handle)

    def release_all(self, handles: Iterable[str], delay: Optional[float] = None):
        for handle in list(handles):
            self.release(handle, delay)

    def clear(self):
        """Free everything now, cancelling pending timers."""
        for timers in (self._pending, self._expiry):
            for timer in timers.values():
                timer.cancel()
            timers.clear()
        self._blobs.clear()

    @asynccontextmanager
    async def scoped(self, result: EncodedResult) -> AsyncIterator[str]:
        """Register `result` for the duration of the block, then release it."""
        handle = self.register(result)
        try:
            yield handle
        finally:
            self.release(handle)
