# core/cache.py

"""
Request deduplication and burst caching for read-only platform queries.

Several consumers tend to ask for the same permissions at the same moment
(every gated endpoint builds its own engine). Identical reads are collapsed:

  • a result younger than the burst window is reused as-is
  • a request already in flight is shared by every caller
  • otherwise a new request is issued and its result remembered

Failures are never cached; all callers sharing the request see the error.
Entries are only evicted passively, when a read finds them expired.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from core.config import settings
from core.logging_config import logger

Clock = Callable[[], float]


class CacheEntry:
    """Represents a resolved result and when it was stored."""

    def __init__(self, value: Any, stored_at: float):
        self.value = value
        self.stored_at = stored_at

    def is_expired(self, now: float, window_seconds: float) -> bool:
        """Check if the entry is older than the burst window."""
        return now - self.stored_at >= window_seconds


class RequestDeduplicator:
    """
    Shares in-flight reads and reuses results inside a short burst window.

    Single event loop; no locking needed since nothing here suspends
    between the checks and the bookkeeping.
    """

    def __init__(self, burst_window_seconds: float = 0.5, clock: Optional[Clock] = None):
        self.burst_window_seconds = burst_window_seconds
        self._clock: Clock = clock or time.monotonic
        self._results: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, "asyncio.Task[Any]"] = {}

    def _fresh_entry(self, key: str) -> Optional[CacheEntry]:
        """
        Get the cached entry for a key if it is still inside the burst window.

        Args:
            key: Request signature

        Returns:
            CacheEntry or None if not found or expired
        """
        entry = self._results.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock(), self.burst_window_seconds):
            del self._results[key]
            return None

        return entry

    async def dedupe_get(self, key: str, request_fn: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run `request_fn` at most once per burst for `key`.

        Args:
            key: Request signature, e.g. "rbac-role:7"
            request_fn: Zero-argument coroutine factory performing the request

        Returns:
            The (possibly shared or cached) result
        """
        entry = self._fresh_entry(key)
        if entry is not None:
            logger.debug(f"Burst cache hit: {key}")
            return entry.value

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, request_fn))
            self._in_flight[key] = task
        else:
            logger.debug(f"Joining in-flight request: {key}")

        # A cancelled caller must not cancel the request other callers share
        return await asyncio.shield(task)

    async def _run(self, key: str, request_fn: Callable[[], Awaitable[Any]]) -> Any:
        task = asyncio.current_task()
        try:
            result = await request_fn()
            # Invalidated while in flight: callers get the value, the cache does not
            if self._in_flight.get(key) is task:
                self._results[key] = CacheEntry(result, self._clock())
                logger.debug(f"Cache miss, stored: {key}")
            return result
        finally:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def invalidate(self, key: str):
        """
        Forget a cached result and detach any in-flight request for `key`.
        Callers already waiting still get its value, but it is not stored
        and the next read issues a fresh request.
        """
        self._results.pop(key, None)
        self._in_flight.pop(key, None)

    def clear(self):
        """Clear all cached results and detach in-flight requests."""
        self._results.clear()
        self._in_flight.clear()

    def size(self) -> int:
        """Get the number of stored results, expired ones included."""
        return len(self._results)


# Process-wide instance handed to the service layer
_request_cache = RequestDeduplicator(settings.PERMISSION_BURST_WINDOW_MS / 1000.0)


def get_request_cache() -> RequestDeduplicator:
    """Get the process-wide deduplicator."""
    return _request_cache


def cache_clear():
    """Clear all cached results of the process-wide deduplicator."""
    _request_cache.clear()
