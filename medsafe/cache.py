"""
In-process TTL cache for endpoint payloads.

One entry per key, holding the payload and an absolute expiry on the cache's
clock. Entries are replaced wholesale on refresh and never partially mutated.
Expired entries are kept but not served; if a refresh fails the old entry is
left alone and the error propagates (no serve-stale-on-error).

The cache is injected into the request handlers (see main.get_cache), so tests
build isolated instances and drive time with their own clock.

Handlers run on FastAPI's thread pool, so reads and writes take a lock.
Concurrent misses for the same key may both fetch upstream; the last write wins.
"""

import logging
import threading
import time
from typing import Any, Callable, NamedTuple

logger = logging.getLogger(__name__)


class CacheEntry(NamedTuple):
    data: Any
    expires_at: float


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str):
        """Return the fresh payload for key, or None when the key is empty or stale."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._clock() >= entry.expires_at:
                return None
            return entry.data

    def set(self, key: str, data, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(data, self._clock() + ttl_seconds)

    def peek(self, key: str) -> CacheEntry | None:
        """Return the raw entry, fresh or stale (inspection only)."""
        with self._lock:
            return self._entries.get(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Any],
        ttl_seconds: float,
        *,
        read: bool = True,
        write: bool = True,
    ):
        """
        Serve key from cache, or compute and store it.

        read=False skips the lookup (refresh and debug requests); write=False
        leaves the stored entry untouched (debug requests). Exceptions from
        compute propagate and nothing is written.
        """
        if read:
            cached = self.get(key)
            if cached is not None:
                logger.info("Cache hit: %s", key)
                return cached

        logger.info("Cache %s: %s", "miss" if read else "bypass", key)
        data = compute()

        if write:
            self.set(key, data, ttl_seconds)
        return data
