"""
Process-local, time-boxed cache in front of the market-data provider.

Entries are keyed by a request fingerprint (``quote_AAPL``,
``detailed_AAPL_1mo_1d``, ...) and stay valid while ``now - inserted_at < ttl``.
Concurrent misses on the same key share a single in-flight fetch. A failed
fetch is never stored and leaves any older entry in place.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
SWEEP_TTL_MULTIPLIER = 5


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    inserted_at: float


class QuoteCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the value for *key* if it is still fresh, else None."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.inserted_at >= self.ttl_seconds:
            return None
        return entry.value

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.inserted_at < self.ttl_seconds:
            self.hits += 1
            logger.debug("cache hit key=%s", key)
            return entry.value

        task = self._in_flight.get(key)
        if task is None:
            self.misses += 1
            logger.debug("cache miss key=%s", key)
            task = asyncio.ensure_future(self._fill(key, fetch))
            self._in_flight[key] = task
        else:
            logger.debug("joining in-flight fetch key=%s", key)
        return await asyncio.shield(task)

    async def _fill(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await fetch()
            self.put(key, value)
            return value
        finally:
            self._in_flight.pop(key, None)

    def sweep(self) -> int:
        """Remove entries older than 5x the TTL. Returns how many were removed."""
        cutoff = self._clock() - self.ttl_seconds * SWEEP_TTL_MULTIPLIER
        stale = [key for key, entry in self._entries.items() if entry.inserted_at <= cutoff]
        for key in stale:
            self._entries.pop(key, None)
        if stale:
            logger.debug("cache sweep removed %d entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Quote cache cleared")

    def stats(self) -> dict:
        return {
            "size": len(self._entries),
            "entries": list(self._entries.keys()),
            "hits": self.hits,
            "misses": self.misses,
            "in_flight": len(self._in_flight),
        }
