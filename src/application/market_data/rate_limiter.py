"""
Fixed-window limiter for outbound market-data calls.

acquire() never rejects: once the window's budget is spent the caller sleeps
until the window ends, then starts a fresh window unconditionally. Callers
queued behind a sleeping caller therefore see a full new budget, so bursts
can slightly exceed the nominal limit. That approximation is intentional and
kept; see DESIGN.md.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60.0


class FixedWindowRateLimiter:
    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self.count = 0
        self.window_reset_at = clock() + window_seconds
        self.waits = 0

    def _reset(self, now: float) -> None:
        self.count = 0
        self.window_reset_at = now + self.window_seconds

    async def acquire(self) -> None:
        now = self._clock()
        if now >= self.window_reset_at:
            self._reset(now)

        if self.count >= self.limit:
            wait = max(self.window_reset_at - now, 0.0)
            self.waits += 1
            logger.warning(
                "Market data rate limit reached (%d/%d), waiting %.1fs", self.count, self.limit, wait
            )
            await self._sleep(wait)
            self._reset(self._clock())

        self.count += 1

    def snapshot(self) -> dict:
        return {
            "count": self.count,
            "limit": self.limit,
            "window_reset_in": max(self.window_reset_at - self._clock(), 0.0),
            "waits": self.waits,
        }
