import asyncio

import pytest

from src.application.market_data.rate_limiter import FixedWindowRateLimiter
from tests.conftest import FakeClock


def _limiter(clock: FakeClock, sleeps: list, limit: int = 3) -> FixedWindowRateLimiter:
    async def sleep(seconds: float) -> None:
        sleeps.append(seconds)
        clock.advance(seconds)

    return FixedWindowRateLimiter(limit=limit, window_seconds=60, clock=clock, sleep=sleep)


def test_calls_within_budget_do_not_wait():
    clock, sleeps = FakeClock(), []
    limiter = _limiter(clock, sleeps)

    async def run():
        for _ in range(3):
            await limiter.acquire()

    asyncio.run(run())
    assert sleeps == []
    assert limiter.count == 3


def test_call_over_budget_waits_for_the_rest_of_the_window():
    clock, sleeps = FakeClock(), []
    limiter = _limiter(clock, sleeps)

    async def run():
        for _ in range(3):
            await limiter.acquire()
        clock.advance(10)
        await limiter.acquire()

    asyncio.run(run())
    assert sleeps == [50]
    assert limiter.waits == 1
    # the waiter opens a fresh window and is its first call
    assert limiter.count == 1
    assert limiter.window_reset_at == clock.now + 60


def test_expired_window_resets_without_waiting():
    clock, sleeps = FakeClock(), []
    limiter = _limiter(clock, sleeps)

    async def run():
        for _ in range(3):
            await limiter.acquire()
        clock.advance(61)
        await limiter.acquire()

    asyncio.run(run())
    assert sleeps == []
    assert limiter.count == 1


def test_snapshot_reports_remaining_window():
    clock, sleeps = FakeClock(), []
    limiter = _limiter(clock, sleeps)
    asyncio.run(limiter.acquire())
    clock.advance(15)

    snapshot = limiter.snapshot()

    assert snapshot["count"] == 1
    assert snapshot["limit"] == 3
    assert snapshot["window_reset_in"] == pytest.approx(45)


def test_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(limit=0)
