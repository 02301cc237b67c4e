import asyncio

import pytest

from src.application.market_data.quote_cache import QuoteCache
from tests.conftest import FakeClock


class CountingFetch:
    def __init__(self, value="v", error=None):
        self.value = value
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.value


def test_fresh_entry_is_served_without_fetching():
    clock = FakeClock()
    cache = QuoteCache(ttl_seconds=60, clock=clock)
    fetch = CountingFetch("first")

    async def run():
        await cache.get_or_fetch("quote_AAPL", fetch)
        clock.advance(59)
        return await cache.get_or_fetch("quote_AAPL", fetch)

    assert asyncio.run(run()) == "first"
    assert fetch.calls == 1
    assert cache.stats()["hits"] == 1


def test_expired_entry_is_refetched():
    clock = FakeClock()
    cache = QuoteCache(ttl_seconds=60, clock=clock)
    fetch = CountingFetch("old")

    async def run():
        first = await cache.get_or_fetch("quote_AAPL", fetch)
        fetch.value = "new"
        clock.advance(60)
        second = await cache.get_or_fetch("quote_AAPL", fetch)
        third = await cache.get_or_fetch("quote_AAPL", fetch)
        return first, second, third

    assert asyncio.run(run()) == ("old", "new", "new")
    assert fetch.calls == 2


def test_failed_fetch_propagates_and_is_not_stored():
    clock = FakeClock()
    cache = QuoteCache(ttl_seconds=60, clock=clock)
    cache.put("quote_AAPL", "stale")
    clock.advance(120)

    with pytest.raises(RuntimeError):
        asyncio.run(cache.get_or_fetch("quote_AAPL", CountingFetch(error=RuntimeError("down"))))

    assert cache.stats()["entries"] == ["quote_AAPL"]
    assert cache.stats()["in_flight"] == 0
    assert asyncio.run(cache.get_or_fetch("quote_AAPL", CountingFetch("fresh"))) == "fresh"


def test_concurrent_misses_share_one_fetch():
    cache = QuoteCache(ttl_seconds=60, clock=FakeClock())
    fetch = CountingFetch("shared")

    async def run():
        return await asyncio.gather(*(cache.get_or_fetch("quote_MSFT", fetch) for _ in range(5)))

    assert asyncio.run(run()) == ["shared"] * 5
    assert fetch.calls == 1
    assert cache.stats()["misses"] == 1


def test_sweep_removes_entries_older_than_five_ttls():
    clock = FakeClock()
    cache = QuoteCache(ttl_seconds=60, clock=clock)
    cache.put("old", 1)
    clock.advance(300)
    cache.put("new", 2)

    assert cache.sweep() == 1
    assert cache.stats()["entries"] == ["new"]


def test_clear_empties_the_cache():
    cache = QuoteCache(clock=FakeClock())
    cache.put("a", 1)
    cache.clear()
    assert cache.get("a") is None
    assert cache.stats()["size"] == 0
