"""Hand-written fakes shared by the test modules."""

from datetime import datetime, timezone
from typing import Optional

import pytest

from src.application.market_data.client import MarketDataClient
from src.application.market_data.quote_cache import QuoteCache
from src.application.market_data.rate_limiter import FixedWindowRateLimiter
from src.domain.entities.quote import (
    HistoricalPrices,
    HistoricalRecord,
    SearchResult,
    TrendingSymbol,
)
from src.domain.entities.user import PortfolioHolding, WatchlistItem
from src.domain.ports.llm_port import ILanguageModel
from src.domain.ports.stock_data_port import IStockDataProvider
from src.domain.ports.user_store_port import IUserProfileStore

FIXED_NOW = datetime(2024, 3, 1, 15, 30, tzinfo=timezone.utc)


def make_payload(symbol: str, price: float = 100.0, change_percent: float = 1.0, **extra) -> dict:
    """A yfinance-shaped ``Ticker.info`` payload."""
    payload = {
        "symbol": symbol,
        "shortName": f"{symbol} Inc.",
        "regularMarketPrice": price,
        "regularMarketChange": round(price * change_percent / 100, 2),
        "regularMarketChangePercent": change_percent,
        "regularMarketDayHigh": price * 1.02,
        "regularMarketDayLow": price * 0.98,
        "regularMarketOpen": price * 0.99,
        "regularMarketPreviousClose": price * 0.99,
        "regularMarketVolume": 1_250_000,
        "averageVolume": 2_000_000,
        "currency": "USD",
        "fullExchangeName": "NasdaqGS",
    }
    payload.update(extra)
    return payload


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStockDataProvider(IStockDataProvider):
    def __init__(self, payloads: Optional[dict] = None) -> None:
        self.payloads = dict(payloads or {})
        self.quote_errors: dict[str, Exception] = {}
        self.batch_error: Optional[Exception] = None
        self.history_error: Optional[Exception] = None
        self.trending_error: Optional[Exception] = None
        self.trending: list[TrendingSymbol] = []
        self.search_results: list[SearchResult] = []
        self.quote_calls: list[str] = []
        self.batch_calls: list[list[str]] = []
        self.history_calls: list[str] = []

    def _payload(self, symbol: str) -> dict:
        if symbol in self.quote_errors:
            raise self.quote_errors[symbol]
        if symbol not in self.payloads:
            raise ValueError(f"No price data available for symbol: {symbol!r}")
        return dict(self.payloads[symbol])

    def get_quote(self, symbol: str) -> dict:
        self.quote_calls.append(symbol)
        return self._payload(symbol)

    def get_quotes(self, symbols: list[str]) -> list[dict]:
        self.batch_calls.append(list(symbols))
        if self.batch_error is not None:
            raise self.batch_error
        return [self._payload(s) for s in symbols]

    def get_historical_prices(
        self,
        symbol: str,
        period: str = "1mo",
        interval: str = "1d",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> HistoricalPrices:
        self.history_calls.append(symbol)
        if self.history_error is not None:
            raise self.history_error
        return HistoricalPrices(
            symbol=symbol,
            period=period,
            interval=interval,
            records=[
                HistoricalRecord("2024-02-28", 95.0, 99.0, 94.0, 98.0, 1_000_000),
                HistoricalRecord("2024-02-29", 98.0, 101.0, 97.5, 100.0, 1_100_000),
            ],
        )

    def get_trending(self, count: int = 10) -> list[TrendingSymbol]:
        if self.trending_error is not None:
            raise self.trending_error
        return self.trending[:count]

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        return self.search_results[:limit]


class FakeLanguageModel(ILanguageModel):
    def __init__(self, answer: str = "", error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeProfileStore(IUserProfileStore):
    def __init__(self) -> None:
        self.watchlists: dict[str, list[WatchlistItem]] = {}
        self.holdings: dict[str, list[PortfolioHolding]] = {}
        self.closed = False

    def list_watchlist(self, user_id: str) -> list[WatchlistItem]:
        return list(self.watchlists.get(user_id, []))

    def add_to_watchlist(self, user_id: str, item: WatchlistItem) -> list[WatchlistItem]:
        items = [i for i in self.watchlists.get(user_id, []) if i.symbol != item.symbol]
        self.watchlists[user_id] = items + [item]
        return self.list_watchlist(user_id)

    def remove_from_watchlist(self, user_id: str, symbol: str) -> bool:
        before = self.watchlists.get(user_id, [])
        after = [i for i in before if i.symbol != symbol]
        self.watchlists[user_id] = after
        return len(after) != len(before)

    def get_holdings(self, user_id: str) -> list[PortfolioHolding]:
        return list(self.holdings.get(user_id, []))

    def upsert_holding(self, user_id: str, holding: PortfolioHolding):
        rows = [h for h in self.holdings.get(user_id, []) if h.symbol != holding.symbol]
        if holding.quantity:
            rows.append(holding)
        self.holdings[user_id] = rows
        return holding if holding.quantity else None

    def close(self) -> None:
        self.closed = True


def build_client(provider: IStockDataProvider, clock: Optional[FakeClock] = None) -> MarketDataClient:
    clock = clock or FakeClock()
    return MarketDataClient(
        provider,
        cache=QuoteCache(ttl_seconds=60, clock=clock),
        rate_limiter=FixedWindowRateLimiter(limit=100, clock=clock),
        now=lambda: FIXED_NOW,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeStockDataProvider:
    return FakeStockDataProvider(
        {
            "AAPL": make_payload("AAPL", price=180.0, change_percent=1.2, marketCap=2.8e12, trailingPE=29.4),
            "MSFT": make_payload("MSFT", price=410.0, change_percent=-0.4),
        }
    )


@pytest.fixture
def market_client(provider, clock) -> MarketDataClient:
    return build_client(provider, clock)

