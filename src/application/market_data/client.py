"""
Market Data Client: the single owner of the quote cache and the rate limiter.

Built once by the composition root and injected wherever market data is
needed. Every upstream call goes through the same sequence:
rate-limit -> cache check -> provider call (in a worker thread) -> normalise.

Failure semantics:
  - get_quote raises UpstreamError (RateLimitedError on vendor throttling).
  - get_quotes, get_trending_symbols, search never raise; they return the
    partial or empty result instead.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from src.application.market_data.quote_cache import QuoteCache
from src.application.market_data.quote_normalizer import normalize_quote
from src.application.market_data.rate_limiter import FixedWindowRateLimiter
from src.application.market_data.symbol_extractor import extract_symbols
from src.domain.entities.quote import (
    DetailedQuote,
    IndexSnapshot,
    MarketSummary,
    Quote,
    RelevantMarketData,
    SearchResult,
    TrendingSymbol,
)
from src.domain.errors import RateLimitedError, UpstreamError
from src.domain.ports.stock_data_port import IStockDataProvider

logger = logging.getLogger(__name__)

INDEX_NAMES = {
    "^GSPC": "S&P 500",
    "^DJI": "Dow Jones",
    "^IXIC": "NASDAQ",
    "^RUT": "Russell 2000",
    "^VIX": "VIX",
}
INDEX_SYMBOLS = tuple(INDEX_NAMES)


def market_sentiment(change_percents: list[float]) -> str:
    """Label the mean change-percent of a set of index quotes."""
    if not change_percents:
        return "neutral"
    average = sum(change_percents) / len(change_percents)
    if average > 1:
        return "bullish"
    if average > 0.5:
        return "moderately-bullish"
    if average < -1:
        return "bearish"
    if average < -0.5:
        return "moderately-bearish"
    return "neutral"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MarketDataClient:
    def __init__(
        self,
        provider: IStockDataProvider,
        cache: Optional[QuoteCache] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._cache = cache or QuoteCache()
        self._rate_limiter = rate_limiter or FixedWindowRateLimiter()
        self._now = now

    @staticmethod
    def _normalize_symbols(symbols: list[str]) -> list[str]:
        unique: list[str] = []
        for symbol in symbols:
            value = str(symbol).strip().upper()
            if value and value not in unique:
                unique.append(value)
        return unique

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    async def get_quote(self, symbol: str) -> Quote:
        """Fetch one normalised quote.

        Raises:
            RateLimitedError: the provider throttled the request.
            UpstreamError:    the provider failed or does not know *symbol*.
        """
        symbol = symbol.strip().upper()

        async def fetch() -> Quote:
            raw = await asyncio.to_thread(self._provider.get_quote, symbol)
            return normalize_quote(raw, fetched_at=self._now(), symbol=symbol)

        try:
            await self._rate_limiter.acquire()
            return await self._cache.get_or_fetch(f"quote_{symbol}", fetch)
        except RateLimitedError as exc:
            logger.warning("Provider rate limited quote for %s: %s", symbol, exc)
            raise RateLimitedError(
                f"Rate limited while fetching data for {symbol}: {exc}", symbol=symbol
            ) from exc
        except Exception as exc:
            logger.warning("Error fetching stock data for %s: %s", symbol, exc)
            raise UpstreamError(
                f"Failed to fetch data for {symbol}: {exc}", symbol=symbol
            ) from exc

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """Best-effort batch fetch; symbols that fail are dropped, never raised."""
        unique = self._normalize_symbols(symbols)
        if not unique:
            return []

        async def fetch_batch() -> list[Quote]:
            payloads = await asyncio.to_thread(self._provider.get_quotes, unique)
            fetched_at = self._now()
            quotes = [normalize_quote(raw, fetched_at=fetched_at) for raw in payloads]
            for quote in quotes:
                self._cache.put(f"quote_{quote.symbol}", quote)
            return quotes

        try:
            await self._rate_limiter.acquire()
            return await self._cache.get_or_fetch(f"quotes_{','.join(unique)}", fetch_batch)
        except Exception as exc:
            logger.warning("Batch quote request failed (%s), falling back to single quotes", exc)

        results: list[Quote] = []
        for symbol in unique:
            try:
                results.append(await self.get_quote(symbol))
            except UpstreamError as exc:
                logger.warning("Dropping %s from batch: %s", symbol, exc)
        return results

    async def get_detailed_quote(
        self, symbol: str, period: str = "1mo", interval: str = "1d"
    ) -> DetailedQuote:
        """Quote plus price history; degrades to the plain quote when history fails.

        Raises:
            UpstreamError: if even the plain quote cannot be fetched.
        """
        symbol = symbol.strip().upper()

        async def fetch() -> DetailedQuote:
            raw = await asyncio.to_thread(self._provider.get_quote, symbol)
            history = await asyncio.to_thread(
                self._provider.get_historical_prices, symbol, period, interval
            )
            quote = normalize_quote(raw, fetched_at=self._now(), symbol=symbol)
            return DetailedQuote(quote=quote, history=history)

        try:
            await self._rate_limiter.acquire()
            return await self._cache.get_or_fetch(
                f"detailed_{symbol}_{period}_{interval}", fetch
            )
        except Exception as exc:
            logger.warning("Error fetching detailed data for %s: %s", symbol, exc)
        return DetailedQuote(quote=await self.get_quote(symbol), history=None)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def get_trending_symbols(self, count: int = 10) -> list[TrendingSymbol]:
        async def fetch() -> list[TrendingSymbol]:
            return await asyncio.to_thread(self._provider.get_trending, count)

        try:
            await self._rate_limiter.acquire()
            return await self._cache.get_or_fetch(f"trending_{count}", fetch)
        except Exception as exc:
            logger.warning("Error fetching trending symbols: %s", exc)
            return []

    async def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        query = query.strip()
        if not query:
            return []
        try:
            await self._rate_limiter.acquire()
            return await asyncio.to_thread(self._provider.search, query, limit)
        except Exception as exc:
            logger.warning("Search error for %r: %s", query, exc)
            return []

    async def get_relevant_data(self, message: str) -> Optional[RelevantMarketData]:
        """Quotes for the tickers mentioned in *message*, or None if it names none."""
        symbols = extract_symbols(message)
        if not symbols:
            return None
        quotes = await self.get_quotes(symbols)
        return RelevantMarketData(
            quotes=quotes, extracted_symbols=symbols, timestamp=self._now()
        )

    async def get_market_summary(self) -> MarketSummary:
        quotes = await self.get_quotes(list(INDEX_SYMBOLS))
        trending = await self.get_trending_symbols(5)
        indices = [
            IndexSnapshot(
                symbol=quote.symbol,
                name=INDEX_NAMES.get(quote.symbol, quote.symbol),
                price=quote.price,
                change=quote.change,
                change_percent=quote.change_percent,
            )
            for quote in quotes
        ]
        return MarketSummary(
            indices=indices,
            trending=trending,
            sentiment=market_sentiment([index.change_percent for index in indices]),
            timestamp=self._now(),
        )

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()

    def sweep_cache(self) -> int:
        return self._cache.sweep()

    def cache_stats(self) -> dict:
        return {**self._cache.stats(), "rate_limit": self._rate_limiter.snapshot()}
