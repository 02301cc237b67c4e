"""
Infrastructure adapter: yfinance → IStockDataProvider.
All yfinance-specific details (Ticker.info, fast_info, history(), screen, Search)
are confined here; the rest of the codebase depends only on IStockDataProvider.

Quote payloads are returned as yfinance reports them (``regularMarketPrice``,
``currentPrice``, ...); canonical field mapping happens in the application layer.
"""

from typing import Any, Optional

import yfinance as yf
from yfinance.exceptions import YFRateLimitError

from src.domain.entities.quote import (
    HistoricalPrices,
    HistoricalRecord,
    SearchResult,
    TrendingSymbol,
)
from src.domain.errors import RateLimitedError
from src.domain.ports.stock_data_port import IStockDataProvider

_PRICE_KEYS = ("regularMarketPrice", "currentPrice")


class YFinanceStockDataProvider(IStockDataProvider):
    """Fetches stock market data from Yahoo Finance via the yfinance library."""

    def get_quote(self, symbol: str) -> dict[str, Any]:
        try:
            return self._quote_payload(yf.Ticker(symbol), symbol)
        except YFRateLimitError as exc:
            raise RateLimitedError(f"Yahoo Finance rate limit: {exc}", symbol=symbol) from exc

    def get_quotes(self, symbols: list[str]) -> list[dict[str, Any]]:
        try:
            tickers = yf.Tickers(" ".join(symbols))
            return [
                self._quote_payload(tickers.tickers[symbol.upper()], symbol)
                for symbol in symbols
            ]
        except YFRateLimitError as exc:
            raise RateLimitedError(f"Yahoo Finance rate limit: {exc}") from exc

    @staticmethod
    def _quote_payload(ticker: Any, symbol: str) -> dict[str, Any]:
        info = dict(ticker.info or {})
        if not any(info.get(key) is not None for key in _PRICE_KEYS):
            last_price = getattr(ticker.fast_info, "last_price", None)
            if last_price is None:
                raise ValueError(f"No price data available for symbol: {symbol!r}")
            info["lastPrice"] = last_price
            info.setdefault(
                "previousClose", getattr(ticker.fast_info, "previous_close", None)
            )
        info.setdefault("symbol", symbol.upper())
        return info

    def get_historical_prices(
        self,
        symbol: str,
        period: str = "1mo",
        interval: str = "1d",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> HistoricalPrices:
        ticker = yf.Ticker(symbol)
        try:
            history = (
                ticker.history(start=start_date, end=end_date, interval=interval)
                if start_date
                else ticker.history(period=period, interval=interval)
            )
        except YFRateLimitError as exc:
            raise RateLimitedError(f"Yahoo Finance rate limit: {exc}", symbol=symbol) from exc

        if history.empty:
            raise ValueError(f"No historical data available for symbol: {symbol!r}")

        records = [
            HistoricalRecord(
                date=date.strftime("%Y-%m-%d"),
                open=round(float(row["Open"]), 4),
                high=round(float(row["High"]), 4),
                low=round(float(row["Low"]), 4),
                close=round(float(row["Close"]), 4),
                volume=int(row["Volume"]),
            )
            for date, row in history.iterrows()
        ]

        period_label = (
            period if not start_date else f"{start_date} to {end_date or 'today'}"
        )
        return HistoricalPrices(
            symbol=symbol,
            period=period_label,
            interval=interval,
            records=records,
        )

    def get_trending(self, count: int = 10) -> list[TrendingSymbol]:
        try:
            response = yf.screen("most_actives", count=count)
        except YFRateLimitError as exc:
            raise RateLimitedError(f"Yahoo Finance rate limit: {exc}") from exc
        return [
            TrendingSymbol(
                symbol=row["symbol"],
                name=row.get("shortName") or row.get("longName"),
                change_percent=row.get("regularMarketChangePercent"),
            )
            for row in (response or {}).get("quotes", [])
            if row.get("symbol")
        ][:count]

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        try:
            quotes = yf.Search(query, max_results=limit, news_count=0).quotes
        except YFRateLimitError as exc:
            raise RateLimitedError(f"Yahoo Finance rate limit: {exc}") from exc
        return [
            SearchResult(
                symbol=row["symbol"],
                name=row.get("shortname") or row.get("longname"),
                exchange=row.get("exchDisp") or row.get("exchange"),
                quote_type=row.get("quoteType"),
            )
            for row in quotes or []
            if row.get("symbol")
        ]
