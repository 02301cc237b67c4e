"""
Port (interface) for market-data providers.
Infrastructure adapters (e.g. YFinanceStockDataProvider) must implement this interface.

Quote methods return the provider's raw field mapping untouched: field names
vary between vendors and SDK versions, and reconciling them is an application
concern (see src.application.market_data.quote_normalizer).
Implementations raise RateLimitedError when the vendor throttles the call and
may raise any other exception on failure; callers wrap those.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from src.domain.entities.quote import HistoricalPrices, SearchResult, TrendingSymbol


class IStockDataProvider(ABC):
    @abstractmethod
    def get_quote(self, symbol: str) -> dict[str, Any]: ...

    @abstractmethod
    def get_quotes(self, symbols: list[str]) -> list[dict[str, Any]]:
        """Fetch several symbols in one provider round-trip; fail as a whole."""
        ...

    @abstractmethod
    def get_historical_prices(
        self,
        symbol: str,
        period: str = "1mo",
        interval: str = "1d",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> HistoricalPrices: ...

    @abstractmethod
    def get_trending(self, count: int = 10) -> list[TrendingSymbol]: ...

    @abstractmethod
    def search(self, query: str, limit: int = 10) -> list[SearchResult]: ...
