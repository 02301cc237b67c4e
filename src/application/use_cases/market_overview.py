"""
Use-cases: market-wide views (summary, symbol search, general picks).
"""

from dataclasses import dataclass
from typing import Optional

from src.application.market_data.client import MarketDataClient
from src.domain.entities.quote import MarketSummary, SearchResult
from src.domain.errors import InvalidRequestError

RECOMMENDATION_CATEGORIES = ("general", "gainers", "losers")


@dataclass(frozen=True)
class Recommendation:
    symbol: str
    name: Optional[str]
    change_percent: Optional[float]
    rationale: str


class GetMarketSummaryUseCase:
    def __init__(self, market_data: MarketDataClient) -> None:
        self._market_data = market_data

    async def execute(self) -> MarketSummary:
        return await self._market_data.get_market_summary()


class SearchSymbolsUseCase:
    def __init__(self, market_data: MarketDataClient) -> None:
        self._market_data = market_data

    async def execute(self, query: str, limit: int = 10) -> list[SearchResult]:
        if not query or not query.strip():
            raise InvalidRequestError("Search query is required")
        return await self._market_data.search(query, limit=limit)


class GetRecommendationsUseCase:
    """Non-personalised picks derived from the provider's trending list."""

    def __init__(self, market_data: MarketDataClient, count: int = 5) -> None:
        self._market_data = market_data
        self._count = count

    async def execute(self, category: str = "general") -> list[Recommendation]:
        category = (category or "general").strip().lower()
        if category not in RECOMMENDATION_CATEGORIES:
            raise InvalidRequestError(
                f"category must be one of: {', '.join(RECOMMENDATION_CATEGORIES)}"
            )
        trending = await self._market_data.get_trending_symbols(10)
        if category == "gainers":
            trending = sorted(
                (t for t in trending if (t.change_percent or 0) > 0),
                key=lambda t: t.change_percent or 0,
                reverse=True,
            )
        elif category == "losers":
            trending = sorted(
                (t for t in trending if (t.change_percent or 0) < 0),
                key=lambda t: t.change_percent or 0,
            )
        return [
            Recommendation(
                symbol=t.symbol,
                name=t.name,
                change_percent=t.change_percent,
                rationale=_rationale(t.change_percent),
            )
            for t in trending[: self._count]
        ]


def _rationale(change_percent: Optional[float]) -> str:
    if change_percent is None:
        return "Trending on heavy interest today"
    if change_percent >= 2:
        return f"Strong momentum, up {change_percent:.2f}% today"
    if change_percent <= -2:
        return f"Sharp pullback, down {abs(change_percent):.2f}% today; watch for support"
    return f"Actively traded, {change_percent:+.2f}% today"
