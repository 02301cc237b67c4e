"""
Use-case: retrieve the current quote for a given symbol.
Depends only on Domain entities and the MarketDataClient, no infrastructure imports.
"""

from datetime import datetime, timezone

from src.application.market_data.client import MarketDataClient
from src.application.market_data.quote_normalizer import build_mock_quote
from src.application.use_cases.validation import require_symbol
from src.domain.entities.quote import Quote
from src.domain.errors import RateLimitedError, UpstreamError


class GetMarketQuoteUseCase:
    def __init__(self, market_data: MarketDataClient, mock_fallback: bool = False) -> None:
        """
        Args:
            market_data:   The process-wide MarketDataClient.
            mock_fallback: Serve a MOCK-tagged synthetic quote instead of failing
                           when the provider is unavailable.
        """
        self._market_data = market_data
        self._mock_fallback = mock_fallback

    async def execute(self, symbol: str) -> Quote:
        """Fetch the current quote for *symbol* (uppercased).

        Raises:
            InvalidRequestError: if *symbol* is blank or malformed.
            RateLimitedError:    the provider is throttling; never masked by mock data.
            UpstreamError:       the provider failed and mock fallback is disabled.
        """
        symbol = require_symbol(symbol)
        try:
            return await self._market_data.get_quote(symbol)
        except RateLimitedError:
            raise
        except UpstreamError:
            if not self._mock_fallback:
                raise
            return build_mock_quote(symbol, fetched_at=datetime.now(timezone.utc))
