"""
Use-case: produce a buy/hold/sell style analysis for one symbol.
"""

import logging

from src.application.chat.analyst import SymbolAnalyst
from src.application.market_data.client import MarketDataClient
from src.application.use_cases.validation import require_symbol
from src.domain.entities.chat import Analysis
from src.domain.errors import InvalidRequestError

logger = logging.getLogger(__name__)

ANALYSIS_TYPES = ("technical", "fundamental", "sentiment", "risk")


class AnalyzeSymbolUseCase:
    def __init__(self, market_data: MarketDataClient, analyst: SymbolAnalyst) -> None:
        self._market_data = market_data
        self._analyst = analyst

    async def execute(self, symbol: str, analysis_type: str = "technical") -> Analysis:
        """
        Raises:
            InvalidRequestError: bad symbol or unknown analysis type.
            UpstreamError:       no quote could be fetched for *symbol*.
        """
        symbol = require_symbol(symbol)
        analysis_type = (analysis_type or "technical").strip().lower()
        if analysis_type not in ANALYSIS_TYPES:
            raise InvalidRequestError(
                f"analysisType must be one of: {', '.join(ANALYSIS_TYPES)}"
            )
        logger.info("Generating %s analysis for %s", analysis_type, symbol)
        detailed = await self._market_data.get_detailed_quote(symbol)
        return await self._analyst.analyze(symbol, detailed, analysis_type)
