"""
ResponseComposer: the LLM -> formatted template -> mock fallback chain.
"""

import logging
from typing import Optional

from src.application.chat.strategies import (
    CompositionRequest,
    FormattedStrategy,
    LanguageModelStrategy,
    MockStrategy,
    ResponseStrategy,
)
from src.domain.entities.chat import ChatMessage, ChatReply
from src.domain.entities.quote import RelevantMarketData
from src.domain.errors import RateLimitedError, UpstreamError
from src.domain.ports.llm_port import ILanguageModel

logger = logging.getLogger(__name__)


class ResponseComposer:
    def __init__(self, strategies: list[ResponseStrategy]) -> None:
        if not strategies:
            raise ValueError("at least one strategy is required")
        self._strategies = strategies

    @classmethod
    def default(cls, llm: Optional[ILanguageModel]) -> "ResponseComposer":
        return cls([LanguageModelStrategy(llm), FormattedStrategy(), MockStrategy()])

    async def compose(
        self,
        message: str,
        market_data: Optional[RelevantMarketData] = None,
        history: Optional[list[ChatMessage]] = None,
    ) -> ChatReply:
        request = CompositionRequest(message=message, market_data=market_data, history=history or [])
        for strategy in self._strategies:
            if not strategy.can_respond(request):
                continue
            try:
                reply = await strategy.respond(request)
            except RateLimitedError as exc:
                logger.warning("%s strategy rate limited, falling back: %s", strategy.source.value, exc)
                continue
            except UpstreamError as exc:
                logger.warning("%s strategy failed, falling back: %s", strategy.source.value, exc)
                continue
            except Exception:
                logger.exception("%s strategy raised unexpectedly, falling back", strategy.source.value)
                continue
            logger.debug("reply composed by %s strategy", strategy.source.value)
            return reply
        raise RuntimeError("no response strategy could handle the request")
