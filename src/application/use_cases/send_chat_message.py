"""
Use-case: answer one chat message.
Depends only on Domain ports and application services, no infrastructure imports.

Flow: validate -> recent history -> relevant market data -> compose reply ->
record the exchange. Market data problems never fail the request; the
composer falls back to a template or canned reply instead.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from src.application.chat.composer import ResponseComposer
from src.application.market_data.client import MarketDataClient
from src.application.use_cases.validation import require_message
from src.domain.entities.chat import ChatReply
from src.domain.entities.quote import RelevantMarketData
from src.domain.errors import InvalidRequestError, UpstreamError
from src.domain.ports.user_store_port import IChatHistoryStore

logger = logging.getLogger(__name__)

CONTEXT_HISTORY_MESSAGES = 5


@dataclass(frozen=True)
class ChatOutcome:
    reply: ChatReply
    response_time_ms: int
    has_market_context: bool
    history_length: int


class SendChatMessageUseCase:
    def __init__(
        self,
        market_data: MarketDataClient,
        composer: ResponseComposer,
        history: IChatHistoryStore,
    ) -> None:
        self._market_data = market_data
        self._composer = composer
        self._history = history

    async def execute(self, user_id: Any, message: Any) -> ChatOutcome:
        """Answer *message* on behalf of *user_id*.

        Raises:
            InvalidRequestError: if either argument is missing, empty or too long.
        """
        if not user_id or not message:
            raise InvalidRequestError("UserId and message are required")
        message = require_message(message)
        user_id = str(user_id).strip()

        logger.info("Chat request from user %s: %.100s", user_id, message)
        history = await asyncio.to_thread(self._history.recent, user_id, CONTEXT_HISTORY_MESSAGES)

        market_data: Optional[RelevantMarketData] = None
        try:
            market_data = await self._market_data.get_relevant_data(message)
        except UpstreamError as exc:
            logger.warning("Market service error, continuing without context: %s", exc)

        started = time.perf_counter()
        reply = await self._composer.compose(message, market_data=market_data, history=history)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info("Reply from %s strategy in %dms", reply.source.value, elapsed_ms)

        await asyncio.to_thread(self._history.append_exchange, user_id, message, reply.text)
        return ChatOutcome(
            reply=reply,
            response_time_ms=elapsed_ms,
            has_market_context=market_data is not None,
            history_length=len(history),
        )
