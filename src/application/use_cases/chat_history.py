"""
Use-case: read and clear a user's conversation history.
"""

import asyncio

from src.application.use_cases.validation import require_user_id
from src.domain.entities.chat import ChatMessage
from src.domain.errors import InvalidRequestError
from src.domain.ports.user_store_port import IChatHistoryStore

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class ChatHistoryUseCase:
    def __init__(self, store: IChatHistoryStore) -> None:
        self._store = store

    async def get(self, user_id: str, limit: int = DEFAULT_LIMIT) -> list[ChatMessage]:
        user_id = require_user_id(user_id)
        if limit < 1:
            raise InvalidRequestError("limit must be a positive integer")
        return await asyncio.to_thread(self._store.recent, user_id, min(limit, MAX_LIMIT))

    async def clear(self, user_id: str) -> bool:
        user_id = require_user_id(user_id)
        return await asyncio.to_thread(self._store.clear, user_id)

    def active_users(self) -> int:
        return self._store.active_users()
