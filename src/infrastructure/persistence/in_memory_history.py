"""
Infrastructure adapter: process-local dict → IChatHistoryStore.

Used when no document store is configured. History is lost on restart.
"""

import threading
from datetime import datetime, timezone

from src.domain.entities.chat import ChatMessage
from src.domain.ports.user_store_port import IChatHistoryStore

MAX_MESSAGES_PER_USER = 100


class InMemoryChatHistoryStore(IChatHistoryStore):
    def __init__(self, max_messages: int = MAX_MESSAGES_PER_USER) -> None:
        self._max_messages = max_messages
        self._messages: dict[str, list[ChatMessage]] = {}
        self._lock = threading.Lock()

    def recent(self, user_id: str, limit: int = 10) -> list[ChatMessage]:
        if limit <= 0:
            return []
        with self._lock:
            return list(self._messages.get(user_id, [])[-limit:])

    def append_exchange(self, user_id: str, message: str, reply: str) -> None:
        now = datetime.now(timezone.utc)
        with self._lock:
            history = self._messages.setdefault(user_id, [])
            history.append(ChatMessage(role="user", content=message, timestamp=now))
            history.append(ChatMessage(role="assistant", content=reply, timestamp=now))
            if len(history) > self._max_messages:
                del history[: len(history) - self._max_messages]

    def clear(self, user_id: str) -> bool:
        with self._lock:
            return self._messages.pop(user_id, None) is not None

    def active_users(self) -> int:
        with self._lock:
            return len(self._messages)
