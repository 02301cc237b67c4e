"""
Ports (interfaces) for per-user persistence.

IChatHistoryStore is always available: the composition root falls back to an
in-memory implementation when no document store is configured.
IUserProfileStore (watchlist, portfolio) exists only with a document store.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.chat import ChatMessage
from src.domain.entities.user import PortfolioHolding, WatchlistItem


class IChatHistoryStore(ABC):
    @abstractmethod
    def recent(self, user_id: str, limit: int = 10) -> list[ChatMessage]:
        """Return at most *limit* messages, oldest first."""
        ...

    @abstractmethod
    def append_exchange(self, user_id: str, message: str, reply: str) -> None: ...

    @abstractmethod
    def clear(self, user_id: str) -> bool:
        """Drop the user's history. Returns False when there was none."""
        ...

    @abstractmethod
    def active_users(self) -> int: ...


class IUserProfileStore(ABC):
    @abstractmethod
    def list_watchlist(self, user_id: str) -> list[WatchlistItem]: ...

    @abstractmethod
    def add_to_watchlist(self, user_id: str, item: WatchlistItem) -> list[WatchlistItem]: ...

    @abstractmethod
    def remove_from_watchlist(self, user_id: str, symbol: str) -> bool: ...

    @abstractmethod
    def get_holdings(self, user_id: str) -> list[PortfolioHolding]: ...

    @abstractmethod
    def upsert_holding(
        self, user_id: str, holding: PortfolioHolding
    ) -> Optional[PortfolioHolding]:
        """Insert or replace the holding for its symbol; quantity 0 removes it (returns None)."""
        ...
