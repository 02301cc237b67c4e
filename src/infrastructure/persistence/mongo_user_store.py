"""
Infrastructure adapter: MongoDB (pymongo) → IChatHistoryStore + IUserProfileStore.

One document per user in the ``users`` collection:

    {
        "userId": str, "name": str, "email": str,
        "preferences": {"riskTolerance": str, "investmentGoals": [], "preferredSectors": []},
        "chatHistory": [{"role", "content", "timestamp"}],   # capped at MAX_HISTORY
        "watchlist":   [{"symbol", "alertPrice", "alertType", "addedAt"}],
        "portfolio":   [{"symbol", "quantity", "averagePrice", "currentPrice", "lastUpdated"}],
        "createdAt": datetime, "lastActive": datetime,
    }

Documents are created lazily (upsert) on the first write for a user.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from src.domain.entities.chat import ChatMessage
from src.domain.entities.user import PortfolioHolding, WatchlistItem
from src.domain.ports.user_store_port import IChatHistoryStore, IUserProfileStore

logger = logging.getLogger(__name__)

MAX_HISTORY = 100


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_user_defaults(now: datetime) -> dict[str, Any]:
    return {
        "name": "User",
        "email": "",
        "preferences": {
            "riskTolerance": "moderate",
            "investmentGoals": [],
            "preferredSectors": [],
        },
        "createdAt": now,
    }


class MongoUserStore(IChatHistoryStore, IUserProfileStore):
    def __init__(
        self,
        uri: Optional[str] = None,
        database: str = "trading_chatbot",
        collection: str = "users",
        client: Any = None,
    ) -> None:
        self._client = client or MongoClient(uri, tz_aware=True, serverSelectionTimeoutMS=5000)
        self._users = self._client[database][collection]

    def ensure_indexes(self) -> None:
        self._users.create_index([("userId", ASCENDING)], unique=True)

    def ping(self) -> bool:
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False

    def close(self) -> None:
        self._client.close()

    def _upsert(self, user_id: str, update: dict[str, Any]) -> Any:
        now = _now()
        update = dict(update)
        update.setdefault("$set", {})["lastActive"] = now
        update["$setOnInsert"] = _new_user_defaults(now)
        return self._users.update_one({"userId": user_id}, update, upsert=True)

    def _field(self, user_id: str, name: str, projection: Any = 1) -> list[dict]:
        doc = self._users.find_one({"userId": user_id}, {name: projection, "_id": 0})
        return list((doc or {}).get(name) or [])

    # ------------------------------------------------------------------
    # IChatHistoryStore
    # ------------------------------------------------------------------

    def recent(self, user_id: str, limit: int = 10) -> list[ChatMessage]:
        if limit <= 0:
            return []
        rows = self._field(user_id, "chatHistory", {"$slice": -limit})
        return [
            ChatMessage(role=row["role"], content=row["content"], timestamp=row["timestamp"])
            for row in rows
        ]

    def append_exchange(self, user_id: str, message: str, reply: str) -> None:
        now = _now()
        entries = [
            {"role": "user", "content": message, "timestamp": now},
            {"role": "assistant", "content": reply, "timestamp": now},
        ]
        self._upsert(
            user_id,
            {"$push": {"chatHistory": {"$each": entries, "$slice": -MAX_HISTORY}}},
        )

    def clear(self, user_id: str) -> bool:
        result = self._users.update_one(
            {"userId": user_id, "chatHistory.0": {"$exists": True}},
            {"$set": {"chatHistory": []}},
        )
        return result.modified_count > 0

    def active_users(self) -> int:
        return self._users.count_documents({"chatHistory.0": {"$exists": True}})

    # ------------------------------------------------------------------
    # IUserProfileStore
    # ------------------------------------------------------------------

    def list_watchlist(self, user_id: str) -> list[WatchlistItem]:
        return [
            WatchlistItem(
                symbol=row["symbol"],
                alert_price=row.get("alertPrice"),
                alert_type=row.get("alertType", "none"),
                added_at=row.get("addedAt") or _now(),
            )
            for row in self._field(user_id, "watchlist")
        ]

    def add_to_watchlist(self, user_id: str, item: WatchlistItem) -> list[WatchlistItem]:
        self._users.update_one({"userId": user_id}, {"$pull": {"watchlist": {"symbol": item.symbol}}})
        self._upsert(
            user_id,
            {
                "$push": {
                    "watchlist": {
                        "symbol": item.symbol,
                        "alertPrice": item.alert_price,
                        "alertType": item.alert_type,
                        "addedAt": item.added_at,
                    }
                }
            },
        )
        return self.list_watchlist(user_id)

    def remove_from_watchlist(self, user_id: str, symbol: str) -> bool:
        result = self._users.update_one(
            {"userId": user_id}, {"$pull": {"watchlist": {"symbol": symbol}}}
        )
        return result.modified_count > 0

    def get_holdings(self, user_id: str) -> list[PortfolioHolding]:
        return [
            PortfolioHolding(
                symbol=row["symbol"],
                quantity=float(row["quantity"]),
                average_price=float(row["averagePrice"]),
                current_price=float(row.get("currentPrice") or 0.0),
                last_updated=row.get("lastUpdated") or _now(),
            )
            for row in self._field(user_id, "portfolio")
        ]

    def upsert_holding(
        self, user_id: str, holding: PortfolioHolding
    ) -> Optional[PortfolioHolding]:
        self._users.update_one(
            {"userId": user_id}, {"$pull": {"portfolio": {"symbol": holding.symbol}}}
        )
        if holding.quantity == 0:
            return None
        self._upsert(
            user_id,
            {
                "$push": {
                    "portfolio": {
                        "symbol": holding.symbol,
                        "quantity": holding.quantity,
                        "averagePrice": holding.average_price,
                        "currentPrice": holding.current_price,
                        "lastUpdated": holding.last_updated,
                    }
                }
            },
        )
        return holding
