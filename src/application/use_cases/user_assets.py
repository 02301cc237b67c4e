"""
Use-cases: watchlist and portfolio management.

Both require the document store. When it is not configured every operation
raises NotConfiguredError, which the gateway reports as "feature not
available" rather than failing the whole service.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from src.application.market_data.client import MarketDataClient
from src.application.use_cases.validation import require_symbol, require_user_id
from src.domain.entities.user import ALERT_TYPES, Portfolio, PortfolioHolding, WatchlistItem
from src.domain.errors import InvalidRequestError, NotConfiguredError
from src.domain.ports.user_store_port import IUserProfileStore

logger = logging.getLogger(__name__)


def _require_store(store: Optional[IUserProfileStore], feature: str) -> IUserProfileStore:
    if store is None:
        raise NotConfiguredError(
            f"{feature} requires database. This feature will be available once a "
            "document store is configured."
        )
    return store


def _number(value: Any, name: str, allow_none: bool = False) -> Optional[float]:
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidRequestError(f"{name} must be a number")
    return float(value)


class WatchlistUseCase:
    def __init__(self, store: Optional[IUserProfileStore]) -> None:
        self._store = store

    async def items(self, user_id: str) -> list[WatchlistItem]:
        store = _require_store(self._store, "Watchlist")
        return await asyncio.to_thread(store.list_watchlist, require_user_id(user_id))

    async def add(
        self,
        user_id: str,
        symbol: str,
        alert_price: Any = None,
        alert_type: str = "none",
    ) -> list[WatchlistItem]:
        store = _require_store(self._store, "Watchlist")
        user_id = require_user_id(user_id)
        alert_type = (alert_type or "none").lower()
        if alert_type not in ALERT_TYPES:
            raise InvalidRequestError(f"alertType must be one of: {', '.join(ALERT_TYPES)}")
        price = _number(alert_price, "alertPrice", allow_none=True)
        if alert_type != "none" and price is None:
            raise InvalidRequestError("alertPrice is required when alertType is set")
        item = WatchlistItem(symbol=require_symbol(symbol), alert_price=price, alert_type=alert_type)
        return await asyncio.to_thread(store.add_to_watchlist, user_id, item)

    async def remove(self, user_id: str, symbol: str) -> bool:
        store = _require_store(self._store, "Watchlist")
        return await asyncio.to_thread(
            store.remove_from_watchlist, require_user_id(user_id), require_symbol(symbol)
        )


class PortfolioUseCase:
    def __init__(
        self, store: Optional[IUserProfileStore], market_data: MarketDataClient
    ) -> None:
        self._store = store
        self._market_data = market_data

    async def get(self, user_id: str) -> Portfolio:
        """Return the user's holdings revalued at the latest available prices."""
        store = _require_store(self._store, "Portfolio tracking")
        user_id = require_user_id(user_id)
        holdings = await asyncio.to_thread(store.get_holdings, user_id)
        if not holdings:
            return Portfolio(user_id=user_id, holdings=[])

        quotes = await self._market_data.get_quotes([h.symbol for h in holdings])
        prices = {q.symbol: q.price for q in quotes}
        now = datetime.now(timezone.utc)
        refreshed = [
            replace(h, current_price=prices[h.symbol], last_updated=now) if h.symbol in prices else h
            for h in holdings
        ]
        return Portfolio(user_id=user_id, holdings=refreshed)

    async def update(
        self, user_id: str, symbol: str, quantity: Any, average_price: Any
    ) -> Portfolio:
        store = _require_store(self._store, "Portfolio tracking")
        user_id = require_user_id(user_id)
        quantity = _number(quantity, "quantity")
        average_price = _number(average_price, "averagePrice")
        if quantity < 0:
            raise InvalidRequestError("quantity must be zero or positive")
        if average_price < 0:
            raise InvalidRequestError("averagePrice must be zero or positive")
        holding = PortfolioHolding(
            symbol=require_symbol(symbol), quantity=quantity, average_price=average_price
        )
        await asyncio.to_thread(store.upsert_holding, user_id, holding)
        logger.info("Portfolio updated for %s: %s x %s", user_id, holding.symbol, quantity)
        return await self.get(user_id)
