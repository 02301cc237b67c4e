"""
Domain entities for per-user watchlists and portfolios.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

ALERT_TYPES = ("above", "below", "none")


@dataclass(frozen=True)
class WatchlistItem:
    symbol: str
    alert_price: Optional[float] = None
    alert_type: str = "none"
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class PortfolioHolding:
    symbol: str
    quantity: float
    average_price: float
    current_price: float = 0.0
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def market_value(self) -> float:
        return self.current_price * self.quantity

    @property
    def gain_loss(self) -> float:
        return (self.current_price - self.average_price) * self.quantity


@dataclass(frozen=True)
class Portfolio:
    user_id: str
    holdings: list[PortfolioHolding]

    @property
    def total_value(self) -> float:
        return sum(h.market_value for h in self.holdings)

    @property
    def total_gain_loss(self) -> float:
        return sum(h.gain_loss for h in self.holdings)
