"""
Domain entities for market quotes.
Zero external dependencies: pure Python dataclasses only.

A Quote is the canonical, provider-independent snapshot of one instrument.
Core numeric fields are never None (missing values are normalised to 0);
valuation fields stay None when the provider does not report them so that
"unknown" remains distinguishable from "zero".
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class SourceTag(str, Enum):
    LIVE = "live"
    MOCK = "mock"


@dataclass(frozen=True)
class Quote:
    symbol: str
    display_name: str
    price: float
    change: float
    change_percent: float
    day_high: float
    day_low: float
    open: float
    previous_close: float
    volume: int
    average_volume: int
    fetched_at: datetime
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    forward_pe: Optional[float] = None
    dividend_yield: Optional[float] = None
    fifty_two_week_high: float = 0.0
    fifty_two_week_low: float = 0.0
    currency: str = "USD"
    exchange: Optional[str] = None
    source_tag: SourceTag = SourceTag.LIVE

    @property
    def is_live(self) -> bool:
        return self.source_tag is SourceTag.LIVE


@dataclass(frozen=True)
class HistoricalRecord:
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class HistoricalPrices:
    symbol: str
    period: str
    interval: str
    records: list[HistoricalRecord]


@dataclass(frozen=True)
class DetailedQuote:
    quote: Quote
    history: Optional[HistoricalPrices] = None


@dataclass(frozen=True)
class IndexSnapshot:
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float


@dataclass(frozen=True)
class TrendingSymbol:
    symbol: str
    name: Optional[str] = None
    change_percent: Optional[float] = None


@dataclass(frozen=True)
class SearchResult:
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    quote_type: Optional[str] = None


@dataclass(frozen=True)
class MarketSummary:
    indices: list[IndexSnapshot]
    trending: list[TrendingSymbol]
    sentiment: str
    timestamp: datetime


@dataclass(frozen=True)
class RelevantMarketData:
    quotes: list[Quote]
    extracted_symbols: list[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
