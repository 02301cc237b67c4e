"""
Provider payload -> canonical Quote.

Vendors (and successive versions of the same SDK) expose the same figure
under different names. QUOTE_FIELD_ALIASES lists, per canonical field, the
provider keys to try in priority order; the first one that is present wins.
None and NaN count as missing, 0 counts as present.

Core numeric fields fall back to 0 so text templates never do arithmetic on
None. Valuation fields (CORE_OPTIONAL_FIELDS) stay None when unknown.
"""

import hashlib
import math
from datetime import datetime
from typing import Any, Mapping, Optional

from src.domain.entities.quote import Quote, SourceTag

QUOTE_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": ("symbol", "ticker"),
    "display_name": ("shortName", "longName", "displayName", "name"),
    "price": ("regularMarketPrice", "currentPrice", "price", "lastPrice", "last_price"),
    "change": ("regularMarketChange", "change"),
    "change_percent": ("regularMarketChangePercent", "changePercent"),
    "day_high": ("regularMarketDayHigh", "dayHigh", "high"),
    "day_low": ("regularMarketDayLow", "dayLow", "low"),
    "open": ("regularMarketOpen", "open"),
    "previous_close": ("regularMarketPreviousClose", "previousClose", "previous_close"),
    "volume": ("regularMarketVolume", "volume"),
    "average_volume": ("averageVolume", "averageDailyVolume3Month", "averageDailyVolume10Day"),
    "market_cap": ("marketCap", "market_cap"),
    "pe_ratio": ("trailingPE", "pe", "peRatio"),
    "forward_pe": ("forwardPE",),
    "dividend_yield": ("dividendYield", "trailingAnnualDividendYield"),
    "fifty_two_week_high": ("fiftyTwoWeekHigh", "yearHigh"),
    "fifty_two_week_low": ("fiftyTwoWeekLow", "yearLow"),
    "currency": ("currency", "financialCurrency"),
    "exchange": ("fullExchangeName", "exchange"),
}

CORE_NUMERIC_FIELDS = (
    "price",
    "change",
    "change_percent",
    "day_high",
    "day_low",
    "open",
    "previous_close",
    "fifty_two_week_high",
    "fifty_two_week_low",
)
CORE_INTEGER_FIELDS = ("volume", "average_volume")
CORE_OPTIONAL_FIELDS = ("market_cap", "pe_ratio", "forward_pe", "dividend_yield")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def coalesce(raw: Mapping[str, Any], canonical: str) -> Any:
    """Return the first present value among the aliases of *canonical*, else None."""
    for alias in QUOTE_FIELD_ALIASES[canonical]:
        value = raw.get(alias)
        if not _is_missing(value):
            return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) or math.isinf(result) else result


def coalesce_number(raw: Mapping[str, Any], canonical: str) -> Optional[float]:
    """Like coalesce, but skips aliases whose value is not a finite number."""
    for alias in QUOTE_FIELD_ALIASES[canonical]:
        value = _as_float(raw.get(alias))
        if value is not None:
            return value
    return None


def normalize_quote(
    raw: Mapping[str, Any],
    fetched_at: datetime,
    source_tag: SourceTag = SourceTag.LIVE,
    symbol: Optional[str] = None,
) -> Quote:
    """Build a Quote from a provider payload.

    Args:
        raw:        Provider field mapping (any alias set from QUOTE_FIELD_ALIASES).
        fetched_at: When the payload was obtained.
        source_tag: LIVE for provider data, MOCK for synthetic data.
        symbol:     Fallback symbol when the payload carries none.

    Raises:
        ValueError: if no symbol can be determined.
    """
    resolved_symbol = coalesce(raw, "symbol") or symbol
    if not resolved_symbol:
        raise ValueError("provider payload has no symbol")
    resolved_symbol = str(resolved_symbol).strip().upper()

    numbers = {name: coalesce_number(raw, name) or 0.0 for name in CORE_NUMERIC_FIELDS}
    integers = {name: int(coalesce_number(raw, name) or 0) for name in CORE_INTEGER_FIELDS}
    optional = {name: coalesce_number(raw, name) for name in CORE_OPTIONAL_FIELDS}

    numbers["price"] = max(numbers["price"], 0.0)
    reported_high = coalesce_number(raw, "day_high")
    reported_low = coalesce_number(raw, "day_low")
    if reported_high is not None and reported_low is not None and reported_high < reported_low:
        numbers["day_high"], numbers["day_low"] = reported_low, reported_high

    exchange = coalesce(raw, "exchange")
    return Quote(
        symbol=resolved_symbol,
        display_name=str(coalesce(raw, "display_name") or resolved_symbol),
        currency=str(coalesce(raw, "currency") or "USD"),
        exchange=str(exchange) if exchange is not None else None,
        fetched_at=fetched_at,
        source_tag=source_tag,
        **numbers,
        **integers,
        **optional,
    )


def build_mock_quote(symbol: str, fetched_at: datetime) -> Quote:
    """Deterministic synthetic quote, tagged MOCK, for when live data is unavailable."""
    symbol = symbol.strip().upper()
    seed = int(hashlib.sha256(symbol.encode("utf-8")).hexdigest()[:8], 16)
    price = round(20 + (seed % 48000) / 100, 2)
    change_percent = round(((seed >> 8) % 600 - 300) / 100, 2)
    previous_close = round(price / (1 + change_percent / 100), 2)
    return Quote(
        symbol=symbol,
        display_name=f"{symbol} (simulated)",
        price=price,
        change=round(price - previous_close, 2),
        change_percent=change_percent,
        day_high=round(max(price, previous_close) * 1.01, 2),
        day_low=round(min(price, previous_close) * 0.99, 2),
        open=previous_close,
        previous_close=previous_close,
        volume=(seed % 9_000_000) + 100_000,
        average_volume=(seed % 7_000_000) + 500_000,
        fetched_at=fetched_at,
        source_tag=SourceTag.MOCK,
    )
