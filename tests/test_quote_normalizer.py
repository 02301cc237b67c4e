import math

import pytest

from src.application.market_data.quote_normalizer import (
    build_mock_quote,
    coalesce,
    coalesce_number,
    normalize_quote,
)
from src.domain.entities.quote import SourceTag
from tests.conftest import FIXED_NOW, make_payload


def test_maps_yfinance_payload_to_quote():
    quote = normalize_quote(make_payload("AAPL", price=180.0, marketCap=2.8e12), fetched_at=FIXED_NOW)

    assert quote.symbol == "AAPL"
    assert quote.display_name == "AAPL Inc."
    assert quote.price == 180.0
    assert quote.volume == 1_250_000
    assert quote.market_cap == 2.8e12
    assert quote.exchange == "NasdaqGS"
    assert quote.source_tag is SourceTag.LIVE
    assert quote.fetched_at == FIXED_NOW


def test_missing_core_numbers_default_to_zero_and_valuations_stay_none():
    quote = normalize_quote({"symbol": "xyz", "currentPrice": 12.5}, fetched_at=FIXED_NOW)

    assert quote.symbol == "XYZ"
    assert quote.price == 12.5
    assert quote.change == 0.0
    assert quote.day_high == 0.0
    assert quote.volume == 0
    assert quote.market_cap is None
    assert quote.pe_ratio is None
    assert quote.dividend_yield is None
    assert quote.currency == "USD"
    assert quote.display_name == "XYZ"


def test_unparsable_numbers_fall_through_to_the_next_alias():
    assert coalesce_number({"regularMarketPrice": "N/A", "currentPrice": "12.5"}, "price") == 12.5
    assert coalesce_number({"regularMarketPrice": "N/A"}, "price") is None

    quote = normalize_quote(
        {
            "symbol": "AAPL",
            "regularMarketPrice": "N/A",
            "currentPrice": 7.0,
            "regularMarketVolume": "--",
            "volume": 1200,
            "trailingPE": "Infinity",
            "peRatio": 21.5,
        },
        fetched_at=FIXED_NOW,
    )
    assert quote.price == 7.0
    assert quote.volume == 1200
    assert quote.pe_ratio == 21.5


def test_first_present_alias_wins_and_zero_counts_as_present():
    assert coalesce({"regularMarketPrice": 0, "currentPrice": 5}, "price") == 0
    assert coalesce({"regularMarketPrice": None, "currentPrice": 5}, "price") == 5


def test_nan_counts_as_missing():
    quote = normalize_quote(
        {"symbol": "AAPL", "regularMarketPrice": math.nan, "currentPrice": 7.0, "trailingPE": math.nan},
        fetched_at=FIXED_NOW,
    )
    assert quote.price == 7.0
    assert quote.pe_ratio is None


def test_reversed_day_range_is_swapped():
    quote = normalize_quote(
        {"symbol": "AAPL", "price": 10, "dayHigh": 9.0, "dayLow": 11.0}, fetched_at=FIXED_NOW
    )
    assert quote.day_high == 11.0
    assert quote.day_low == 9.0


def test_symbol_falls_back_to_argument_and_is_required():
    assert normalize_quote({"price": 1}, fetched_at=FIXED_NOW, symbol="msft").symbol == "MSFT"
    with pytest.raises(ValueError):
        normalize_quote({"price": 1}, fetched_at=FIXED_NOW)


def test_mock_quote_is_deterministic_and_tagged():
    first = build_mock_quote("aapl", FIXED_NOW)
    second = build_mock_quote("AAPL", FIXED_NOW)

    assert first == second
    assert first.source_tag is SourceTag.MOCK
    assert not first.is_live
    assert first.price > 0
    assert first.day_high >= first.day_low
