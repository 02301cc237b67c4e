from types import SimpleNamespace

import pandas as pd
import pytest
from yfinance.exceptions import YFRateLimitError

from src.domain.errors import RateLimitedError
from src.infrastructure.stock_data import yfinance_adapter
from src.infrastructure.stock_data.yfinance_adapter import YFinanceStockDataProvider


class FakeTicker:
    def __init__(self, info=None, last_price=None, previous_close=None, history=None):
        self.info = info or {}
        self.fast_info = SimpleNamespace(last_price=last_price, previous_close=previous_close)
        self._history = history

    def history(self, **kwargs):
        self.history_kwargs = kwargs
        return self._history


def _patch_ticker(monkeypatch, ticker):
    monkeypatch.setattr(yfinance_adapter.yf, "Ticker", lambda symbol: ticker)


def test_quote_passes_info_through_with_symbol(monkeypatch):
    _patch_ticker(monkeypatch, FakeTicker(info={"regularMarketPrice": 180.0, "shortName": "Apple"}))

    payload = YFinanceStockDataProvider().get_quote("aapl")

    assert payload["regularMarketPrice"] == 180.0
    assert payload["symbol"] == "AAPL"


def test_quote_falls_back_to_fast_info(monkeypatch):
    _patch_ticker(monkeypatch, FakeTicker(info={}, last_price=12.5, previous_close=12.0))

    payload = YFinanceStockDataProvider().get_quote("XYZ")

    assert payload["lastPrice"] == 12.5
    assert payload["previousClose"] == 12.0


def test_quote_without_any_price_is_an_error(monkeypatch):
    _patch_ticker(monkeypatch, FakeTicker(info={"shortName": "Nothing"}))

    with pytest.raises(ValueError, match="No price data"):
        YFinanceStockDataProvider().get_quote("NONE")


def test_vendor_rate_limit_is_translated(monkeypatch):
    def throttled(symbol):
        raise YFRateLimitError()

    monkeypatch.setattr(yfinance_adapter.yf, "Ticker", throttled)

    with pytest.raises(RateLimitedError):
        YFinanceStockDataProvider().get_quote("AAPL")


def test_batch_quotes_use_tickers_lookup(monkeypatch):
    tickers = SimpleNamespace(
        tickers={
            "AAPL": FakeTicker(info={"currentPrice": 180.0}),
            "MSFT": FakeTicker(info={"currentPrice": 410.0}),
        }
    )
    monkeypatch.setattr(yfinance_adapter.yf, "Tickers", lambda symbols: tickers)

    payloads = YFinanceStockDataProvider().get_quotes(["aapl", "MSFT"])

    assert [p["symbol"] for p in payloads] == ["AAPL", "MSFT"]


def test_historical_prices_are_mapped_to_records(monkeypatch):
    frame = pd.DataFrame(
        {"Open": [1.0, 2.0], "High": [1.5, 2.5], "Low": [0.5, 1.5], "Close": [1.2, 2.2], "Volume": [100, 200]},
        index=pd.to_datetime(["2024-02-28", "2024-02-29"]),
    )
    ticker = FakeTicker(history=frame)
    _patch_ticker(monkeypatch, ticker)

    prices = YFinanceStockDataProvider().get_historical_prices("AAPL", period="5d")

    assert prices.period == "5d"
    assert [r.date for r in prices.records] == ["2024-02-28", "2024-02-29"]
    assert prices.records[1].close == 2.2
    assert ticker.history_kwargs == {"period": "5d", "interval": "1d"}


def test_empty_history_is_an_error(monkeypatch):
    _patch_ticker(monkeypatch, FakeTicker(history=pd.DataFrame()))

    with pytest.raises(ValueError, match="No historical data"):
        YFinanceStockDataProvider().get_historical_prices("AAPL")


def test_trending_reads_most_actives_screen(monkeypatch):
    captured = {}

    def screen(name, count):
        captured["args"] = (name, count)
        return {
            "quotes": [
                {"symbol": "NVDA", "shortName": "NVIDIA", "regularMarketChangePercent": 3.1},
                {"shortName": "no symbol"},
                {"symbol": "TSLA", "longName": "Tesla, Inc."},
            ]
        }

    monkeypatch.setattr(yfinance_adapter.yf, "screen", screen)

    trending = YFinanceStockDataProvider().get_trending(5)

    assert captured["args"] == ("most_actives", 5)
    assert [(t.symbol, t.name) for t in trending] == [("NVDA", "NVIDIA"), ("TSLA", "Tesla, Inc.")]
    assert trending[1].change_percent is None


def test_search_maps_quotes(monkeypatch):
    class FakeSearch:
        def __init__(self, query, max_results, news_count):
            self.quotes = [
                {"symbol": "AAPL", "shortname": "Apple Inc.", "exchDisp": "NASDAQ", "quoteType": "EQUITY"}
            ]

    monkeypatch.setattr(yfinance_adapter.yf, "Search", FakeSearch)

    results = YFinanceStockDataProvider().search("apple", limit=3)

    assert results[0].symbol == "AAPL"
    assert results[0].exchange == "NASDAQ"
    assert results[0].quote_type == "EQUITY"
