import asyncio

import pytest

from src.application.chat.composer import ResponseComposer
from src.application.chat.strategies import MockStrategy
from src.application.market_data.quote_normalizer import build_mock_quote, normalize_quote
from src.domain.entities.chat import ChatMessage, ReplySource
from src.domain.entities.quote import RelevantMarketData
from src.domain.errors import RateLimitedError, UpstreamError
from tests.conftest import FIXED_NOW, FakeLanguageModel, make_payload


def _market_data(*quotes):
    return RelevantMarketData(
        quotes=list(quotes),
        extracted_symbols=[q.symbol for q in quotes],
        timestamp=FIXED_NOW,
    )


def _aapl():
    return normalize_quote(
        make_payload("AAPL", price=180.0, change_percent=2.5, marketCap=2.8e12), fetched_at=FIXED_NOW
    )


def test_no_market_data_and_no_model_gives_canned_reply():
    reply = asyncio.run(ResponseComposer.default(None).compose("hi there"))

    assert reply.source is ReplySource.MOCK
    assert reply.message_type == "text"
    assert reply.suggestions == ["Show AAPL price", "Analyze MSFT", "Market summary", "Help"]
    assert "I can help you with" in reply.text


def test_canned_reply_mentions_quotes_for_price_questions():
    reply = asyncio.run(ResponseComposer.default(None).compose("what is the stock price"))
    assert "real-time stock information" in reply.text


def test_quotes_without_model_use_formatted_template():
    data = _market_data(_aapl())

    reply = asyncio.run(ResponseComposer.default(None).compose("price of AAPL", market_data=data))

    assert reply.source is ReplySource.FORMATTED
    assert reply.message_type == "stock_quote"
    assert "**AAPL - AAPL Inc.**" in reply.text
    assert "**Current Price:** $180.00" in reply.text
    assert "significant movement" in reply.text
    assert "**Market Cap:** $2.80T" in reply.text
    assert reply.text.endswith("*Real-time data powered by Yahoo Finance*")
    assert reply.suggestions[0] == "Detailed analysis of AAPL"
    assert reply.market_data is data


def test_simulated_quote_is_labelled_as_such():
    data = _market_data(build_mock_quote("ZZZ", FIXED_NOW))

    reply = asyncio.run(ResponseComposer.default(None).compose("ZZZ", market_data=data))

    assert "Simulated data" in reply.text
    assert "powered by Yahoo Finance" not in reply.text


def test_model_reply_is_used_when_available():
    llm = FakeLanguageModel(
        "AAPL trades at $180.00.\n\nWould you like a price alert?\n1. Compare with MSFT"
    )
    history = [ChatMessage("user", "hi"), ChatMessage("assistant", "hello")]

    reply = asyncio.run(
        ResponseComposer.default(llm).compose(
            "What's the price of AAPL?", market_data=_market_data(_aapl()), history=history
        )
    )

    assert reply.source is ReplySource.LLM
    assert reply.text.startswith("AAPL trades at")
    assert reply.suggestions == ["Would you like a price alert", "Compare with MSFT"]
    assert reply.message_type == "stock_quote"
    assert "REAL-TIME MARKET DATA" in llm.prompts[0]
    assert "User: hi" in llm.prompts[0]


@pytest.mark.parametrize(
    "error",
    [
        UpstreamError("Bedrock request failed"),
        RateLimitedError("throttled"),
        RuntimeError("connection reset by peer"),
    ],
)
def test_model_failure_falls_back_to_template(error):
    llm = FakeLanguageModel(error=error)

    reply = asyncio.run(
        ResponseComposer.default(llm).compose("AAPL", market_data=_market_data(_aapl()))
    )

    assert reply.source is ReplySource.FORMATTED
    assert len(llm.prompts) == 1


def test_empty_model_answer_falls_back_to_template():
    llm = FakeLanguageModel("   ")
    reply = asyncio.run(
        ResponseComposer.default(llm).compose("AAPL", market_data=_market_data(_aapl()))
    )
    assert reply.source is ReplySource.FORMATTED


def test_model_is_skipped_without_quotes():
    llm = FakeLanguageModel("should not be used")

    reply = asyncio.run(ResponseComposer.default(llm).compose("tell me a joke"))

    assert reply.source is ReplySource.MOCK
    assert llm.prompts == []


def test_composer_requires_a_strategy():
    with pytest.raises(ValueError):
        ResponseComposer([])
    assert ResponseComposer([MockStrategy()])
