"""
Reply strategies, tried in order by ResponseComposer.

Each strategy states up front whether it can answer a request
(can_respond) and tags its reply with a ReplySource, so callers and tests
can tell model output, templated live data and canned text apart.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from src.application.chat.formatting import format_market_cap, format_signed, format_volume
from src.application.chat.prompts import build_chat_prompt
from src.application.chat.suggestions import (
    contextual_suggestions,
    determine_message_type,
    extract_suggestions,
    symbol_suggestions,
)
from src.domain.entities.chat import ChatMessage, ChatReply, ReplySource
from src.domain.entities.quote import Quote, RelevantMarketData
from src.domain.errors import UpstreamError
from src.domain.ports.llm_port import ILanguageModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositionRequest:
    message: str
    market_data: Optional[RelevantMarketData] = None
    history: list[ChatMessage] = field(default_factory=list)

    @property
    def quotes(self) -> list[Quote]:
        return self.market_data.quotes if self.market_data else []


class ResponseStrategy(ABC):
    source: ReplySource

    @abstractmethod
    def can_respond(self, request: CompositionRequest) -> bool: ...

    @abstractmethod
    async def respond(self, request: CompositionRequest) -> ChatReply: ...


class LanguageModelStrategy(ResponseStrategy):
    """Phrase the live quotes through the language model."""

    source = ReplySource.LLM

    def __init__(self, llm: Optional[ILanguageModel]) -> None:
        self._llm = llm

    def can_respond(self, request: CompositionRequest) -> bool:
        return self._llm is not None and bool(request.quotes)

    async def respond(self, request: CompositionRequest) -> ChatReply:
        prompt = build_chat_prompt(request.message, request.quotes, request.history)
        text = await asyncio.to_thread(self._llm.generate, prompt)
        if not text or not text.strip():
            raise UpstreamError("Invalid or empty response from language model")
        suggestions = extract_suggestions(text) or contextual_suggestions(
            request.message, request.market_data
        )
        return ChatReply(
            text=text,
            message_type=determine_message_type(request.message),
            suggestions=suggestions,
            source=self.source,
            market_data=request.market_data,
        )


class FormattedStrategy(ResponseStrategy):
    """Render the first quote into a fixed markdown template."""

    source = ReplySource.FORMATTED

    def can_respond(self, request: CompositionRequest) -> bool:
        return bool(request.quotes)

    async def respond(self, request: CompositionRequest) -> ChatReply:
        quote = request.quotes[0]
        return ChatReply(
            text=render_quote(quote),
            message_type="stock_quote",
            suggestions=symbol_suggestions(quote.symbol),
            source=self.source,
            market_data=request.market_data,
        )


def render_quote(quote: Quote) -> str:
    trend = "up" if quote.change_percent >= 0 else "down"
    lines = [
        f"**{quote.symbol} - {quote.display_name}**",
        "",
        f"**Current Price:** ${quote.price:.2f}",
        f"**Change:** {format_signed(quote.change, '$')} "
        f"({format_signed(quote.change_percent, suffix='%')})",
        "",
        "**Today's Trading:**",
        f"- Open: ${quote.open:.2f}",
        f"- High: ${quote.day_high:.2f}",
        f"- Low: ${quote.day_low:.2f}",
        f"- Previous Close: ${quote.previous_close:.2f}",
        f"- Volume: {format_volume(quote.volume)}",
        "",
    ]
    if quote.market_cap:
        lines.append(f"**Market Cap:** {format_market_cap(quote.market_cap)}")
    if quote.pe_ratio:
        lines.append(f"**P/E Ratio:** {quote.pe_ratio:.2f}")
    if quote.dividend_yield:
        lines.append(f"**Dividend Yield:** {quote.dividend_yield * 100:.2f}%")
    if quote.fifty_two_week_high:
        lines.append(f"**52-Week High:** ${quote.fifty_two_week_high:.2f}")
    if quote.fifty_two_week_low:
        lines.append(f"**52-Week Low:** ${quote.fifty_two_week_low:.2f}")

    insight = f"{quote.symbol} is trading {trend} today"
    if abs(quote.change_percent) > 2:
        insight += f" with significant movement ({abs(quote.change_percent):.2f}%)"
    elif abs(quote.change_percent) < 0.5:
        insight += " with minimal volatility"
    lines += ["", "**Quick Insight:**", f"{insight}."]

    updated = f"**Updated:** {quote.fetched_at.strftime('%b %d, %I:%M %p')}"
    if quote.exchange:
        updated += f" • {quote.exchange}"
    lines += ["", updated, ""]
    if quote.is_live:
        lines.append("*Real-time data powered by Yahoo Finance*")
    else:
        lines.append("*Simulated data: live quotes are currently unavailable*")
    return "\n".join(lines)


class MockStrategy(ResponseStrategy):
    """Canned help text; always available, so it terminates the chain."""

    source = ReplySource.MOCK

    def can_respond(self, request: CompositionRequest) -> bool:
        return True

    async def respond(self, request: CompositionRequest) -> ChatReply:
        logger.info("Using mock response (no market data available)")
        lower = (request.message or "").lower()
        if any(word in lower for word in ("price", "stock", "quote")):
            body = [
                "I can help you get real-time stock information!",
                "",
                "**Try asking:**",
                '- "What\'s the stock price of AAPL?"',
                '- "Show me MSFT quote"',
                '- "TSLA stock price"',
                '- "How is GOOGL performing?"',
                "",
                "I'll fetch live data from Yahoo Finance for you!",
            ]
        else:
            body = [
                "**I can help you with:**",
                "",
                "- Real-time stock quotes & prices",
                "- Market trends & analysis",
                "- Portfolio insights",
                "- Trading strategies",
                "- Investment recommendations",
                "",
                "*Ask me about any stock symbol (AAPL, MSFT, TSLA, etc.)*",
            ]
        return ChatReply(
            text="\n".join(["**Sentivest AI - Your Trading Assistant**", ""] + body),
            message_type="text",
            suggestions=["Show AAPL price", "Analyze MSFT", "Market summary", "Help"],
            source=self.source,
            market_data=request.market_data,
        )
