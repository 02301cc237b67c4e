"""
Prompt builders for the language model.

Kept in the application layer, next to the reply rules they encode, and free
of any provider SDK.
"""

from typing import Optional

from src.application.chat.formatting import format_market_cap, format_signed, format_volume
from src.domain.entities.chat import ChatMessage
from src.domain.entities.quote import DetailedQuote, Quote

ASSISTANT_PERSONA = (
    "You are Sentivest AI, an expert financial advisor and trading assistant "
    "specializing in stock market analysis."
)

HISTORY_TURNS = 2
HISTORY_SNIPPET_CHARS = 100

RESPONSE_INSTRUCTIONS = """**Response Instructions:**
1. Answer directly using the LIVE DATA provided above
2. Include specific prices, percentages, and metrics from the data
3. Format with clear bullet points
4. Keep the response between 200 and 300 words
5. End with 2-3 actionable next steps
6. Be conversational yet professional
7. Never claim you lack real-time data when it is provided above"""


def _quote_block(quote: Quote) -> str:
    lines = [
        f"**{quote.symbol}** - {quote.display_name}",
        f"- Current Price: ${quote.price:.2f}",
        f"- Today's Change: {format_signed(quote.change, '$')} "
        f"({format_signed(quote.change_percent, suffix='%')})",
        f"- Day Range: ${quote.day_low:.2f} - ${quote.day_high:.2f}",
        f"- Volume: {format_volume(quote.volume)}",
    ]
    if quote.market_cap:
        lines.append(f"- Market Cap: {format_market_cap(quote.market_cap)}")
    if quote.pe_ratio:
        lines.append(f"- P/E Ratio: {quote.pe_ratio:.2f}")
    if quote.dividend_yield:
        lines.append(f"- Dividend Yield: {quote.dividend_yield * 100:.2f}%")
    return "\n".join(lines)


def _history_block(history: list[ChatMessage]) -> Optional[str]:
    turns = [m for m in history if m.content][-HISTORY_TURNS:]
    if not turns:
        return None
    lines = ["**Conversation History:**"]
    for message in turns:
        speaker = "User" if message.role == "user" else "Assistant"
        snippet = message.content[:HISTORY_SNIPPET_CHARS]
        if len(message.content) > HISTORY_SNIPPET_CHARS:
            snippet += "..."
        lines.append(f"{speaker}: {snippet}")
    return "\n".join(lines)


def build_chat_prompt(message: str, quotes: list[Quote], history: list[ChatMessage]) -> str:
    sections = [ASSISTANT_PERSONA]
    if quotes:
        data = "\n\n".join(_quote_block(q) for q in quotes)
        sections.append(f"**REAL-TIME MARKET DATA (live from Yahoo Finance):**\n\n{data}")
        sections.append(
            "**CRITICAL: You HAVE live real-time data above. Use these exact numbers "
            "in your response.**"
        )
    history_block = _history_block(history)
    if history_block:
        sections.append(history_block)
    sections.append(f"**Current Question:** {message}")
    sections.append(RESPONSE_INSTRUCTIONS)
    sections.append("Generate your expert response now:")
    return "\n\n".join(sections)


def build_analysis_prompt(symbol: str, detailed: DetailedQuote, analysis_type: str) -> str:
    quote = detailed.quote
    pe = f"{quote.pe_ratio:.2f}" if quote.pe_ratio else "N/A"
    lines = [
        f"Provide a concise {analysis_type} analysis for {symbol}:",
        "",
        f"Price: ${quote.price:.2f}",
        f"Change: {quote.change_percent:.2f}%",
        f"Volume: {format_volume(quote.volume)}",
        f"P/E: {pe}",
    ]
    if detailed.history and detailed.history.records:
        closes = [r.close for r in detailed.history.records]
        lines.append(
            f"{detailed.history.period} range: ${min(closes):.2f} - ${max(closes):.2f} "
            f"({len(closes)} sessions, last close ${closes[-1]:.2f})"
        )
    lines += [
        "",
        "Include:",
        "1. Technical outlook",
        "2. Recommendation (Buy/Hold/Sell)",
        "3. Price target",
        "4. Risk level",
        "",
        "Keep under 200 words with bullets.",
    ]
    return "\n".join(lines)
