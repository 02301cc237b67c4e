"""Lightweight text heuristics: follow-up suggestions, message typing, verdicts."""

import re
from typing import Optional

from src.domain.entities.quote import RelevantMarketData

MAX_SUGGESTIONS = 3
MAX_KEY_POINTS = 5

DEFAULT_SUGGESTIONS = ["Show AAPL price", "Analyze MSFT", "Market summary", "Trading tips"]

_NUMBERED = re.compile(r"^\d+\.\s+")
_NUMBERED_CAPITALISED = re.compile(r"^\d+\.\s+[A-Z]")
_SUGGESTION_MARKERS = ("Would you like", "Try:", "Next steps:")


def extract_suggestions(text: str) -> list[str]:
    """Pull short follow-up prompts out of a model answer."""
    if not text:
        return []
    suggestions: list[str] = []
    for line in text.splitlines():
        cleaned = line.strip()
        if not (
            _NUMBERED_CAPITALISED.match(cleaned)
            or any(marker in cleaned for marker in _SUGGESTION_MARKERS)
        ):
            continue
        suggestion = re.sub(r"[?:]", "", _NUMBERED.sub("", cleaned)).strip()
        if 5 < len(suggestion) < 60:
            suggestions.append(suggestion)
    return suggestions[:MAX_SUGGESTIONS]


def symbol_suggestions(symbol: str) -> list[str]:
    return [
        f"Detailed analysis of {symbol}",
        f"Compare {symbol} with peers",
        f"{symbol} historical chart",
        "Set price alert",
    ]


def contextual_suggestions(message: str, market_data: Optional[RelevantMarketData]) -> list[str]:
    if market_data and market_data.extracted_symbols:
        return symbol_suggestions(market_data.extracted_symbols[0])
    lower = (message or "").lower()
    if "market" in lower or "summary" in lower:
        return ["Top gainers today", "Sector performance", "Market indices"]
    if "portfolio" in lower:
        return ["Show my holdings", "Add new stock", "Portfolio analysis"]
    if "analyze" in lower or "analysis" in lower:
        return ["Technical analysis", "Fundamental analysis", "Price targets"]
    return list(DEFAULT_SUGGESTIONS)


def determine_message_type(message: str) -> str:
    lower = (message or "").lower()
    if "price" in lower or "quote" in lower:
        return "stock_quote"
    if "market" in lower or "summary" in lower:
        return "market_data"
    if "analyze" in lower or "analysis" in lower:
        return "analysis"
    return "text"


def extract_recommendation(text: str) -> str:
    lower = (text or "").lower()
    if "strong buy" in lower or ("buy" in lower and "don't buy" not in lower and "dont buy" not in lower):
        return "BUY"
    if "sell" in lower and "don't sell" not in lower and "dont sell" not in lower:
        return "SELL"
    return "HOLD"


def extract_key_points(text: str) -> list[str]:
    points = [
        line.strip()
        for line in (text or "").splitlines()
        if line.strip().startswith(("•", "-", "* ")) or _NUMBERED.match(line.strip())
    ]
    return points[:MAX_KEY_POINTS]
