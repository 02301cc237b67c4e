"""
Single-symbol analysis: language model first, numeric template otherwise.
"""

import asyncio
import logging
from typing import Optional

from src.application.chat.prompts import build_analysis_prompt
from src.application.chat.suggestions import extract_key_points, extract_recommendation
from src.domain.entities.chat import Analysis, ReplySource
from src.domain.entities.quote import DetailedQuote
from src.domain.errors import UpstreamError
from src.domain.ports.llm_port import ILanguageModel

logger = logging.getLogger(__name__)

LLM_CONFIDENCE = 0.80
TEMPLATE_CONFIDENCE = 0.70
TARGET_UPSIDE = 1.10
STOP_LOSS = 0.95
SIGNAL_THRESHOLD_PERCENT = 2.0


class SymbolAnalyst:
    def __init__(self, llm: Optional[ILanguageModel]) -> None:
        self._llm = llm

    async def analyze(self, symbol: str, detailed: DetailedQuote, analysis_type: str) -> Analysis:
        if self._llm is not None:
            try:
                prompt = build_analysis_prompt(symbol, detailed, analysis_type)
                text = await asyncio.to_thread(self._llm.generate, prompt)
                if text and text.strip():
                    return Analysis(
                        symbol=symbol,
                        analysis_type=analysis_type,
                        text=text,
                        recommendation=extract_recommendation(text),
                        confidence=LLM_CONFIDENCE,
                        key_points=extract_key_points(text),
                        source=ReplySource.LLM,
                    )
                logger.warning("Empty analysis from language model for %s", symbol)
            except UpstreamError as exc:
                logger.warning("Language model analysis failed for %s: %s", symbol, exc)
            except Exception:
                logger.exception("Unexpected language model error while analysing %s", symbol)
        return self.template_analysis(symbol, detailed, analysis_type)

    @staticmethod
    def template_analysis(symbol: str, detailed: DetailedQuote, analysis_type: str) -> Analysis:
        quote = detailed.quote
        change = quote.change_percent
        trend = "Bullish" if change >= 0 else "Bearish"
        if change >= SIGNAL_THRESHOLD_PERCENT:
            recommendation = "BUY"
        elif change <= -SIGNAL_THRESHOLD_PERCENT:
            recommendation = "SELL"
        else:
            recommendation = "HOLD"
        text = "\n".join(
            [
                f"**{analysis_type.upper()} Analysis - {symbol}**",
                "",
                f"Current: ${quote.price:.2f}",
                f"Trend: {trend}",
                f"Target: ${quote.price * TARGET_UPSIDE:.2f}",
                f"Stop Loss: ${quote.price * STOP_LOSS:.2f}",
            ]
        )
        return Analysis(
            symbol=symbol,
            analysis_type=analysis_type,
            text=text,
            recommendation=recommendation,
            confidence=TEMPLATE_CONFIDENCE,
            key_points=[f"Current Price: ${quote.price:.2f}", f"Change: {change:.2f}%"],
            source=ReplySource.FORMATTED,
        )
