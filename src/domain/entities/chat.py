"""
Domain entities for the conversational side of the gateway.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from src.domain.entities.quote import RelevantMarketData


class ReplySource(str, Enum):
    LLM = "llm"
    FORMATTED = "formatted"
    MOCK = "mock"


@dataclass(frozen=True)
class ChatMessage:
    role: str  # 'user' or 'assistant'
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ChatReply:
    text: str
    message_type: str
    suggestions: list[str]
    source: ReplySource
    market_data: Optional[RelevantMarketData] = None


@dataclass(frozen=True)
class Analysis:
    symbol: str
    analysis_type: str
    text: str
    recommendation: str
    confidence: float
    key_points: list[str]
    source: ReplySource
