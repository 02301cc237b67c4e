"""
Pydantic request/response models for the HTTP gateway.

All payloads use camelCase keys on the wire. Request bodies are deliberately
loose (Optional[Any]) so that missing or mistyped fields reach the use-case
validators and are reported with the gateway's own messages.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.application.use_cases.market_overview import Recommendation
from src.application.use_cases.send_chat_message import ChatOutcome
from src.domain.entities.chat import Analysis, ChatMessage
from src.domain.entities.quote import (
    MarketSummary,
    Quote,
    RelevantMarketData,
    SearchResult,
    TrendingSymbol,
)
from src.domain.entities.user import Portfolio, PortfolioHolding, WatchlistItem


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ChatMessageRequest(CamelModel):
    user_id: Optional[Any] = None
    message: Optional[Any] = None


class AnalyzeRequest(CamelModel):
    symbol: Optional[Any] = None
    analysis_type: Optional[str] = "technical"


class WatchlistRequest(CamelModel):
    user_id: Optional[Any] = None
    symbol: Optional[Any] = None
    alert_price: Optional[Any] = None
    alert_type: Optional[str] = "none"


class PortfolioRequest(CamelModel):
    user_id: Optional[Any] = None
    symbol: Optional[Any] = None
    quantity: Optional[Any] = None
    average_price: Optional[Any] = None


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


class QuoteModel(CamelModel):
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    day_high: float
    day_low: float
    open: float
    previous_close: float
    volume: int
    average_volume: int
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    forward_pe: Optional[float] = None
    dividend_yield: Optional[float] = None
    fifty_two_week_high: float
    fifty_two_week_low: float
    currency: str
    exchange: Optional[str] = None
    timestamp: datetime
    source: str

    @classmethod
    def from_entity(cls, quote: Quote) -> "QuoteModel":
        return cls(
            symbol=quote.symbol,
            name=quote.display_name,
            price=quote.price,
            change=quote.change,
            change_percent=quote.change_percent,
            day_high=quote.day_high,
            day_low=quote.day_low,
            open=quote.open,
            previous_close=quote.previous_close,
            volume=quote.volume,
            average_volume=quote.average_volume,
            market_cap=quote.market_cap,
            pe_ratio=quote.pe_ratio,
            forward_pe=quote.forward_pe,
            dividend_yield=quote.dividend_yield,
            fifty_two_week_high=quote.fifty_two_week_high,
            fifty_two_week_low=quote.fifty_two_week_low,
            currency=quote.currency,
            exchange=quote.exchange,
            timestamp=quote.fetched_at,
            source=quote.source_tag.value,
        )


class MarketContextModel(CamelModel):
    quotes: list[QuoteModel]
    extracted_symbols: list[str]
    timestamp: datetime

    @classmethod
    def from_entity(cls, data: RelevantMarketData) -> "MarketContextModel":
        return cls(
            quotes=[QuoteModel.from_entity(q) for q in data.quotes],
            extracted_symbols=data.extracted_symbols,
            timestamp=data.timestamp,
        )


class IndexModel(CamelModel):
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float


class TrendingModel(CamelModel):
    symbol: str
    name: Optional[str] = None
    change_percent: Optional[float] = None

    @classmethod
    def from_entity(cls, item: TrendingSymbol) -> "TrendingModel":
        return cls(symbol=item.symbol, name=item.name, change_percent=item.change_percent)


class MarketSummaryModel(CamelModel):
    indices: list[IndexModel]
    trending: list[TrendingModel]
    market_sentiment: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, summary: MarketSummary) -> "MarketSummaryModel":
        return cls(
            indices=[
                IndexModel(
                    symbol=i.symbol,
                    name=i.name,
                    price=i.price,
                    change=i.change,
                    change_percent=i.change_percent,
                )
                for i in summary.indices
            ],
            trending=[TrendingModel.from_entity(t) for t in summary.trending],
            market_sentiment=summary.sentiment,
            timestamp=summary.timestamp,
        )


class SearchResultModel(CamelModel):
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_entity(cls, result: SearchResult) -> "SearchResultModel":
        return cls(
            symbol=result.symbol,
            name=result.name,
            exchange=result.exchange,
            type=result.quote_type,
        )


class QuoteResponse(CamelModel):
    success: bool = True
    data: QuoteModel
    symbol: str


class MarketSummaryResponse(CamelModel):
    success: bool = True
    data: MarketSummaryModel


class SearchResponse(CamelModel):
    success: bool = True
    query: str
    results: list[SearchResultModel]


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatMetadata(CamelModel):
    response_time_ms: int
    has_market_context: bool
    history_length: int
    timestamp: datetime


class ChatMessageResponse(CamelModel):
    success: bool = True
    response: str
    type: str
    suggestions: list[str]
    source: str
    market_data: Optional[MarketContextModel] = None
    metadata: ChatMetadata

    @classmethod
    def from_outcome(cls, outcome: ChatOutcome, timestamp: datetime) -> "ChatMessageResponse":
        reply = outcome.reply
        return cls(
            response=reply.text,
            type=reply.message_type,
            suggestions=reply.suggestions,
            source=reply.source.value,
            market_data=(
                MarketContextModel.from_entity(reply.market_data)
                if reply.market_data is not None
                else None
            ),
            metadata=ChatMetadata(
                response_time_ms=outcome.response_time_ms,
                has_market_context=outcome.has_market_context,
                history_length=outcome.history_length,
                timestamp=timestamp,
            ),
        )


class ChatMessageModel(CamelModel):
    role: str
    content: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, message: ChatMessage) -> "ChatMessageModel":
        return cls(role=message.role, content=message.content, timestamp=message.timestamp)


class HistoryResponse(CamelModel):
    success: bool = True
    chat_history: list[ChatMessageModel]
    total: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class AnalyzeResponse(CamelModel):
    success: bool = True
    symbol: str
    analysis_type: str
    analysis: str
    recommendation: str
    confidence: float
    key_points: list[str]
    source: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, analysis: Analysis, timestamp: datetime) -> "AnalyzeResponse":
        return cls(
            symbol=analysis.symbol,
            analysis_type=analysis.analysis_type,
            analysis=analysis.text,
            recommendation=analysis.recommendation,
            confidence=analysis.confidence,
            key_points=analysis.key_points,
            source=analysis.source.value,
            timestamp=timestamp,
        )


class RecommendationModel(CamelModel):
    symbol: str
    name: Optional[str] = None
    change_percent: Optional[float] = None
    rationale: str

    @classmethod
    def from_entity(cls, rec: Recommendation) -> "RecommendationModel":
        return cls(
            symbol=rec.symbol,
            name=rec.name,
            change_percent=rec.change_percent,
            rationale=rec.rationale,
        )


class RecommendationsResponse(CamelModel):
    success: bool = True
    category: str
    recommendations: list[RecommendationModel]


# ---------------------------------------------------------------------------
# Watchlist / portfolio
# ---------------------------------------------------------------------------


class WatchlistItemModel(CamelModel):
    symbol: str
    alert_price: Optional[float] = None
    alert_type: str
    added_at: datetime

    @classmethod
    def from_entity(cls, item: WatchlistItem) -> "WatchlistItemModel":
        return cls(
            symbol=item.symbol,
            alert_price=item.alert_price,
            alert_type=item.alert_type,
            added_at=item.added_at,
        )


class WatchlistResponse(CamelModel):
    success: bool = True
    watchlist: list[WatchlistItemModel]


class HoldingModel(CamelModel):
    symbol: str
    quantity: float
    average_price: float
    current_price: float
    market_value: float
    gain_loss: float
    last_updated: datetime

    @classmethod
    def from_entity(cls, holding: PortfolioHolding) -> "HoldingModel":
        return cls(
            symbol=holding.symbol,
            quantity=holding.quantity,
            average_price=holding.average_price,
            current_price=holding.current_price,
            market_value=holding.market_value,
            gain_loss=holding.gain_loss,
            last_updated=holding.last_updated,
        )


class PortfolioResponse(CamelModel):
    success: bool = True
    portfolio: list[HoldingModel]
    total_value: float
    total_gain_loss: float

    @classmethod
    def from_entity(cls, portfolio: Portfolio) -> "PortfolioResponse":
        return cls(
            portfolio=[HoldingModel.from_entity(h) for h in portfolio.holdings],
            total_value=portfolio.total_value,
            total_gain_loss=portfolio.total_gain_loss,
        )
