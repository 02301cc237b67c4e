"""
FastAPI entry point: the HTTP gateway of the trading chat service.

This module is the Composition Root: it reads Settings, optionally pulls
secrets into the environment, wires all infrastructure adapters and passes
them to the application layer through a Container stored on ``app.state``.
Tests call ``create_app(Container.assemble(...))`` with fakes instead.

Run locally:
    uvicorn src.infrastructure.entrypoints.fastapi_app:app --reload --port 5000
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.application.chat.analyst import SymbolAnalyst
from src.application.chat.composer import ResponseComposer
from src.application.market_data.client import MarketDataClient
from src.application.market_data.quote_cache import QuoteCache
from src.application.market_data.rate_limiter import FixedWindowRateLimiter
from src.application.use_cases.analyze_symbol import AnalyzeSymbolUseCase
from src.application.use_cases.chat_history import ChatHistoryUseCase
from src.application.use_cases.get_market_quote import GetMarketQuoteUseCase
from src.application.use_cases.market_overview import (
    GetMarketSummaryUseCase,
    GetRecommendationsUseCase,
    SearchSymbolsUseCase,
)
from src.application.use_cases.send_chat_message import SendChatMessageUseCase
from src.application.use_cases.user_assets import PortfolioUseCase, WatchlistUseCase
from src.domain.errors import (
    GatewayError,
    InvalidRequestError,
    NotConfiguredError,
    RateLimitedError,
    UpstreamError,
)
from src.domain.ports.llm_port import ILanguageModel
from src.domain.ports.observability_port import IObservabilityHandler, NullObservabilityHandler
from src.domain.ports.stock_data_port import IStockDataProvider
from src.domain.ports.user_store_port import IChatHistoryStore, IUserProfileStore
from src.infrastructure.config.settings import Settings, get_settings
from src.infrastructure.entrypoints.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ChatMessageModel,
    ChatMessageRequest,
    ChatMessageResponse,
    HistoryResponse,
    MarketSummaryModel,
    MarketSummaryResponse,
    MessageResponse,
    PortfolioRequest,
    PortfolioResponse,
    QuoteModel,
    QuoteResponse,
    RecommendationModel,
    RecommendationsResponse,
    SearchResponse,
    SearchResultModel,
    WatchlistItemModel,
    WatchlistRequest,
    WatchlistResponse,
)
from src.infrastructure.observability.logging_config import configure_logging
from src.infrastructure.persistence.in_memory_history import InMemoryChatHistoryStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "Trading Chatbot API"
VERSION = "1.0.0"

CORS_METHODS = ["GET", "POST", "PUT", "DELETE"]
CORS_HEADERS = ["Content-Type", "Authorization"]

_ERROR_STATUS = (
    (RateLimitedError, 429, "Rate limited"),
    (UpstreamError, 502, "Upstream unavailable"),
    (InvalidRequestError, 400, "Invalid request"),
    (NotConfiguredError, 501, "Feature not available"),
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


@dataclass
class Container:
    market_data: MarketDataClient
    chat: SendChatMessageUseCase
    history: ChatHistoryUseCase
    quote: GetMarketQuoteUseCase
    analyze: AnalyzeSymbolUseCase
    summary: GetMarketSummaryUseCase
    search: SearchSymbolsUseCase
    recommendations: GetRecommendationsUseCase
    watchlist: WatchlistUseCase
    portfolio: PortfolioUseCase
    observability: IObservabilityHandler
    llm_enabled: bool = False
    user_store: Optional[Any] = None
    development: bool = True
    sweep_interval_seconds: float = 300.0
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def assemble(
        cls,
        market_data: MarketDataClient,
        llm: Optional[ILanguageModel] = None,
        history_store: Optional[IChatHistoryStore] = None,
        profile_store: Optional[IUserProfileStore] = None,
        observability: Optional[IObservabilityHandler] = None,
        mock_quotes: bool = False,
        development: bool = True,
        sweep_interval_seconds: float = 300.0,
        cors_origins: tuple[str, ...] = ("*",),
    ) -> "Container":
        """Build every use case around one shared MarketDataClient."""
        history_store = history_store or InMemoryChatHistoryStore()
        return cls(
            market_data=market_data,
            chat=SendChatMessageUseCase(market_data, ResponseComposer.default(llm), history_store),
            history=ChatHistoryUseCase(history_store),
            quote=GetMarketQuoteUseCase(market_data, mock_fallback=mock_quotes),
            analyze=AnalyzeSymbolUseCase(market_data, SymbolAnalyst(llm)),
            summary=GetMarketSummaryUseCase(market_data),
            search=SearchSymbolsUseCase(market_data),
            recommendations=GetRecommendationsUseCase(market_data),
            watchlist=WatchlistUseCase(profile_store),
            portfolio=PortfolioUseCase(profile_store, market_data),
            observability=observability or NullObservabilityHandler(),
            llm_enabled=llm is not None,
            user_store=profile_store,
            development=development,
            sweep_interval_seconds=sweep_interval_seconds,
            cors_origins=tuple(cors_origins),
        )


def get_container(request: Request) -> Container:
    return request.app.state.container


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------


def _error_response(
    request: Request, status_code: int, error: str, message: str, details: Any = None
) -> JSONResponse:
    body: dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "timestamp": _now().isoformat(),
    }
    if details is not None and request.app.state.container.development:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    for error_type, status_code, label in _ERROR_STATUS:
        if isinstance(exc, error_type):
            if status_code >= 500:
                logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
            return _error_response(request, status_code, label, exc.message, details=exc.code)
    logger.error("Unmapped gateway error on %s: %s", request.url.path, exc.message)
    return _error_response(request, 500, "Internal server error", exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        request,
        400,
        "Invalid request",
        "Request parameters or body are invalid",
        details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()],
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(
            request, 404, "Route not found", f"Cannot {request.method} {request.url.path}"
        )
    return _error_response(request, exc.status_code, "Request failed", str(exc.detail))


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        request, 500, "Internal server error", "Something went wrong", details=str(exc)
    )


def _camel_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel(str(k)): _camel_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camel_keys(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Routes: /api/chat
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/chat")


@router.post("/message", response_model=ChatMessageResponse)
async def send_message(body: ChatMessageRequest, c: Container = Depends(get_container)):
    outcome = await c.chat.execute(body.user_id, body.message)
    return ChatMessageResponse.from_outcome(outcome, timestamp=_now())


@router.get("/history/{user_id}", response_model=HistoryResponse)
async def get_history(
    user_id: str, limit: int = Query(20), c: Container = Depends(get_container)
):
    messages = await c.history.get(user_id, limit)
    return HistoryResponse(
        chat_history=[ChatMessageModel.from_entity(m) for m in messages],
        total=len(messages),
    )


@router.delete("/history/{user_id}", response_model=MessageResponse)
async def clear_history(user_id: str, c: Container = Depends(get_container)):
    cleared = await c.history.clear(user_id)
    message = "Chat history cleared successfully" if cleared else "No chat history to clear"
    return MessageResponse(message=message)


@router.get("/market/{symbol}", response_model=QuoteResponse)
async def get_market_data(symbol: str, c: Container = Depends(get_container)):
    quote = await c.quote.execute(symbol)
    return QuoteResponse(data=QuoteModel.from_entity(quote), symbol=quote.symbol)


@router.get("/market-summary", response_model=MarketSummaryResponse)
async def get_market_summary(c: Container = Depends(get_container)):
    summary = await c.summary.execute()
    return MarketSummaryResponse(data=MarketSummaryModel.from_entity(summary))


@router.get("/search", response_model=SearchResponse)
async def search_symbols(
    q: str = Query(""),
    limit: int = Query(10, ge=1, le=25),
    c: Container = Depends(get_container),
):
    results = await c.search.execute(q, limit=limit)
    return SearchResponse(
        query=q.strip(), results=[SearchResultModel.from_entity(r) for r in results]
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_symbol(body: AnalyzeRequest, c: Container = Depends(get_container)):
    analysis = await c.analyze.execute(body.symbol, body.analysis_type or "technical")
    return AnalyzeResponse.from_entity(analysis, timestamp=_now())


@router.get("/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    category: str = Query("general"), c: Container = Depends(get_container)
):
    picks = await c.recommendations.execute(category)
    return RecommendationsResponse(
        category=category.strip().lower(),
        recommendations=[RecommendationModel.from_entity(p) for p in picks],
    )


@router.get("/health")
async def chat_health(c: Container = Depends(get_container)):
    return {
        "success": True,
        "status": "healthy",
        "services": {
            "marketData": True,
            "llm": c.llm_enabled,
            "database": c.user_store is not None,
        },
        "features": {
            "chat": True,
            "marketQuotes": True,
            "aiAnalysis": c.llm_enabled,
            "watchlist": c.user_store is not None,
            "portfolio": c.user_store is not None,
        },
        "activeUsers": await asyncio.to_thread(c.history.active_users),
        "cache": _camel_keys(c.market_data.cache_stats()),
        "timestamp": _now().isoformat(),
    }


@router.get("/watchlist/{user_id}", response_model=WatchlistResponse)
async def get_watchlist(user_id: str, c: Container = Depends(get_container)):
    items = await c.watchlist.items(user_id)
    return WatchlistResponse(watchlist=[WatchlistItemModel.from_entity(i) for i in items])


@router.post("/watchlist", response_model=WatchlistResponse)
async def add_to_watchlist(body: WatchlistRequest, c: Container = Depends(get_container)):
    items = await c.watchlist.add(
        body.user_id, body.symbol, body.alert_price, body.alert_type or "none"
    )
    return WatchlistResponse(watchlist=[WatchlistItemModel.from_entity(i) for i in items])


@router.delete("/watchlist/{user_id}/{symbol}", response_model=MessageResponse)
async def remove_from_watchlist(
    user_id: str, symbol: str, c: Container = Depends(get_container)
):
    removed = await c.watchlist.remove(user_id, symbol)
    message = (
        f"{symbol.upper()} removed from watchlist"
        if removed
        else f"{symbol.upper()} was not in the watchlist"
    )
    return MessageResponse(message=message)


@router.get("/portfolio/{user_id}", response_model=PortfolioResponse)
async def get_portfolio(user_id: str, c: Container = Depends(get_container)):
    return PortfolioResponse.from_entity(await c.portfolio.get(user_id))


@router.post("/portfolio", response_model=PortfolioResponse)
async def update_portfolio(body: PortfolioRequest, c: Container = Depends(get_container)):
    portfolio = await c.portfolio.update(
        body.user_id, body.symbol, body.quantity, body.average_price
    )
    return PortfolioResponse.from_entity(portfolio)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


async def _sweep_loop(market_data: MarketDataClient, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = market_data.sweep_cache()
        if removed:
            logger.info("Cache sweep removed %d stale entries", removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: Container = app.state.container
    sweeper = asyncio.create_task(
        _sweep_loop(container.market_data, container.sweep_interval_seconds)
    )
    logger.info("%s started", SERVICE_NAME)
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        container.observability.flush()
        close = getattr(container.user_store, "close", None)
        if close is not None:
            close()
            logger.info("Document store connection closed")
        logger.info("%s stopped", SERVICE_NAME)


def create_app(container: Container) -> FastAPI:
    app = FastAPI(title=SERVICE_NAME, version=VERSION, lifespan=lifespan)
    app.state.container = container
    app.state.started_at = time.monotonic()

    # Browser and mobile clients call the API cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(container.cors_origins),
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(router)

    @app.get("/")
    async def index():
        return {
            "message": SERVICE_NAME,
            "version": VERSION,
            "endpoints": {
                "health": "/health",
                "chat": "/api/chat/message",
                "history": "/api/chat/history/:userId",
                "market": "/api/chat/market/:symbol",
                "marketSummary": "/api/chat/market-summary",
                "search": "/api/chat/search?q=",
                "analyze": "/api/chat/analyze",
                "recommendations": "/api/chat/recommendations",
                "watchlist": "/api/chat/watchlist",
                "portfolio": "/api/chat/portfolio",
            },
        }

    @app.get("/health")
    async def health(request: Request):
        store = request.app.state.container.user_store
        if store is None:
            database = "not configured"
        else:
            ping = getattr(store, "ping", None)
            connected = await asyncio.to_thread(ping) if ping is not None else True
            database = "connected" if connected else "disconnected"
        return {
            "status": "OK",
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "timestamp": _now().isoformat(),
            "database": database,
        }

    return app


# ---------------------------------------------------------------------------
# Composition Root: wire real adapters once at startup
# ---------------------------------------------------------------------------


def _load_settings() -> Settings:
    """Load .env, then Secrets Manager values, before Settings are resolved."""
    load_dotenv()
    secrets_arn = os.getenv("SECRETS_ARN")
    if secrets_arn:
        from src.infrastructure.secrets.secrets_manager_adapter import SecretsManagerAdapter

        try:
            SecretsManagerAdapter().load_into_env(secrets_arn)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Could not load secrets from %s: %s", secrets_arn, exc)
    return get_settings()


def _build_observability(settings: Settings) -> IObservabilityHandler:
    if not settings.tracing_enabled:
        return NullObservabilityHandler()
    from src.infrastructure.observability.langfuse_adapter import LangfuseObservabilityHandler

    logger.info("Langfuse tracing enabled")
    return LangfuseObservabilityHandler()


def _build_llm(
    settings: Settings, observability: IObservabilityHandler
) -> Optional[ILanguageModel]:
    if not settings.LLM_ENABLED:
        logger.info("LLM disabled; replies use formatted and canned templates")
        return None
    from src.infrastructure.llm.bedrock_adapter import BedrockChatAdapter

    try:
        llm = BedrockChatAdapter(
            model_id=settings.BEDROCK_MODEL_ID,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            region=settings.AWS_DEFAULT_REGION,
            observability=observability,
        )
    except (BotoCoreError, ValueError) as exc:
        logger.warning("Bedrock client could not be created, LLM disabled: %s", exc)
        return None
    logger.info("Bedrock model %s enabled", llm.model_id)
    return llm


def _build_user_store(settings: Settings):
    if not settings.MONGODB_URI:
        logger.info("MONGODB_URI not set; chat history kept in memory, watchlist/portfolio disabled")
        return None
    from pymongo.errors import PyMongoError

    from src.infrastructure.persistence.mongo_user_store import MongoUserStore

    store = MongoUserStore(settings.MONGODB_URI, database=settings.MONGODB_DATABASE)
    try:
        store.ensure_indexes()
    except PyMongoError as exc:
        logger.warning("Could not create MongoDB indexes, continuing without them: %s", exc)
    return store


def build_container(
    settings: Settings, provider: Optional[IStockDataProvider] = None
) -> Container:
    if provider is None:
        from src.infrastructure.stock_data.yfinance_adapter import YFinanceStockDataProvider

        provider = YFinanceStockDataProvider()

    market_data = MarketDataClient(
        provider,
        cache=QuoteCache(ttl_seconds=settings.QUOTE_CACHE_TTL_SECONDS),
        rate_limiter=FixedWindowRateLimiter(limit=settings.RATE_LIMIT_PER_MINUTE),
    )
    observability = _build_observability(settings)
    user_store = _build_user_store(settings)
    return Container.assemble(
        market_data,
        llm=_build_llm(settings, observability),
        history_store=user_store,
        profile_store=user_store,
        observability=observability,
        mock_quotes=settings.MOCK_QUOTES_ENABLED,
        development=settings.is_development,
        sweep_interval_seconds=settings.QUOTE_CACHE_TTL_SECONDS * 5,
        cors_origins=tuple(settings.CORS_ORIGINS),
    )


def create_app_from_env() -> FastAPI:
    settings = _load_settings()
    configure_logging(settings.LOG_LEVEL)
    return create_app(build_container(settings))


app = create_app_from_env()


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "src.infrastructure.entrypoints.fastapi_app:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
