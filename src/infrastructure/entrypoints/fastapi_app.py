"""
FastAPI entry point for the watchlist HTTP API.

This module is the Composition Root: it loads settings, optionally pulls the
Finnhub credential from AWS Secrets Manager, wires the in-memory store and the
market data provider chain, and hands them to WatchlistService.

create_app() takes an already-built service so tests can mount isolated
instances with fake providers.

Run locally:
    uvicorn src.infrastructure.entrypoints.fastapi_app:app --reload --port 8000
"""

import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

load_dotenv()

from src.application.services.watchlist_service import WatchlistService
from src.domain.entities.stock import Period
from src.domain.exceptions import (
    AddStockFailedError,
    DuplicateSymbolError,
    InvalidInputError,
    MarketDataError,
    StockNotFoundError,
    StorageError,
    WatchlistError,
)
from src.domain.ports.secret_store_port import ISecretStore
from src.infrastructure.config.settings import Settings
from src.infrastructure.entrypoints.schemas import (
    AddStockRequest,
    StatsResponse,
    StockResponse,
    SymbolMatchResponse,
    ValidationResponse,
)
from src.infrastructure.logging_config import setup_logging
from src.infrastructure.stock_data.factory import build_market_data_provider
from src.infrastructure.storage.memory_store import InMemoryWatchlistStore

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[WatchlistError], int]] = [
    (InvalidInputError, 400),
    (DuplicateSymbolError, 409),
    (StockNotFoundError, 404),
    (AddStockFailedError, 400),
    (MarketDataError, 400),
    (StorageError, 500),
]


def _status_for(exc: WatchlistError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def _message_for(exc: WatchlistError) -> str:
    if isinstance(exc, DuplicateSymbolError):
        return "Stock already in watchlist"
    if isinstance(exc, StockNotFoundError):
        return "Stock not found"
    if isinstance(exc, StorageError):
        return "Watchlist storage error"
    return str(exc)


def create_app(service: WatchlistService) -> FastAPI:
    """Build the FastAPI application around an injected WatchlistService."""
    app = FastAPI(title="Stock Watchlist API")

    # ------------------------------------------------------------------
    # Error translation
    # ------------------------------------------------------------------

    @app.exception_handler(WatchlistError)
    async def watchlist_error_handler(request: Request, exc: WatchlistError):
        status = _status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"message": _message_for(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = next(iter(exc.errors()), {})
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    @app.get("/api/stocks", response_model=list[StockResponse])
    def list_stocks(period: Period = Query(Period.ONE_DAY)):
        """Every tracked stock refreshed for *period*, newest first."""
        return [StockResponse.from_entry(e) for e in service.list_stocks(period)]

    @app.post("/api/stocks", response_model=StockResponse, status_code=201)
    def add_stock(body: AddStockRequest):
        return StockResponse.from_entry(service.add_stock(body.symbol))

    @app.delete("/api/stocks/{stock_id}", status_code=204)
    def remove_stock(stock_id: str):
        service.remove_stock(stock_id)
        return Response(status_code=204)

    @app.get("/api/stats", response_model=StatsResponse)
    def get_stats():
        return StatsResponse.from_stats(service.get_stats())

    @app.get("/api/validate/{symbol}", response_model=ValidationResponse)
    def validate_symbol(symbol: str):
        try:
            snapshot = service.validate_symbol(symbol)
        except WatchlistError as exc:
            return JSONResponse(
                status_code=400, content={"valid": False, "message": str(exc)}
            )
        return ValidationResponse.from_snapshot(snapshot)

    @app.get("/api/search", response_model=list[SymbolMatchResponse])
    def search_symbols(q: str = Query(..., min_length=1)):
        return [SymbolMatchResponse.from_match(m) for m in service.search_symbols(q)]

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def build_service(settings: Settings) -> WatchlistService:
    return WatchlistService(
        store=InMemoryWatchlistStore(),
        provider=build_market_data_provider(settings),
    )


def load_settings(secret_store: Optional[ISecretStore] = None) -> Settings:
    """Read settings, first pulling the Finnhub secret into the environment if configured.

    When FINNHUB_SECRET_ARN is set, the secret is exported and the settings
    are read again so FINNHUB_API_KEY picks up the secret value.
    """
    settings = Settings.from_env()
    if not settings.finnhub_secret_arn:
        return settings
    if secret_store is None:
        from src.infrastructure.secrets.secrets_manager_adapter import SecretsManagerAdapter

        secret_store = SecretsManagerAdapter(region=settings.aws_region)
    secret_store.load_into_env(settings.finnhub_secret_arn)
    return Settings.from_env()


# ---------------------------------------------------------------------------
# Composition Root: wire all dependencies once at startup
# ---------------------------------------------------------------------------
_settings = load_settings()
setup_logging(_settings.log_level)

app = create_app(build_service(_settings))
