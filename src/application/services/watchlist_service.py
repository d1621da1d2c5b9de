"""
Application service: orchestrates the watchlist operations.

Business decisions owned here:
  - Adding a symbol requires a successful 1D snapshot first.
  - Listing is a write-through refresh: fresh prices are persisted to the
    store, and a failing symbol degrades to its stored values instead of
    failing the request.

Infrastructure adapters (IWatchlistStore, IMarketDataProvider) are injected;
no imports from httpx, yfinance, fastapi or any other external library appear here.
"""

import dataclasses
import logging

from src.domain.entities.stock import (
    MarketSnapshot,
    Period,
    SymbolMatch,
    TrackedStock,
    WatchlistEntry,
    WatchlistStats,
)
from src.domain.exceptions import (
    AddStockFailedError,
    DuplicateSymbolError,
    InvalidInputError,
    MarketDataError,
    StockNotFoundError,
    UpstreamUnavailableError,
)
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.ports.watchlist_store_port import IWatchlistStore
from src.domain.services.price_series import trend_for

logger = logging.getLogger(__name__)


def _normalize(value: str, what: str) -> str:
    if not value or not value.strip():
        raise InvalidInputError(f"{what} must be a non-empty string")
    return value.strip().upper()


class WatchlistService:
    DEFAULT_PERIOD = Period.ONE_DAY

    def __init__(self, store: IWatchlistStore, provider: IMarketDataProvider) -> None:
        self._store = store
        self._provider = provider

    def list_stocks(self, period: Period = DEFAULT_PERIOD) -> list[WatchlistEntry]:
        """Refresh every tracked stock for *period* and return the cards.

        Each symbol is fetched in isolation; one upstream failure never aborts
        the others. Entries keep the store's newest-first order.
        """
        return [self._refresh(stock, period) for stock in self._store.list_stocks()]

    def add_stock(self, symbol: str) -> WatchlistEntry:
        """Validate *symbol* upstream and admit it to the watchlist.

        Raises:
            InvalidInputError:    if *symbol* is blank.
            DuplicateSymbolError: if the symbol is already tracked (any case).
            AddStockFailedError:  if the provider rejects or cannot reach the symbol.
        """
        symbol = _normalize(symbol, "symbol")
        if self._store.get_by_symbol(symbol) is not None:
            raise DuplicateSymbolError(symbol)

        try:
            snapshot = self._provider.fetch_snapshot(symbol, self.DEFAULT_PERIOD)
        except MarketDataError as exc:
            logger.warning("Rejected %s: %s", symbol, exc)
            raise AddStockFailedError(symbol, str(exc)) from exc
        except Exception as exc:
            logger.exception("Market data provider failed for %s", symbol)
            raise AddStockFailedError(symbol, f"could not fetch data for {symbol}") from exc

        stock = self._store.add(
            symbol=snapshot.symbol,
            company_name=snapshot.company_name,
            current_price=snapshot.current_price,
            change_amount=snapshot.change_amount,
            change_percent=snapshot.change_percent,
        )
        self._store.replace_samples(stock.id, self.DEFAULT_PERIOD, snapshot.chart_data)
        logger.info("Added %s (%s) to the watchlist", stock.symbol, stock.id)
        return WatchlistEntry(
            stock=stock,
            chart_data=list(snapshot.chart_data),
            trend=trend_for(stock.change_percent),
        )

    def remove_stock(self, stock_id: str) -> None:
        """Raises StockNotFoundError if *stock_id* is not tracked."""
        if not self._store.remove(stock_id):
            raise StockNotFoundError(stock_id)
        logger.info("Removed stock %s", stock_id)

    def get_stats(self) -> WatchlistStats:
        return self._store.stats()

    def validate_symbol(self, symbol: str) -> MarketSnapshot:
        """Check *symbol* against the provider without touching the store.

        Raises:
            InvalidInputError: if *symbol* is blank.
            MarketDataError:   if the provider rejects or cannot reach the symbol.
        """
        symbol = _normalize(symbol, "symbol")
        try:
            return self._provider.fetch_snapshot(symbol, self.DEFAULT_PERIOD)
        except MarketDataError:
            raise
        except Exception as exc:
            logger.exception("Market data provider failed for %s", symbol)
            raise UpstreamUnavailableError(
                symbol, f"Could not fetch data for {symbol}"
            ) from exc

    def search_symbols(self, query: str) -> list[SymbolMatch]:
        if not query or not query.strip():
            raise InvalidInputError("query must be a non-empty string")
        try:
            return self._provider.search(query.strip())
        except MarketDataError as exc:
            logger.warning("Symbol search for %r failed: %s", query, exc)
            return []

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _refresh(self, stock: TrackedStock, period: Period) -> WatchlistEntry:
        try:
            snapshot = self._provider.fetch_snapshot(stock.symbol, period)
        except Exception as exc:
            # Any per-symbol fault degrades to the stored values.
            logger.warning("Serving stale data for %s: %s", stock.symbol, exc)
            return WatchlistEntry(
                stock=stock, chart_data=[], trend=trend_for(stock.change_percent)
            )

        refreshed = self._store.update(
            stock.id,
            current_price=snapshot.current_price,
            change_amount=snapshot.change_amount,
            change_percent=snapshot.change_percent,
        )
        if refreshed is None:
            # Removed while its snapshot was in flight; answer with what was fetched.
            refreshed = dataclasses.replace(
                stock,
                current_price=snapshot.current_price,
                change_amount=snapshot.change_amount,
                change_percent=snapshot.change_percent,
            )
        else:
            self._store.replace_samples(stock.id, period, snapshot.chart_data)
        return WatchlistEntry(
            stock=refreshed,
            chart_data=list(snapshot.chart_data),
            trend=trend_for(snapshot.change_percent),
        )
