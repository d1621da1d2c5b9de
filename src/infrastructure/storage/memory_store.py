"""
Infrastructure adapter: process memory → IWatchlistStore.

Holds every TrackedStock and SamplePoint in plain dicts for the lifetime of the
process. Nothing survives a restart. A re-entrant lock keeps each operation
atomic when FastAPI runs sync handlers on its worker threads.
"""

import dataclasses
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from src.domain.entities.stock import (
    ChartPoint,
    Period,
    SamplePoint,
    TrackedStock,
    WatchlistStats,
)
from src.domain.exceptions import DuplicateSymbolError, StorageError
from src.domain.ports.watchlist_store_port import IWatchlistStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryWatchlistStore(IWatchlistStore):
    """Dict-backed watchlist store. Construct one per application (or per test)."""

    UPDATABLE_FIELDS = frozenset(
        {"company_name", "current_price", "change_amount", "change_percent"}
    )

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._stocks: dict[str, TrackedStock] = {}
        self._samples: dict[str, SamplePoint] = {}

    # ------------------------------------------------------------------
    # Stocks
    # ------------------------------------------------------------------

    def list_stocks(self) -> list[TrackedStock]:
        with self._lock:
            # Reverse insertion order first so equal timestamps still list newest first.
            newest_first = list(reversed(list(self._stocks.values())))
        return sorted(newest_first, key=lambda s: s.added_at, reverse=True)

    def get_by_id(self, stock_id: str) -> Optional[TrackedStock]:
        with self._lock:
            return self._stocks.get(stock_id)

    def get_by_symbol(self, symbol: str) -> Optional[TrackedStock]:
        wanted = symbol.strip().upper()
        with self._lock:
            return next(
                (s for s in self._stocks.values() if s.symbol == wanted),
                None,
            )

    def add(
        self,
        symbol: str,
        company_name: str,
        current_price: float,
        change_amount: float,
        change_percent: float,
    ) -> TrackedStock:
        normalized = symbol.strip().upper()
        with self._lock:
            if self.get_by_symbol(normalized) is not None:
                raise DuplicateSymbolError(normalized)
            stock = TrackedStock(
                id=str(uuid.uuid4()),
                symbol=normalized,
                company_name=company_name,
                current_price=current_price,
                change_amount=change_amount,
                change_percent=change_percent,
                added_at=self._clock(),
            )
            self._stocks[stock.id] = stock
            return stock

    def update(self, stock_id: str, **changes) -> Optional[TrackedStock]:
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        with self._lock:
            existing = self._stocks.get(stock_id)
            if existing is None:
                return None
            updated = dataclasses.replace(existing, **changes)
            self._stocks[stock_id] = updated
            return updated

    def remove(self, stock_id: str) -> bool:
        with self._lock:
            deleted = self._stocks.pop(stock_id, None) is not None
            self.remove_samples(stock_id)
            return deleted

    def stats(self) -> WatchlistStats:
        with self._lock:
            stocks = list(self._stocks.values())
        return WatchlistStats(
            total_stocks=len(stocks),
            gainers=sum(1 for s in stocks if s.change_percent > 0),
            losers=sum(1 for s in stocks if s.change_percent < 0),
        )

    # ------------------------------------------------------------------
    # Sample points
    # ------------------------------------------------------------------

    def get_samples(self, stock_id: str, period: Period) -> list[SamplePoint]:
        with self._lock:
            matching = [
                p
                for p in self._samples.values()
                if p.stock_id == stock_id and p.period is period
            ]
        return sorted(matching, key=lambda p: p.date)

    def add_sample(
        self, stock_id: str, date: datetime, price: float, period: Period
    ) -> SamplePoint:
        point = SamplePoint(
            id=str(uuid.uuid4()),
            stock_id=stock_id,
            date=date,
            price=price,
            period=period,
        )
        with self._lock:
            self._samples[point.id] = point
        return point

    def replace_samples(
        self, stock_id: str, period: Period, points: Iterable[ChartPoint]
    ) -> list[SamplePoint]:
        try:
            parsed = [(datetime.fromisoformat(p.date), float(p.price)) for p in points]
        except (TypeError, ValueError) as exc:
            raise StorageError(
                f"Cannot store chart points for stock {stock_id}: {exc}"
            ) from exc

        with self._lock:
            stale = [
                key
                for key, p in self._samples.items()
                if p.stock_id == stock_id and p.period is period
            ]
            for key in stale:
                del self._samples[key]
            for date, price in parsed:
                self.add_sample(stock_id, date, price, period)
            return self.get_samples(stock_id, period)

    def remove_samples(self, stock_id: str) -> bool:
        with self._lock:
            owned = [key for key, p in self._samples.items() if p.stock_id == stock_id]
            for key in owned:
                del self._samples[key]
            return bool(owned)
