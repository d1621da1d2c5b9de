"""
Port (interface) for watchlist storage.
Infrastructure adapters (e.g. InMemoryWatchlistStore) must implement this interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from src.domain.entities.stock import (
    ChartPoint,
    Period,
    SamplePoint,
    TrackedStock,
    WatchlistStats,
)


class IWatchlistStore(ABC):
    @abstractmethod
    def list_stocks(self) -> list[TrackedStock]:
        """Return all tracked stocks, most recently added first."""
        ...

    @abstractmethod
    def get_by_id(self, stock_id: str) -> Optional[TrackedStock]: ...

    @abstractmethod
    def get_by_symbol(self, symbol: str) -> Optional[TrackedStock]:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    def add(
        self,
        symbol: str,
        company_name: str,
        current_price: float,
        change_amount: float,
        change_percent: float,
    ) -> TrackedStock:
        """Admit a new stock.

        Raises:
            DuplicateSymbolError: if the symbol is already tracked in any case.
        """
        ...

    @abstractmethod
    def update(self, stock_id: str, **changes) -> Optional[TrackedStock]:
        """Merge *changes* into the stock. Returns None if the id is unknown."""
        ...

    @abstractmethod
    def remove(self, stock_id: str) -> bool:
        """Delete the stock and its sample points. False if it did not exist."""
        ...

    @abstractmethod
    def stats(self) -> WatchlistStats: ...

    @abstractmethod
    def get_samples(self, stock_id: str, period: Period) -> list[SamplePoint]:
        """Sample points for one (stock, period) pair in ascending date order."""
        ...

    @abstractmethod
    def add_sample(
        self, stock_id: str, date: datetime, price: float, period: Period
    ) -> SamplePoint: ...

    @abstractmethod
    def replace_samples(
        self, stock_id: str, period: Period, points: Iterable[ChartPoint]
    ) -> list[SamplePoint]:
        """Swap the stored series for (stock, period) with *points*."""
        ...

    @abstractmethod
    def remove_samples(self, stock_id: str) -> bool: ...
