"""
Domain entities for the stock watchlist.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Period(str, Enum):
    """Lookback window used for chart data and change computation."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"


class Trend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class ChartPoint:
    date: str
    price: float


@dataclass(frozen=True)
class MarketSnapshot:
    symbol: str
    company_name: str
    current_price: float
    change_amount: float
    change_percent: float
    chart_data: list[ChartPoint] = field(default_factory=list)


@dataclass(frozen=True)
class TrackedStock:
    id: str
    symbol: str
    company_name: str
    current_price: float
    change_amount: float
    change_percent: float
    added_at: datetime


@dataclass(frozen=True)
class SamplePoint:
    id: str
    stock_id: str
    date: datetime
    price: float
    period: Period


@dataclass(frozen=True)
class WatchlistStats:
    total_stocks: int
    gainers: int
    losers: int


@dataclass(frozen=True)
class WatchlistEntry:
    """A tracked stock merged with the chart series and trend tag shown on its card."""

    stock: TrackedStock
    chart_data: list[ChartPoint]
    trend: Trend


@dataclass(frozen=True)
class SymbolMatch:
    symbol: str
    name: str
