"""
Pydantic request/response models for the HTTP surface.

JSON keys are camelCase to match the web client; Python attributes stay
snake_case. Domain dataclasses are converted here so FastAPI never sees them.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.entities.stock import MarketSnapshot, SymbolMatch, WatchlistEntry, WatchlistStats


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddStockRequest(BaseModel):
    symbol: str = Field(min_length=1, max_length=20)


class ChartPointResponse(CamelModel):
    date: str
    price: float


class StockResponse(CamelModel):
    id: str
    symbol: str
    company_name: str
    current_price: float
    change_amount: float
    change_percent: float
    added_at: datetime
    chart_data: list[ChartPointResponse]
    trend: Literal["positive", "negative"]

    @classmethod
    def from_entry(cls, entry: WatchlistEntry) -> "StockResponse":
        stock = entry.stock
        return cls(
            id=stock.id,
            symbol=stock.symbol,
            company_name=stock.company_name,
            current_price=stock.current_price,
            change_amount=stock.change_amount,
            change_percent=stock.change_percent,
            added_at=stock.added_at,
            chart_data=[
                ChartPointResponse(date=p.date, price=p.price) for p in entry.chart_data
            ],
            trend=entry.trend.value,
        )


class StatsResponse(CamelModel):
    total_stocks: int
    gainers: int
    losers: int

    @classmethod
    def from_stats(cls, stats: WatchlistStats) -> "StatsResponse":
        return cls(
            total_stocks=stats.total_stocks,
            gainers=stats.gainers,
            losers=stats.losers,
        )


class ValidationResponse(CamelModel):
    valid: bool
    symbol: str
    company_name: str
    current_price: float

    @classmethod
    def from_snapshot(cls, snapshot: MarketSnapshot) -> "ValidationResponse":
        return cls(
            valid=True,
            symbol=snapshot.symbol,
            company_name=snapshot.company_name,
            current_price=snapshot.current_price,
        )


class SymbolMatchResponse(CamelModel):
    symbol: str
    name: str

    @classmethod
    def from_match(cls, match: SymbolMatch) -> "SymbolMatchResponse":
        return cls(symbol=match.symbol, name=match.name)
