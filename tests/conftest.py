"""Shared fixtures: a scripted market data provider and isolated stores."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities.stock import ChartPoint, MarketSnapshot, Period, SymbolMatch
from src.domain.exceptions import InvalidSymbolError, MarketDataError, UpstreamUnavailableError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.infrastructure.storage.memory_store import InMemoryWatchlistStore


def make_snapshot(
    symbol: str,
    price: float = 100.0,
    change_amount: float = 1.0,
    change_percent: float = 1.0,
    company_name: str | None = None,
    points: int = 3,
) -> MarketSnapshot:
    start = datetime(2024, 1, 2, 14, 30, tzinfo=timezone.utc)
    chart = [
        ChartPoint(date=(start + timedelta(minutes=i)).isoformat(), price=price + i)
        for i in range(points)
    ]
    return MarketSnapshot(
        symbol=symbol,
        company_name=company_name or f"{symbol} Inc.",
        current_price=price,
        change_amount=change_amount,
        change_percent=change_percent,
        chart_data=chart,
    )


class FakeMarketDataProvider(IMarketDataProvider):
    """Serves canned snapshots; symbols listed in ``failing`` raise upstream errors."""

    def __init__(self, snapshots=None, failing=(), invalid=(), matches=None) -> None:
        self.snapshots: dict[str, MarketSnapshot] = dict(snapshots or {})
        self.failing = set(failing)
        self.invalid = set(invalid)
        self.matches: list[SymbolMatch] = list(matches or [])
        self.calls: list[tuple[str, Period]] = []
        self.search_error: MarketDataError | None = None

    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        self.calls.append((symbol, period))
        if symbol in self.failing:
            raise UpstreamUnavailableError(symbol, f"Finnhub API error: 503 for {symbol}")
        if symbol in self.invalid or symbol not in self.snapshots:
            raise InvalidSymbolError(
                symbol, f"Invalid stock symbol or no data available for {symbol}"
            )
        return self.snapshots[symbol]

    def search(self, query: str) -> list[SymbolMatch]:
        if self.search_error is not None:
            raise self.search_error
        return [m for m in self.matches if query.upper() in m.symbol]


class BrokenProvider(FakeMarketDataProvider):
    """Fails with a non-domain error, as a buggy adapter or malformed payload would."""

    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        self.calls.append((symbol, period))
        raise RuntimeError("unexpected payload shape")


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def store() -> InMemoryWatchlistStore:
    return InMemoryWatchlistStore(clock=StepClock())


@pytest.fixture
def provider() -> FakeMarketDataProvider:
    return FakeMarketDataProvider(
        snapshots={
            "AAPL": make_snapshot("AAPL", price=190.0, change_amount=2.0, change_percent=1.06),
            "MSFT": make_snapshot("MSFT", price=410.0, change_amount=-3.0, change_percent=-0.73),
            "TSLA": make_snapshot("TSLA", price=250.0, change_amount=0.0, change_percent=0.0),
        }
    )
