"""
Infrastructure adapter: ordered chain of IMarketDataProvider implementations.

Providers are consulted strictly in the order given. The first successful
answer wins; results are never merged and providers are never raced.
"""

import logging
from typing import Sequence

from src.domain.entities.stock import MarketSnapshot, Period, SymbolMatch
from src.domain.exceptions import MarketDataError
from src.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)


class FallbackMarketDataProvider(IMarketDataProvider):
    def __init__(self, providers: Sequence[IMarketDataProvider]) -> None:
        if not providers:
            raise ValueError("at least one market data provider is required")
        self._providers = list(providers)

    @property
    def providers(self) -> list[IMarketDataProvider]:
        return list(self._providers)

    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        last_error: MarketDataError | None = None
        for provider in self._providers:
            try:
                return provider.fetch_snapshot(symbol, period)
            except MarketDataError as exc:
                logger.warning(
                    "%s could not fetch %s (%s): %s",
                    provider.__class__.__name__, symbol, period.value, exc,
                )
                last_error = exc
        raise last_error

    def search(self, query: str) -> list[SymbolMatch]:
        last_error: MarketDataError | None = None
        for provider in self._providers:
            try:
                return provider.search(query)
            except MarketDataError as exc:
                logger.warning(
                    "%s search for %r failed: %s", provider.__class__.__name__, query, exc
                )
                last_error = exc
        raise last_error
