"""
Port (interface) for market data providers.
Infrastructure adapters (e.g. FinnhubMarketDataProvider) must implement this interface.
"""

from abc import ABC, abstractmethod

from src.domain.entities.stock import MarketSnapshot, Period, SymbolMatch


class IMarketDataProvider(ABC):
    @abstractmethod
    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        """Fetch quote, company name and chart series for *symbol* over *period*.

        Raises:
            InvalidSymbolError: if the quote carries no usable price.
            UpstreamUnavailableError: if the external call fails or times out.
        """
        ...

    @abstractmethod
    def search(self, query: str) -> list[SymbolMatch]:
        """Return symbols whose ticker or description matches *query*."""
        ...
