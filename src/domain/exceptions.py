"""
Domain exception hierarchy.

Every failure the watchlist can report derives from WatchlistError so the
entrypoints can translate them to transport-level responses in one place.
"""


class WatchlistError(Exception):
    """Base class for all watchlist failures."""


class InvalidInputError(WatchlistError):
    """Malformed input such as a blank symbol."""


class DuplicateSymbolError(WatchlistError):
    def __init__(self, symbol: str) -> None:
        super().__init__(f"Stock already in watchlist: {symbol}")
        self.symbol = symbol


class StockNotFoundError(WatchlistError):
    def __init__(self, stock_id: str) -> None:
        super().__init__(f"Stock not found: {stock_id}")
        self.stock_id = stock_id


class StorageError(WatchlistError):
    """Unexpected internal fault in the watchlist store."""


class MarketDataError(WatchlistError):
    """Could not fetch data for a symbol. The upstream cause is chained."""

    def __init__(self, symbol: str, message: str) -> None:
        super().__init__(message)
        self.symbol = symbol


class InvalidSymbolError(MarketDataError):
    """The quote endpoint returned no usable price for the symbol."""


class UpstreamUnavailableError(MarketDataError):
    """The external provider errored or timed out."""


class AddStockFailedError(WatchlistError):
    def __init__(self, symbol: str, reason: str) -> None:
        super().__init__(f"Failed to fetch stock data: {reason}")
        self.symbol = symbol
