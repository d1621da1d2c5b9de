"""
Wires the market data provider chain from Settings.

Provider order is fixed: Finnhub first (when a key is configured), then
yfinance (when the fallback is enabled). A missing Finnhub key is not a
startup failure: the chain silently degrades to yfinance and logs a warning.
"""

import logging

from src.domain.ports.market_data_port import IMarketDataProvider
from src.infrastructure.config.settings import Settings
from src.infrastructure.stock_data.fallback_provider import FallbackMarketDataProvider
from src.infrastructure.stock_data.finnhub_adapter import FinnhubMarketDataProvider
from src.infrastructure.stock_data.yfinance_adapter import YFinanceMarketDataProvider

logger = logging.getLogger(__name__)


def build_market_data_provider(settings: Settings) -> IMarketDataProvider:
    """Build the provider chain described by *settings*.

    Raises:
        ValueError: if neither Finnhub nor the yfinance fallback is available.
    """
    providers: list[IMarketDataProvider] = []

    if settings.finnhub_api_key:
        providers.append(
            FinnhubMarketDataProvider(
                api_key=settings.finnhub_api_key,
                base_url=settings.finnhub_base_url,
                timeout=settings.market_data_timeout_seconds,
            )
        )
    else:
        logger.warning("FINNHUB_API_KEY is not set; using Yahoo Finance only")

    if settings.enable_yfinance_fallback:
        providers.append(
            YFinanceMarketDataProvider(timeout=settings.market_data_timeout_seconds)
        )

    if not providers:
        raise ValueError(
            "No market data provider configured: set FINNHUB_API_KEY "
            "or enable ENABLE_YFINANCE_FALLBACK"
        )
    if len(providers) == 1:
        return providers[0]
    return FallbackMarketDataProvider(providers)
