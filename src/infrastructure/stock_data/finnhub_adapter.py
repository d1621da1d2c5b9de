"""
Infrastructure adapter: Finnhub REST API → IMarketDataProvider.

All Finnhub-specific details (endpoints, token query parameter, candle
resolutions, quote field names) are confined here; the rest of the codebase
depends only on IMarketDataProvider.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx

from src.domain.entities.stock import ChartPoint, MarketSnapshot, Period, SymbolMatch
from src.domain.exceptions import InvalidSymbolError, UpstreamUnavailableError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.services.price_series import LOOKBACK_WINDOWS, downsample, period_change

_RESOLUTIONS: dict[Period, str] = {
    Period.ONE_DAY: "1",
    Period.ONE_WEEK: "5",
    Period.ONE_MONTH: "D",
    Period.SIX_MONTHS: "D",
}

_MAX_SEARCH_RESULTS = 10


class FinnhubMarketDataProvider(IMarketDataProvider):
    """Fetches quotes, company profiles and candles from finnhub.io."""

    DEFAULT_BASE_URL = "https://finnhub.io/api/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            api_key:  Finnhub API token, sent as the ``token`` query parameter.
            base_url: API root, overridable for tests or proxies.
            timeout:  Per-request timeout in seconds.
            client:   Optional pre-configured httpx.Client (tests inject one
                      backed by httpx.MockTransport).
            clock:    Returns the current epoch seconds; used for candle windows.
        """
        if not api_key:
            raise ValueError("Finnhub api_key must be a non-empty string")
        self._api_key = api_key
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._clock = clock

    # ------------------------------------------------------------------
    # IMarketDataProvider interface
    # ------------------------------------------------------------------

    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        symbol = symbol.strip().upper()

        quote = self._get("/quote", {"symbol": symbol}, subject=symbol)
        current_price = self._number(quote.get("c"), "/quote", symbol)
        if current_price is None or current_price <= 0:
            raise InvalidSymbolError(
                symbol, f"Invalid stock symbol or no data available for {symbol}"
            )

        profile = self._get("/stock/profile2", {"symbol": symbol}, subject=symbol)
        company_name = profile.get("name") or symbol

        now = int(self._clock())
        window = int(LOOKBACK_WINDOWS[period].total_seconds())
        candles = self._get(
            "/stock/candle",
            {
                "symbol": symbol,
                "resolution": _RESOLUTIONS[period],
                "from": str(now - window),
                "to": str(now),
            },
            subject=symbol,
        )
        chart_data = downsample(self._to_points(candles, symbol))

        change_amount, change_percent = period_change(
            period,
            chart_data,
            self._number(quote.get("d"), "/quote", symbol),
            self._number(quote.get("dp"), "/quote", symbol),
        )
        return MarketSnapshot(
            symbol=symbol,
            company_name=str(company_name),
            current_price=current_price,
            change_amount=change_amount,
            change_percent=change_percent,
            chart_data=chart_data,
        )

    def search(self, query: str) -> list[SymbolMatch]:
        payload = self._get("/search", {"q": query}, subject=query)
        results = payload.get("result")
        if not isinstance(results, list):
            return []
        return [
            SymbolMatch(
                symbol=item["symbol"],
                name=item.get("description") or item["symbol"],
            )
            for item in results[:_MAX_SEARCH_RESULTS]
            if isinstance(item, dict) and item.get("symbol")
        ]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get(self, endpoint: str, params: dict[str, str], subject: str) -> dict[str, Any]:
        """GET *endpoint* and return its JSON object.

        *subject* is the symbol or query the failure is reported against.
        Every transport, status or payload-shape fault becomes UpstreamUnavailableError.
        """
        try:
            response = self._client.get(endpoint, params={"token": self._api_key, **params})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                subject,
                f"Finnhub API error: {exc.response.status_code} {exc.response.reason_phrase}",
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamUnavailableError(
                subject, f"Finnhub request to {endpoint} failed: {exc.__class__.__name__}"
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(
                subject, f"Finnhub returned an unexpected payload from {endpoint}"
            )
        return payload

    @staticmethod
    def _number(value: Any, endpoint: str, subject: str) -> Optional[float]:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise UpstreamUnavailableError(
                subject, f"Finnhub returned a non-numeric field from {endpoint}"
            )
        return float(value)

    @staticmethod
    def _to_points(candles: dict[str, Any], subject: str) -> list[ChartPoint]:
        if candles.get("s") == "no_data":
            return []
        closes = candles.get("c") or []
        stamps = candles.get("t") or []
        try:
            return [
                ChartPoint(
                    date=datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(),
                    price=float(close),
                )
                for ts, close in zip(stamps, closes)
            ]
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise UpstreamUnavailableError(
                subject, "Finnhub returned malformed candles"
            ) from exc
