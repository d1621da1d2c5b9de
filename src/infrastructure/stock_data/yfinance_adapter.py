"""
Infrastructure adapter: yfinance → IMarketDataProvider.
All yfinance-specific details (history(), history metadata, Search) are
confined here; the rest of the codebase depends only on IMarketDataProvider.
Used as the fallback behind Finnhub, or alone when no Finnhub key is configured.

Every Yahoo request goes through a call that accepts a timeout: the quote is
read from a short daily history() and the company name from the metadata that
call already cached, instead of the unbounded fast_info / info lookups.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

import yfinance as yf

from src.domain.entities.stock import ChartPoint, MarketSnapshot, Period, SymbolMatch
from src.domain.exceptions import InvalidSymbolError, UpstreamUnavailableError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.services.price_series import LOOKBACK_WINDOWS, downsample, period_change

logger = logging.getLogger(__name__)

_INTERVALS: dict[Period, str] = {
    Period.ONE_DAY: "1m",
    Period.ONE_WEEK: "5m",
    Period.ONE_MONTH: "1d",
    Period.SIX_MONTHS: "1d",
}

_QUOTE_PERIOD = "5d"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class YFinanceMarketDataProvider(IMarketDataProvider):
    """Fetches stock market data from Yahoo Finance via the yfinance library."""

    MAX_SEARCH_RESULTS = 10

    def __init__(
        self, timeout: float = 10.0, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self._timeout = timeout
        self._clock = clock

    def fetch_snapshot(self, symbol: str, period: Period) -> MarketSnapshot:
        symbol = symbol.strip().upper()
        try:
            ticker = yf.Ticker(symbol)
            daily = ticker.history(
                period=_QUOTE_PERIOD, interval="1d", timeout=self._timeout
            )
        except Exception as exc:
            raise UpstreamUnavailableError(
                symbol, f"Yahoo Finance quote request failed for {symbol}"
            ) from exc

        closes = [] if daily.empty else [float(c) for c in daily["Close"].dropna()]
        current_price = closes[-1] if closes else None
        previous_close = closes[-2] if len(closes) > 1 else None
        if not current_price or current_price <= 0:
            raise InvalidSymbolError(
                symbol, f"Invalid stock symbol or no data available for {symbol}"
            )

        company_name = self._company_name(ticker, symbol)
        chart_data = downsample(self._history(ticker, symbol, period))

        day_change = day_change_percent = None
        if previous_close:
            day_change = current_price - previous_close
            day_change_percent = day_change / previous_close * 100

        change_amount, change_percent = period_change(
            period, chart_data, day_change, day_change_percent
        )
        return MarketSnapshot(
            symbol=symbol,
            company_name=company_name,
            current_price=round(current_price, 4),
            change_amount=change_amount,
            change_percent=change_percent,
            chart_data=chart_data,
        )

    def search(self, query: str) -> list[SymbolMatch]:
        try:
            quotes = yf.Search(
                query, max_results=self.MAX_SEARCH_RESULTS, timeout=self._timeout
            ).quotes
        except Exception as exc:
            raise UpstreamUnavailableError(
                query, f"Yahoo Finance search failed for {query!r}"
            ) from exc
        return [
            SymbolMatch(
                symbol=q["symbol"],
                name=q.get("longname") or q.get("shortname") or q["symbol"],
            )
            for q in quotes[: self.MAX_SEARCH_RESULTS]
            if q.get("symbol")
        ]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _company_name(ticker, symbol: str) -> str:
        # The name is cosmetic; a missing or failing metadata lookup must not sink the quote.
        try:
            metadata = ticker.get_history_metadata() or {}
        except Exception:
            logger.warning("Company name unavailable for %s", symbol, exc_info=True)
            return symbol
        return metadata.get("longName") or metadata.get("shortName") or symbol

    def _history(self, ticker, symbol: str, period: Period) -> list[ChartPoint]:
        end = self._clock()
        start = end - LOOKBACK_WINDOWS[period]
        try:
            history = ticker.history(
                start=start,
                end=end,
                interval=_INTERVALS[period],
                timeout=self._timeout,
            )
        except Exception as exc:
            raise UpstreamUnavailableError(
                symbol, f"Yahoo Finance history request failed for {symbol}"
            ) from exc

        if history.empty:
            return []
        return [
            ChartPoint(
                date=self._as_utc(stamp).isoformat(),
                price=round(float(row["Close"]), 4),
            )
            for stamp, row in history.iterrows()
        ]

    @staticmethod
    def _as_utc(stamp) -> datetime:
        moment = stamp.to_pydatetime()
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)
