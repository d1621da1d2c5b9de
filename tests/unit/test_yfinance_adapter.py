"""Unit tests for YFinanceMarketDataProvider with yfinance patched out."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from src.domain.entities.stock import Period
from src.domain.exceptions import InvalidSymbolError, UpstreamUnavailableError
from src.infrastructure.stock_data.yfinance_adapter import YFinanceMarketDataProvider

NOW = datetime(2024, 3, 15, 20, 0, tzinfo=timezone.utc)
MODULE = "src.infrastructure.stock_data.yfinance_adapter"


def _history(prices, start="2024-03-15 14:30", freq="1min", tz="America/New_York"):
    index = pd.date_range(start=start, periods=len(prices), freq=freq, tz=tz)
    return pd.DataFrame({"Close": list(prices)}, index=index)


def _ticker(daily=(188.0, 190.0), metadata=None, history=None):
    """A Ticker double: period= calls answer the daily quote, start/end calls the chart."""
    daily_frame = _history(daily, start="2024-03-14", freq="1D")
    chart_frame = history if history is not None else _history([188.0, 189.0, 190.0])

    ticker = MagicMock()
    ticker.history.side_effect = lambda **kwargs: (
        daily_frame if "period" in kwargs else chart_frame
    )
    ticker.get_history_metadata.return_value = (
        metadata if metadata is not None else {"longName": "Apple Inc."}
    )
    return ticker


@pytest.fixture
def provider() -> YFinanceMarketDataProvider:
    return YFinanceMarketDataProvider(timeout=5.0, clock=lambda: NOW)


class TestFetchSnapshot:
    def test_one_day_snapshot(self, provider) -> None:
        ticker = _ticker()
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker) as ticker_cls:
            snapshot = provider.fetch_snapshot("aapl", Period.ONE_DAY)

        ticker_cls.assert_called_once_with("AAPL")
        assert snapshot.symbol == "AAPL"
        assert snapshot.company_name == "Apple Inc."
        assert snapshot.current_price == 190.0
        assert snapshot.change_amount == pytest.approx(2.0)
        assert snapshot.change_percent == pytest.approx(2.0 / 188.0 * 100)
        assert [p.price for p in snapshot.chart_data] == [188.0, 189.0, 190.0]
        assert snapshot.chart_data[0].date == "2024-03-15T18:30:00+00:00"

        kwargs = ticker.history.call_args.kwargs
        assert kwargs["interval"] == "1m"
        assert kwargs["end"] - kwargs["start"] == timedelta(days=1)

    def test_every_yahoo_request_carries_the_timeout(self, provider) -> None:
        ticker = _ticker()
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            provider.fetch_snapshot("AAPL", Period.ONE_WEEK)

        assert ticker.history.call_count == 2
        assert all(c.kwargs["timeout"] == 5.0 for c in ticker.history.call_args_list)
        quote_call = ticker.history.call_args_list[0].kwargs
        assert (quote_call["period"], quote_call["interval"]) == ("5d", "1d")

    @pytest.mark.parametrize(
        "period, interval, days",
        [
            (Period.ONE_WEEK, "5m", 7),
            (Period.ONE_MONTH, "1d", 30),
            (Period.SIX_MONTHS, "1d", 180),
        ],
    )
    def test_longer_periods_measure_the_series(self, provider, period, interval, days) -> None:
        ticker = _ticker(history=_history([100.0, 105.0, 95.0], freq="1D"))
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", period)

        assert snapshot.change_amount == pytest.approx(-5.0)
        assert snapshot.change_percent == pytest.approx(-5.0)
        kwargs = ticker.history.call_args.kwargs
        assert kwargs["interval"] == interval
        assert kwargs["end"] - kwargs["start"] == timedelta(days=days)

    def test_series_is_downsampled(self, provider) -> None:
        ticker = _ticker(history=_history(range(1, 391)))
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", Period.ONE_DAY)
        assert len(snapshot.chart_data) == 49

    def test_single_daily_close_falls_back_to_series_change(self, provider) -> None:
        ticker = _ticker(daily=(190.0,), history=_history([180.0, 190.0]))
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", Period.ONE_DAY)
        assert snapshot.change_amount == pytest.approx(10.0)

    def test_missing_price_is_invalid_symbol(self, provider) -> None:
        ticker = _ticker(daily=())
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            with pytest.raises(InvalidSymbolError):
                provider.fetch_snapshot("ZZZINVALID", Period.ONE_DAY)
        assert ticker.history.call_count == 1

    def test_quote_failure_is_upstream_unavailable(self, provider) -> None:
        with patch(f"{MODULE}.yf.Ticker", side_effect=ConnectionError("offline")):
            with pytest.raises(UpstreamUnavailableError) as excinfo:
                provider.fetch_snapshot("AAPL", Period.ONE_DAY)
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    def test_history_failure_is_upstream_unavailable(self, provider) -> None:
        ticker = _ticker()
        ticker.history.side_effect = TimeoutError("slow")
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            with pytest.raises(UpstreamUnavailableError):
                provider.fetch_snapshot("AAPL", Period.ONE_WEEK)

    def test_metadata_failure_falls_back_to_symbol(self, provider) -> None:
        ticker = _ticker()
        ticker.get_history_metadata.side_effect = KeyError("longName")
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", Period.ONE_DAY)
        assert snapshot.company_name == "AAPL"

    def test_short_name_is_used_without_long_name(self, provider) -> None:
        ticker = _ticker(metadata={"shortName": "Apple"})
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", Period.ONE_DAY)
        assert snapshot.company_name == "Apple"

    def test_empty_history_gives_flat_chart(self, provider) -> None:
        ticker = _ticker(history=pd.DataFrame({"Close": []}))
        with patch(f"{MODULE}.yf.Ticker", return_value=ticker):
            snapshot = provider.fetch_snapshot("AAPL", Period.ONE_MONTH)
        assert snapshot.chart_data == []
        assert (snapshot.change_amount, snapshot.change_percent) == (0.0, 0.0)


class TestSearch:
    def test_maps_quotes(self, provider) -> None:
        search = MagicMock()
        search.quotes = [
            {"symbol": "AAPL", "longname": "Apple Inc.", "shortname": "Apple"},
            {"symbol": "APLE", "shortname": "Apple Hospitality"},
            {"exchange": "NMS"},
        ]
        with patch(f"{MODULE}.yf.Search", return_value=search) as search_cls:
            matches = provider.search("apple")

        search_cls.assert_called_once_with("apple", max_results=10, timeout=5.0)
        assert [(m.symbol, m.name) for m in matches] == [
            ("AAPL", "Apple Inc."),
            ("APLE", "Apple Hospitality"),
        ]

    def test_failure_is_upstream_unavailable(self, provider) -> None:
        with patch(f"{MODULE}.yf.Search", side_effect=ConnectionError("offline")):
            with pytest.raises(UpstreamUnavailableError):
                provider.search("apple")
