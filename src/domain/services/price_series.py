"""
Pure functions shared by every market data adapter: chart down-sampling,
period change computation and trend tagging.
"""

import math
from datetime import timedelta
from typing import Optional, Sequence

from src.domain.entities.stock import ChartPoint, Period, Trend

MAX_CHART_POINTS = 50

LOOKBACK_WINDOWS: dict[Period, timedelta] = {
    Period.ONE_DAY: timedelta(days=1),
    Period.ONE_WEEK: timedelta(days=7),
    Period.ONE_MONTH: timedelta(days=30),
    Period.SIX_MONTHS: timedelta(days=180),
}


def downsample(points: Sequence[ChartPoint], max_points: int = MAX_CHART_POINTS) -> list[ChartPoint]:
    """Decimate *points* to at most *max_points* using a fixed stride.

    Keeps indices 0, s, 2s, ... with s = ceil(len / max_points). This is a
    plain decimation: the final raw point is not guaranteed to survive and the
    result is not a representative resample of the window.
    """
    if len(points) <= max_points:
        return list(points)
    stride = math.ceil(len(points) / max_points)
    return list(points[::stride])


def compute_change(points: Sequence[ChartPoint]) -> tuple[float, float]:
    """Return (change_amount, change_percent) from first to last point."""
    if len(points) < 2:
        return 0.0, 0.0
    first = points[0].price
    change_amount = points[-1].price - first
    change_percent = (change_amount / first) * 100 if first != 0 else 0.0
    return change_amount, change_percent


def period_change(
    period: Period,
    points: Sequence[ChartPoint],
    day_change: Optional[float] = None,
    day_change_percent: Optional[float] = None,
) -> tuple[float, float]:
    """Change figures for *period*.

    The intraday period prefers the provider's own day-over-day fields; every
    other period (or 1D without those fields) is measured across *points*.
    """
    if period is Period.ONE_DAY and day_change is not None and day_change_percent is not None:
        return float(day_change), float(day_change_percent)
    return compute_change(points)


def trend_for(change_percent: float) -> Trend:
    return Trend.POSITIVE if change_percent >= 0 else Trend.NEGATIVE
