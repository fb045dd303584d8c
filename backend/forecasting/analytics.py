# backend/forecasting/analytics.py
"""
Summary analytics over a window of the combined (historical + predicted)
series. Only historical points feed the figures; predicted points are
carried along in the window but ignored.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from forecasting.calendar_utils import date_range_label, month_label
from forecasting.series import SeriesPoint, has_price

logger = logging.getLogger(__name__)

SEASONS: Dict[str, Tuple[int, ...]] = {
    "Winter": (12, 1, 2),
    "Spring": (3, 4, 5),
    "Summer": (6, 7, 8),
    "Fall": (9, 10, 11),
}

REFERENCE_YEAR = 2023
ANOMALOUS_MONTHS: Tuple[Tuple[int, int], ...] = ((2022, 6), (2024, 6))

# |price change %| above this counts as a real price move
PRICE_MOVE_THRESHOLD = 0.5

NO_DATA = "No data available"
NO_CORRELATION = "No significant correlation detected"


@dataclass(frozen=True)
class SeasonalSummary:
    totals: Dict[str, float]
    peak: Optional[str]
    low: Optional[str]
    message: str


@dataclass(frozen=True)
class ExtremePoint:
    year: int
    month: int
    amount: float

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


@dataclass(frozen=True)
class Extremes:
    max: Optional[ExtremePoint]
    min: Optional[ExtremePoint]
    message: str


@dataclass(frozen=True)
class CorrelationSummary:
    inverse_cases: int
    direct_cases: int
    total_cases: int
    inverse_percent: Optional[float]
    message: str


@dataclass(frozen=True)
class AnalyticsResult:
    seasonal: SeasonalSummary
    extremes: Extremes
    correlation: Optional[CorrelationSummary] = None
    date_range: str = ""
    predicted_count: int = 0


def window(series: Sequence[SeriesPoint], lo: int = 0, hi: Optional[int] = None) -> List[SeriesPoint]:
    """
    Inclusive slice [lo, hi] of the series, clamped into range the way a range
    slider would be. hi=None means the last point.
    """
    if not series:
        return []
    last = len(series) - 1
    hi = last if hi is None else min(max(hi, 0), last)
    lo = min(max(lo, 0), last)
    if lo > hi:
        lo, hi = hi, lo
    return list(series[lo:hi + 1])


def _historical(points: Iterable[SeriesPoint]) -> List[SeriesPoint]:
    return [p for p in points if not p.is_predicted]


def _season_of(month: int) -> str:
    for name, months in SEASONS.items():
        if month in months:
            return name
    raise ValueError(f"month must be in 1..12, got {month}")


def seasonal_totals(points: Sequence[SeriesPoint], reference_year: int = REFERENCE_YEAR) -> SeasonalSummary:
    totals = {name: 0.0 for name in SEASONS}
    for p in _historical(points):
        if p.year == reference_year:
            totals[_season_of(p.month)] += p.amount

    if all(total == 0 for total in totals.values()):
        return SeasonalSummary(
            totals=totals,
            peak=None,
            low=None,
            message=f"No {reference_year} data available for seasonal analysis",
        )

    # ties: peak is the earliest season with the top total, low the latest with the bottom
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    peak, low = ranked[0][0], ranked[-1][0]
    return SeasonalSummary(
        totals=totals,
        peak=peak,
        low=low,
        message=f"Peak season: {peak} | Low season: {low}",
    )


def _format_amount(value: float) -> str:
    return f"${round(value):,}"


def extremes(
    points: Sequence[SeriesPoint],
    excluded: Iterable[Tuple[int, int]] = ANOMALOUS_MONTHS,
) -> Extremes:
    excluded = set(tuple(e) for e in excluded)
    data = [p for p in _historical(points) if (p.year, p.month) not in excluded]
    if not data:
        return Extremes(max=None, min=None, message=NO_DATA)

    # max()/min() return the first of equal elements
    top = max(data, key=lambda p: p.amount)
    bottom = min(data, key=lambda p: p.amount)

    hi = ExtremePoint(top.year, top.month, top.amount)
    lo = ExtremePoint(bottom.year, bottom.month, bottom.amount)
    message = (
        f"The max value was {_format_amount(hi.amount)} in {hi.label}. "
        f"The min value was {_format_amount(lo.amount)} in {lo.label}."
    )
    return Extremes(max=hi, min=lo, message=message)


def correlation(points: Sequence[SeriesPoint]) -> CorrelationSummary:
    """How often a real price move goes against the sales move."""
    real = _historical(points)
    inverse = direct = total = 0

    # the first point has no predecessor inside the window
    for p in real[1:]:
        price_pct = p.price_change_percent or 0.0
        sales_pct = p.sales_change_percent or 0.0
        if abs(price_pct) <= PRICE_MOVE_THRESHOLD:
            continue
        total += 1
        if (price_pct < 0 < sales_pct) or (price_pct > 0 > sales_pct):
            inverse += 1
        elif (price_pct < 0 and sales_pct < 0) or (price_pct > 0 and sales_pct > 0):
            direct += 1

    if total == 0:
        return CorrelationSummary(0, 0, 0, None, NO_CORRELATION)

    inverse_percent = inverse / total * 100
    logger.debug("Correlation: %d inverse, %d direct of %d price moves", inverse, direct, total)
    return CorrelationSummary(
        inverse_cases=inverse,
        direct_cases=direct,
        total_cases=total,
        inverse_percent=inverse_percent,
        message=f"{inverse_percent:.0f}% inverse correlation (price changes opposite to sales)",
    )


def analyze(
    windowed: Sequence[SeriesPoint],
    reference_year: int = REFERENCE_YEAR,
    excluded: Iterable[Tuple[int, int]] = ANOMALOUS_MONTHS,
) -> AnalyticsResult:
    windowed = list(windowed)
    historical = _historical(windowed)

    corr = correlation(windowed) if has_price(historical) else None

    return AnalyticsResult(
        seasonal=seasonal_totals(windowed, reference_year),
        extremes=extremes(windowed, excluded),
        correlation=corr,
        date_range=date_range_label(windowed),
        predicted_count=len(windowed) - len(historical),
    )
