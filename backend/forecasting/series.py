# backend/forecasting/series.py
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class MonthlyRecord:
    year: int
    month: int
    category: str
    amount: float
    price: Optional[float] = None


@dataclass(frozen=True)
class SeriesPoint:
    year: int
    month: int
    amount: float
    price: Optional[float] = None
    category: Optional[str] = None
    is_predicted: bool = False

    # only filled in for series that carry price
    price_change: Optional[float] = None
    sales_change: Optional[float] = None
    price_change_percent: Optional[float] = None
    sales_change_percent: Optional[float] = None

    @property
    def period(self):
        return self.year, self.month


def has_price(points: Sequence[SeriesPoint]) -> bool:
    """True when every point of a non-empty series carries a price."""
    return bool(points) and all(p.price is not None for p in points)


def _percent(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def annotate_changes(
    points: Sequence[SeriesPoint],
    previous: Optional[SeriesPoint] = None
) -> List[SeriesPoint]:
    """
    Attach price/sales change (absolute and percent) relative to the point
    right before each one. `previous` is the predecessor of points[0]; without
    it the first point reports zero change.
    """
    annotated = []
    prev = previous
    for point in points:
        if prev is None:
            annotated.append(replace(
                point,
                price_change=0.0,
                sales_change=0.0,
                price_change_percent=0.0,
                sales_change_percent=0.0,
            ))
        else:
            annotated.append(replace(
                point,
                price_change=point.price - prev.price,
                sales_change=point.amount - prev.amount,
                price_change_percent=_percent(point.price, prev.price),
                sales_change_percent=_percent(point.amount, prev.amount),
            ))
        prev = point
    return annotated


def with_changes(points: Sequence[SeriesPoint]) -> List[SeriesPoint]:
    """Annotate a priced series that arrived without its change fields."""
    missing = any(p.price_change_percent is None or p.sales_change_percent is None for p in points)
    if has_price(points) and missing:
        return annotate_changes(points)
    return list(points)


def combine(historical: Sequence[SeriesPoint], predicted: Sequence[SeriesPoint]) -> List[SeriesPoint]:
    return list(historical) + list(predicted)
