"""
Pytest fixtures for the forecasting engine and API tests.
"""
import pytest

from forecasting.calendar_utils import advance
from forecasting.series import MonthlyRecord, SeriesPoint, annotate_changes


def make_series(amounts, start=(2023, 1), prices=None, category=None):
    """
    Build a historical series of consecutive months.

    Args:
        amounts: amount per month, oldest first
        start: (year, month) of the first point
        prices: optional price per month; the series is then change-annotated
        category: optional category tag for every point

    Returns:
        list of SeriesPoint
    """
    year, month = start
    points = []
    for i, amount in enumerate(amounts):
        points.append(SeriesPoint(
            year=year,
            month=month,
            amount=float(amount),
            price=None if prices is None else float(prices[i]),
            category=category,
        ))
        year, month = advance(year, month)

    if prices is not None:
        points = annotate_changes(points)
    return points


@pytest.fixture
def linear_history():
    """Jan-Mar 2023 growing by 10 a month."""
    return make_series([100, 110, 120])


@pytest.fixture
def december_spike_history():
    """One year of flat sales with December doubled."""
    return make_series([100] * 11 + [200])


@pytest.fixture
def priced_history():
    """Five months of sales with an average price."""
    return make_series(
        [100, 90, 95, 96, 110],
        prices=[10, 11, 10, 10.01, 12],
    )


@pytest.fixture
def raw_records():
    """Records spread over two categories, shuffled."""
    return [
        MonthlyRecord(2023, 3, "Tools", 30.0),
        MonthlyRecord(2023, 1, "Tools", 10.0),
        MonthlyRecord(2023, 5, "Paint", 50.0),
        MonthlyRecord(2023, 2, "Paint", 20.0),
        MonthlyRecord(2023, 4, "Tools", 40.0),
    ]
