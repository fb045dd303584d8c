# backend/forecasting/calendar_utils.py
from typing import Iterable, Iterator, List, Tuple

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _check_month(month: int):
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def advance(year: int, month: int, steps: int = 1) -> Tuple[int, int]:
    """
    Add `steps` months to given (year, month)
    Returns new (year, month)
    """
    _check_month(month)
    new_month = month + steps
    new_year = year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    return new_year, new_month


def is_after(year: int, month: int, ref_year: int, ref_month: int) -> bool:
    return (year, month) > (ref_year, ref_month)


def months_between(start_year: int, start_month: int, end_year: int, end_month: int) -> int:
    """Signed number of month steps from start to end."""
    return (end_year - start_year) * 12 + (end_month - start_month)


def walk(year: int, month: int, target_year: int, target_month: int) -> Iterator[Tuple[int, int]]:
    """
    Yield every (year, month) strictly after the start, up to and including
    the target. One advance per step so callers can key on month-of-year.
    """
    _check_month(target_month)
    while is_after(target_year, target_month, year, month):
        year, month = advance(year, month)
        yield year, month


def month_label(year: int, month: int) -> str:
    _check_month(month)
    return f"{MONTH_NAMES[month - 1]} {year}"


def date_range_label(points: Iterable) -> str:
    """'Jan 2023 - Jun 2024' for the first and last point, '' when empty."""
    points = list(points)
    if not points:
        return ""
    first, last = points[0], points[-1]
    return f"{month_label(first.year, first.month)} - {month_label(last.year, last.month)}"


def prediction_years(points: Iterable, years_ahead: int = 2) -> List[int]:
    """Observed years plus the next `years_ahead` years, sorted."""
    years = {p.year for p in points}
    if not years:
        return []
    max_year = max(years)
    years.update(max_year + i for i in range(1, years_ahead + 1))
    return sorted(years)
