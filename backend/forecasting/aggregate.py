# backend/forecasting/aggregate.py
"""
Turn raw monthly records into one ordered historical series.

The first and last records (after sorting by year/month) are always dropped:
boundary months are treated as partial calendar months and never analysed.
"""

import json
import logging
from typing import Any, Iterable, List

import pandas as pd

from forecasting.series import MonthlyRecord, SeriesPoint, annotate_changes, has_price

logger = logging.getLogger(__name__)

TOTAL = "Total"


def aggregate(records: Iterable[MonthlyRecord], category: str = TOTAL) -> List[SeriesPoint]:
    """
    records: MonthlyRecord sequence in any order
    category: "Total" sums every category, anything else is an exact match
    returns historical SeriesPoints, one per (year, month), ascending
    """
    ordered = sorted(records, key=lambda r: (r.year, r.month))
    if len(ordered) <= 2:
        logger.info("Only %d records, nothing left after boundary trimming", len(ordered))
        return []

    complete = ordered[1:-1]
    if category != TOTAL:
        complete = [r for r in complete if r.category == category]
    if not complete:
        return []

    df = pd.DataFrame(
        [(r.year, r.month, r.amount, r.price) for r in complete],
        columns=["year", "month", "amount", "price"],
    )
    df["price"] = pd.to_numeric(df["price"], errors="coerce")

    monthly = (
        df.groupby(["year", "month"], sort=True)
        .agg(amount=("amount", "sum"), price=("price", "mean"))
        .reset_index()
    )

    tag = None if category == TOTAL else category
    series = [
        SeriesPoint(
            year=int(row.year),
            month=int(row.month),
            amount=float(row.amount),
            price=None if pd.isna(row.price) else float(row.price),
            category=tag,
        )
        for row in monthly.itertuples(index=False)
    ]

    logger.debug(
        "Aggregated %d records into %d months (category=%s)",
        len(complete), len(series), category,
    )

    if has_price(series):
        series = annotate_changes(series)
    return series


def categories(records: Iterable[MonthlyRecord]) -> List[str]:
    """Distinct categories in first-seen order."""
    seen = {}
    for r in records:
        seen.setdefault(r.category, None)
    return list(seen)


# -------------------------
# Loaders
# -------------------------
def records_from_frame(df: pd.DataFrame) -> List[MonthlyRecord]:
    """
    Accepts columns year, month, amount and optionally category, price.
    A `date` column may replace year/month.
    """
    df = df.rename(columns=str.lower)

    if "year" not in df.columns or "month" not in df.columns:
        if "date" not in df.columns:
            raise ValueError("Records need either year/month columns or a date column.")
        dates = pd.to_datetime(df["date"], errors="coerce")
        if dates.isnull().any():
            raise ValueError("Unable to parse all dates.")
        df = df.assign(year=dates.dt.year, month=dates.dt.month)

    if "amount" not in df.columns:
        raise ValueError("Records need an amount column.")

    if "category" not in df.columns:
        df = df.assign(category=TOTAL)
    if "price" not in df.columns:
        df = df.assign(price=None)

    records = []
    for row in df.itertuples(index=False):
        price = None if pd.isna(row.price) else float(row.price)
        records.append(MonthlyRecord(
            year=int(row.year),
            month=int(row.month),
            category=str(row.category),
            amount=float(row.amount),
            price=price,
        ))
    return records


def load_records_from_csv(path: str) -> List[MonthlyRecord]:
    return records_from_frame(pd.read_csv(path))


def load_records_from_json(path: str) -> List[MonthlyRecord]:
    with open(path, "r") as f:
        payload: Any = json.load(f)

    if isinstance(payload, dict) and isinstance(payload.get("records"), list):
        payload = payload["records"]
    if not isinstance(payload, list):
        raise ValueError("Unsupported records format: expected list or dict with key 'records'.")

    return records_from_frame(pd.DataFrame(payload))
