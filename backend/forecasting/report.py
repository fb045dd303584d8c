# backend/forecasting/report.py
"""
Compare every forecasting method on a records file.

Usage (from backend/):
    python -m forecasting.report sales.csv [category] [YYYY-MM]

The records file is CSV or JSON with year, month (or date), category,
amount and optional price columns.
"""

import os
import sys

from forecasting.aggregate import TOTAL, aggregate, load_records_from_csv, load_records_from_json
from forecasting.analytics import analyze
from forecasting.backtest import backtest
from forecasting.calendar_utils import advance, month_label
from forecasting.engine import MethodId, forecast, forecast_series


def load_records(path):
    if path.lower().endswith(".json"):
        return load_records_from_json(path)
    return load_records_from_csv(path)


def main(argv):
    if not argv:
        print(__doc__)
        return 1

    path = argv[0]
    category = argv[1] if len(argv) > 1 else TOTAL
    if not os.path.exists(path):
        raise FileNotFoundError(f"Records file not found: {path}")

    series = aggregate(load_records(path), category)
    print(f"Aggregated {len(series)} months for category '{category}'")
    if not series:
        return 1

    last = series[-1]
    if len(argv) > 2:
        target_year, target_month = map(int, argv[2].split("-"))
    else:
        target_year, target_month = advance(last.year, last.month, 12)
    print(f"Forecasting {month_label(last.year, last.month)} -> {month_label(target_year, target_month)}\n")

    print(f"{'method':<26}{'months':>8}{'last value':>16}")
    for method in MethodId:
        predicted = forecast(series, method, target_year, target_month)
        last_value = f"{predicted[-1].amount:,.2f}" if predicted else "n/a"
        print(f"{method.value:<26}{len(predicted):>8}{last_value:>16}")

    scores = backtest(series, holdout=3)
    if scores:
        print("\nBacktest (last 3 months held out):")
        for score in scores:
            rmse = f"{score.rmse:,.2f}" if score.rmse is not None else "n/a"
            print(f"  {score.method.value:<26} RMSE = {rmse}")

    result = analyze(forecast_series(series, MethodId.SEASONAL, target_year, target_month))
    print(f"\n{result.date_range}")
    print(result.seasonal.message)
    print(result.extremes.message)
    if result.correlation is not None:
        print(result.correlation.message)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
