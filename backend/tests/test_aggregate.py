"""
Tests for turning raw records into a monthly series.
"""
import json

import pandas as pd
import pytest

from forecasting.aggregate import (
    aggregate,
    categories,
    load_records_from_csv,
    load_records_from_json,
    records_from_frame,
)
from forecasting.series import MonthlyRecord


class TestBoundaryTrimming:

    def test_first_and_last_records_are_dropped(self, raw_records):
        series = aggregate(raw_records)

        assert [(p.year, p.month) for p in series] == [(2023, 2), (2023, 3), (2023, 4)]
        assert [p.amount for p in series] == [20.0, 30.0, 40.0]
        assert all(not p.is_predicted for p in series)

    def test_trimming_ignores_category_filter(self, raw_records):
        # Jan (Tools) is dropped even though the filter would keep it
        series = aggregate(raw_records, "Tools")
        assert [(p.month, p.amount) for p in series] == [(3, 30.0), (4, 40.0)]

    def test_trimming_drops_records_not_months(self):
        records = [
            MonthlyRecord(2023, 1, "A", 1.0),
            MonthlyRecord(2023, 1, "B", 2.0),
            MonthlyRecord(2023, 2, "A", 3.0),
            MonthlyRecord(2023, 3, "A", 4.0),
            MonthlyRecord(2023, 4, "A", 5.0),
        ]
        series = aggregate(records)
        # one January record survives
        assert [(p.month, p.amount) for p in series] == [(1, 2.0), (2, 3.0), (3, 4.0)]

    def test_two_or_fewer_records_give_nothing(self):
        records = [MonthlyRecord(2023, 1, "A", 1.0), MonthlyRecord(2023, 2, "A", 2.0)]
        assert aggregate(records) == []
        assert aggregate([]) == []


class TestGrouping:

    def test_duplicates_are_summed_for_total(self):
        records = [
            MonthlyRecord(2022, 12, "A", 999.0),
            MonthlyRecord(2023, 1, "A", 10.0),
            MonthlyRecord(2023, 1, "B", 5.0),
            MonthlyRecord(2023, 1, "A", 1.0),
            MonthlyRecord(2023, 2, "B", 7.0),
            MonthlyRecord(2023, 3, "A", 999.0),
        ]
        series = aggregate(records)

        assert [(p.month, p.amount) for p in series] == [(1, 16.0), (2, 7.0)]
        assert all(p.category is None for p in series)

    def test_category_filter_tags_points(self):
        records = [
            MonthlyRecord(2022, 12, "A", 999.0),
            MonthlyRecord(2023, 1, "A", 10.0),
            MonthlyRecord(2023, 1, "B", 5.0),
            MonthlyRecord(2023, 2, "B", 7.0),
            MonthlyRecord(2023, 3, "B", 8.0),
            MonthlyRecord(2023, 4, "A", 999.0),
        ]
        series = aggregate(records, "B")

        assert [(p.month, p.amount) for p in series] == [(1, 5.0), (2, 7.0), (3, 8.0)]
        assert all(p.category == "B" for p in series)

    def test_unknown_category_gives_nothing(self, raw_records):
        assert aggregate(raw_records, "Garden") == []

    def test_price_is_averaged_and_changes_annotated(self):
        records = [
            MonthlyRecord(2022, 12, "A", 1.0, 1.0),
            MonthlyRecord(2023, 1, "A", 100.0, 10.0),
            MonthlyRecord(2023, 1, "B", 100.0, 20.0),
            MonthlyRecord(2023, 2, "A", 150.0, 16.5),
            MonthlyRecord(2023, 3, "A", 1.0, 1.0),
        ]
        series = aggregate(records)

        jan, feb = series
        assert jan.amount == 200.0
        assert jan.price == pytest.approx(15.0)
        assert jan.price_change == 0.0
        assert jan.sales_change_percent == 0.0

        assert feb.price_change == pytest.approx(1.5)
        assert feb.price_change_percent == pytest.approx(10.0)
        assert feb.sales_change == pytest.approx(-50.0)
        assert feb.sales_change_percent == pytest.approx(-25.0)

    def test_amount_only_series_has_no_changes(self, raw_records):
        series = aggregate(raw_records)
        assert all(p.price is None and p.price_change is None for p in series)

    def test_categories_in_first_seen_order(self, raw_records):
        assert categories(raw_records) == ["Tools", "Paint"]


class TestLoaders:

    def test_frame_with_date_column(self):
        df = pd.DataFrame({
            "Date": ["2023-01-15", "2023-02-03"],
            "Amount": [10, 20],
        })
        records = records_from_frame(df)

        assert [(r.year, r.month, r.amount) for r in records] == [(2023, 1, 10.0), (2023, 2, 20.0)]
        assert all(r.category == "Total" and r.price is None for r in records)

    def test_frame_without_amount_is_rejected(self):
        with pytest.raises(ValueError):
            records_from_frame(pd.DataFrame({"year": [2023], "month": [1]}))

    def test_frame_without_dates_is_rejected(self):
        with pytest.raises(ValueError):
            records_from_frame(pd.DataFrame({"amount": [1.0]}))

    def test_load_json_records_key(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"records": [
            {"year": 2023, "month": 1, "category": "A", "amount": 5, "price": 2.5},
            {"year": 2023, "month": 2, "category": "B", "amount": 6},
        ]}))
        records = load_records_from_json(str(path))

        assert records[0] == MonthlyRecord(2023, 1, "A", 5.0, 2.5)
        assert records[1].price is None

    def test_load_json_rejects_other_shapes(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"history": []}))
        with pytest.raises(ValueError):
            load_records_from_json(str(path))

    def test_load_csv(self, tmp_path):
        path = tmp_path / "records.csv"
        path.write_text(
            "year,month,category,amount,price\n"
            "2023,1,A,10,1.5\n"
            "2023,2,A,20,\n"
        )
        records = load_records_from_csv(str(path))

        assert records == [
            MonthlyRecord(2023, 1, "A", 10.0, 1.5),
            MonthlyRecord(2023, 2, "A", 20.0, None),
        ]
