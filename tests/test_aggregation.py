"""Tests for chart bucketing helpers."""

from datetime import datetime

from findash.domain.helpers.aggregation import (
    MONTH_LABELS,
    monthly_series,
    week_key,
    weekly_series,
    yearly_series,
)
from findash.domain.models import TransactionCategory

REVENUE = TransactionCategory.REVENUE
EXPENSE = TransactionCategory.EXPENSE


def test_monthly_series_is_zero_filled_for_every_month() -> None:
    rows = [
        (datetime(2024, 2, 3), REVENUE, 100.0),
        (datetime(2024, 2, 20), REVENUE, 50.0),
        (datetime(2024, 2, 21), EXPENSE, 30.0),
        (datetime(2023, 2, 21), EXPENSE, 999.0),
    ]

    series = monthly_series(rows, 2024)

    assert [p["month"] for p in series] == MONTH_LABELS
    assert series[1] == {"month": "Feb", "income": 150.0, "expenses": 30.0}
    assert all(p["income"] == 0 and p["expenses"] == 0 for i, p in enumerate(series) if i != 1)


def test_monthly_series_without_data_still_has_twelve_entries() -> None:
    assert len(monthly_series([], 2025)) == 12


def test_monthly_series_without_year_folds_all_years() -> None:
    rows = [
        (datetime(2023, 5, 1), REVENUE, 10.0),
        (datetime(2024, 5, 9), REVENUE, 20.0),
        (datetime(2025, 12, 31), EXPENSE, 5.0),
    ]

    series = monthly_series(rows)

    assert series[4] == {"month": "May", "income": 30.0, "expenses": 0.0}
    assert series[11] == {"month": "Dec", "income": 0.0, "expenses": 5.0}


def test_week_key_is_sunday_based() -> None:
    # 2024-01-06 is a Saturday, 2024-01-07 the first Sunday of the year
    assert week_key(datetime(2024, 1, 6)) == (2024, 0)
    assert week_key(datetime(2024, 1, 7)) == (2024, 1)


def test_weekly_series_keeps_weeks_with_data_since_window_start() -> None:
    now = datetime(2024, 3, 30)
    rows = [
        (datetime(2023, 12, 1), REVENUE, 500.0),  # outside the window
        (datetime(2024, 3, 4), REVENUE, 100.0),
        (datetime(2024, 3, 5), EXPENSE, 40.0),
        (datetime(2024, 3, 26), EXPENSE, 10.0),
        (datetime(2024, 4, 2), REVENUE, 70.0),  # future-dated rows stay
    ]

    series = weekly_series(rows, now)

    assert series == [
        {"month": "Week 9", "income": 100.0, "expenses": 40.0},
        {"month": "Week 12", "income": 0.0, "expenses": 10.0},
        {"month": "Week 13", "income": 70.0, "expenses": 0.0},
    ]


def test_weekly_series_spans_year_boundary_in_order() -> None:
    now = datetime(2025, 1, 10)
    rows = [
        (datetime(2025, 1, 8), REVENUE, 1.0),
        (datetime(2024, 12, 20), REVENUE, 2.0),
    ]

    labels = [p["month"] for p in weekly_series(rows, now)]

    assert labels == ["Week 50", "Week 1"]


def test_yearly_series_is_chronological() -> None:
    rows = [
        (datetime(2025, 5, 1), EXPENSE, 20.0),
        (datetime(2023, 5, 1), REVENUE, 10.0),
        (datetime(2025, 6, 1), REVENUE, 5.0),
    ]

    assert yearly_series(rows) == [
        {"month": "2023", "income": 10.0, "expenses": 0.0},
        {"month": "2025", "income": 5.0, "expenses": 20.0},
    ]
