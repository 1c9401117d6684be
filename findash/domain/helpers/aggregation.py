from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from findash.domain.models import TransactionCategory

MONTH_LABELS = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]
WEEKLY_WINDOW = 8

# (date, category, amount) of a Paid transaction
ChartRow = Tuple[datetime, TransactionCategory, float]


def _empty_bucket() -> Dict[str, float]:
    return {"income": 0.0, "expenses": 0.0}


def _add_to_bucket(bucket: Dict[str, float], category, amount: float) -> None:
    if category == TransactionCategory.REVENUE:
        bucket["income"] += amount
    else:
        bucket["expenses"] += amount


def _as_points(buckets: List[Tuple[str, Dict[str, float]]]) -> List[dict]:
    return [
        {"month": label, "income": data["income"], "expenses": data["expenses"]}
        for label, data in buckets
    ]


def week_key(moment: datetime) -> Tuple[int, int]:
    """
    Sunday-based week of year (``%U``): days before the first Sunday are week 0.
    """
    return moment.year, int(moment.strftime("%U"))


def weekly_window_start(now: datetime) -> datetime:
    return now - timedelta(weeks=WEEKLY_WINDOW)


def monthly_series(rows: Iterable[ChartRow], year: Optional[int] = None) -> List[dict]:
    """
    Twelve buckets, Jan..Dec, zero-filled where no data exists.
    Without ``year`` every year folds into its calendar month.
    """
    buckets = [_empty_bucket() for _ in MONTH_LABELS]
    for moment, category, amount in rows:
        if year is not None and moment.year != year:
            continue
        _add_to_bucket(buckets[moment.month - 1], category, amount)
    return _as_points(list(zip(MONTH_LABELS, buckets)))


def weekly_series(rows: Iterable[ChartRow], now: datetime) -> List[dict]:
    """
    Buckets for the weeks since ``now - WEEKLY_WINDOW weeks`` that hold data,
    oldest first and capped at the most recent ``WEEKLY_WINDOW``.
    """
    start = weekly_window_start(now)
    buckets: Dict[Tuple[int, int], Dict[str, float]] = {}
    for moment, category, amount in rows:
        if moment < start:
            continue
        bucket = buckets.setdefault(week_key(moment), _empty_bucket())
        _add_to_bucket(bucket, category, amount)
    ordered = sorted(buckets.items())[-WEEKLY_WINDOW:]
    return _as_points([(f"Week {week}", data) for (_, week), data in ordered])


def yearly_series(rows: Iterable[ChartRow]) -> List[dict]:
    buckets: Dict[int, Dict[str, float]] = {}
    for moment, category, amount in rows:
        _add_to_bucket(buckets.setdefault(moment.year, _empty_bucket()), category, amount)
    return _as_points([(str(year), data) for year, data in sorted(buckets.items())])
