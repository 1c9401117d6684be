"""Free-text search interpretation for transaction listings.

A search term is run through an ordered chain of typed parsers. Each parser
either contributes match clauses or contributes nothing when the term does not
parse as its type. The repository OR-combines every clause produced.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Union

from dateutil import parser as date_parser

from findash.domain.models import MAX_TRANSACTION_ID

_YEAR_RE = re.compile(r"^\d{4}$")
_INTEGER_RE = re.compile(r"^\+?\d+$")


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring over category, status and user_id."""

    text: str


@dataclass(frozen=True)
class AmountEquals:
    value: float


@dataclass(frozen=True)
class AmountRange:
    """Amounts in ``[low, high]``; both bounds inclusive."""

    low: float
    high: float


@dataclass(frozen=True)
class IdEquals:
    value: int


@dataclass(frozen=True)
class DateSpan:
    """Dates in the half-open interval ``[start, end)``."""

    start: datetime
    end: datetime


SearchClause = Union[TextMatch, AmountEquals, AmountRange, IdEquals, DateSpan]


def day_span(day: date) -> DateSpan:
    start = datetime.combine(day, time.min)
    return DateSpan(start, start + timedelta(days=1))


def year_span(year: int) -> DateSpan:
    return DateSpan(datetime(year, 1, 1), datetime(year + 1, 1, 1))


def parse_text(term: str) -> List[SearchClause]:
    return [TextMatch(term)]


def parse_positive_number(term: str) -> List[SearchClause]:
    try:
        value = float(term)
    except ValueError:
        return []
    if not math.isfinite(value) or value <= 0:
        return []
    # "150" also catches 1500 for amounts typed only partially
    return [AmountEquals(value), AmountRange(value, value * 10)]


def parse_positive_integer(term: str) -> List[SearchClause]:
    if not _INTEGER_RE.match(term):
        return []
    value = int(term)
    return [IdEquals(value)] if 0 < value <= MAX_TRANSACTION_ID else []


def parse_calendar_day(term: str) -> List[SearchClause]:
    if "-" not in term and "/" not in term:
        return []
    try:
        return [day_span(date_parser.parse(term).date())]
    except (ValueError, OverflowError):
        return []


def parse_year(term: str) -> List[SearchClause]:
    if not _YEAR_RE.match(term):
        return []
    year = int(term)
    try:
        return [year_span(year)]
    except ValueError:
        # 9999 has no following year to close the span
        return []


SEARCH_PARSERS: List[Callable[[str], List[SearchClause]]] = [
    parse_text,
    parse_positive_number,
    parse_positive_integer,
    parse_calendar_day,
    parse_year,
]


def build_search_clauses(search: Optional[str]) -> List[SearchClause]:
    term = (search or "").strip()
    if not term:
        return []
    clauses: List[SearchClause] = []
    for parse in SEARCH_PARSERS:
        clauses.extend(parse(term))
    return clauses
