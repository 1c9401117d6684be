"""Tests for free-text search interpretation."""

from datetime import datetime

from findash.domain.search import (
    AmountEquals,
    AmountRange,
    DateSpan,
    IdEquals,
    TextMatch,
    build_search_clauses,
    parse_calendar_day,
    parse_positive_integer,
    parse_positive_number,
    parse_year,
)


def test_empty_search_produces_no_clauses() -> None:
    assert build_search_clauses("") == []
    assert build_search_clauses("   ") == []
    assert build_search_clauses(None) == []


def test_plain_text_only_matches_text_fields() -> None:
    assert build_search_clauses("pending") == [TextMatch("pending")]


def test_integer_term_matches_amount_range_and_id() -> None:
    clauses = build_search_clauses("150")

    assert clauses == [
        TextMatch("150"),
        AmountEquals(150.0),
        AmountRange(150.0, 1500.0),
        IdEquals(150),
    ]


def test_decimal_term_is_not_an_identifier() -> None:
    assert parse_positive_number("12.5") == [AmountEquals(12.5), AmountRange(12.5, 125.0)]
    assert parse_positive_integer("12.5") == []


def test_non_positive_and_non_finite_numbers_are_skipped() -> None:
    assert parse_positive_number("0") == []
    assert parse_positive_number("-5") == []
    assert parse_positive_number("nan") == []
    assert parse_positive_number("inf") == []
    assert parse_positive_integer("0") == []


def test_calendar_day_requires_a_date_separator() -> None:
    assert parse_calendar_day("2024-03-15") == [
        DateSpan(datetime(2024, 3, 15), datetime(2024, 3, 16))
    ]
    assert parse_calendar_day("03/15/2024") == [
        DateSpan(datetime(2024, 3, 15), datetime(2024, 3, 16))
    ]
    assert parse_calendar_day("march") == []


def test_unparseable_date_is_skipped_silently() -> None:
    assert parse_calendar_day("user-abc") == []
    assert build_search_clauses("user-abc") == [TextMatch("user-abc")]


def test_four_digit_term_adds_whole_year() -> None:
    clauses = build_search_clauses("2024")

    assert DateSpan(datetime(2024, 1, 1), datetime(2025, 1, 1)) in clauses
    assert IdEquals(2024) in clauses
    assert parse_year("202") == []
    assert parse_year("20245") == []


def test_year_without_following_year_is_skipped() -> None:
    clauses = build_search_clauses("9999")

    assert IdEquals(9999) in clauses
    assert not any(isinstance(c, DateSpan) for c in clauses)


def test_last_calendar_day_is_skipped() -> None:
    assert build_search_clauses("9999-12-31") == [TextMatch("9999-12-31")]


def test_integer_beyond_column_range_is_not_an_id() -> None:
    term = "9" * 20

    clauses = build_search_clauses(term)

    assert not any(isinstance(c, IdEquals) for c in clauses)
    assert parse_positive_integer(str(2**63 - 1)) == [IdEquals(2**63 - 1)]
    assert parse_positive_integer(str(2**63)) == []
