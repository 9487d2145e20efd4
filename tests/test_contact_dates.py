"""Tests for shared date parsing and display helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from api.services.contact_dates import (
    format_display_date,
    format_last_contact,
    format_next_contact,
    format_open_loops,
    format_recency,
    format_relative_days,
    parse_date,
    sanitize_frequency,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-01-05", date(2024, 1, 5)),
        ("2024-01-05T09:15:00", date(2024, 1, 5)),
        ("2024-01-05 09:15:00", date(2024, 1, 5)),
        ("2024-01-05T09:15:00Z", date(2024, 1, 5)),
        ("  2024-01-05  ", date(2024, 1, 5)),
        (date(2024, 1, 5), date(2024, 1, 5)),
        (datetime(2024, 1, 5, 23, 0), date(2024, 1, 5)),
        ("", None),
        ("yesterday", None),
        ("2024-13-01", None),
        (None, None),
        (20240105, None),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value",
    ["2024/03/01", "03/01/2024", "Mar 1, 2024", "March 1, 2024", "1 Mar 2024", "1 March 2024"],
)
def test_parse_date_common_formats(value):
    assert parse_date(value) == date(2024, 3, 1)


def test_parse_date_rejects_impossible_slash_dates():
    assert parse_date("2024/02/30") is None
    assert parse_date("13/01/2024") is None


def test_parse_date_keeps_wall_clock_date_of_aware_datetimes():
    tz = timezone(timedelta(hours=-8))
    assert parse_date(datetime(2024, 1, 5, 22, 0, tzinfo=tz)) == date(2024, 1, 5)


@pytest.mark.parametrize(
    "value,expected",
    [(7, 7), (7.5, 8), (0.6, 1), (0.4, None), (0, None), (-1, None), (None, None), (False, None),
     (10**400, 10**400), (float("nan"), None)],
)
def test_sanitize_frequency(value, expected):
    assert sanitize_frequency(value) == expected


def test_format_display_date():
    assert format_display_date(date(2024, 1, 5)) == "Jan 5, 2024"
    assert format_display_date(None) == "—"


@pytest.mark.parametrize(
    "days,expected",
    [(None, ""), (0, "today"), (1, "1 day ago"), (12, "12 days ago"), (-1, "in 1 day"), (-3, "in 3 days")],
)
def test_format_relative_days(days, expected):
    assert format_relative_days(days) == expected


@pytest.mark.parametrize(
    "days,expected",
    [(-1, "1 day overdue"), (-4, "4 days overdue"), (0, "Due today"), (1, "in 1 day"), (9, "in 9 days")],
)
def test_format_next_contact(days, expected):
    assert format_next_contact(days) == expected


def test_format_next_contact_placeholder():
    assert format_next_contact(None) == "Log an interaction"
    assert format_next_contact(None, placeholder="Set a frequency") == "Set a frequency"


def test_review_labels():
    assert format_last_contact(None) == "No interactions yet"
    assert format_last_contact(date(2024, 2, 20)) == "Last: Feb 20, 2024"
    assert format_open_loops(0) == "No open loops"
    assert format_open_loops(1) == "1 open loop"
    assert format_open_loops(3) == "3 open loops"
    assert format_recency(None) == "Recency: —"
    assert format_recency(12) == "Recency: 12d"
