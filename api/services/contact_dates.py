"""
Date helpers shared by the contact scheduler and the weekly review.

Dates arrive from SQLite as ISO strings, from callers as date/datetime
objects, or not at all. Everything is resolved to a calendar ``date`` (or
None) by ``parse_date`` so the scheduling arithmetic works at whole-day
granularity and never has to deal with time-of-day.
"""
import math
from datetime import date, datetime
from typing import Optional, Union

DateInput = Union[date, datetime, str, None]

EMPTY_PLACEHOLDER = "—"

# Non-ISO formats tried after fromisoformat, month-first like US dates
FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def parse_date(value: DateInput) -> Optional[date]:
    """
    Resolve a date-like value to a calendar date.

    Accepts a date, a datetime (time-of-day is dropped), an ISO-8601
    string, or one of FALLBACK_DATE_FORMATS ("2024/03/01", "03/01/2024",
    "Mar 1, 2024", "1 Mar 2024"). Anything else resolves to None.

    Args:
        value: Date, datetime, date string, or None

    Returns:
        The calendar date, or None if absent or unparsable
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def start_of_day(value: Union[date, datetime]) -> date:
    """Strip time-of-day from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    """Signed number of whole days from start to end."""
    return (end - start).days


def sanitize_frequency(frequency_days) -> Optional[int]:
    """
    Normalize an ideal contact frequency to whole days.

    Only finite, strictly positive numbers count. Fractional values round
    to the nearest day (halves round up); a value that rounds to zero is
    treated as no cadence target.
    """
    if isinstance(frequency_days, bool):
        return None
    if isinstance(frequency_days, int):
        # Checked before isfinite, which overflows on ints too large for a float
        return frequency_days if frequency_days > 0 else None
    if not isinstance(frequency_days, float):
        return None
    if not math.isfinite(frequency_days) or frequency_days <= 0:
        return None
    rounded = int(math.floor(frequency_days + 0.5))
    return rounded if rounded > 0 else None


def _plural_days(count: int) -> str:
    return f"{count} day{'' if count == 1 else 's'}"


def format_display_date(value: Optional[date]) -> str:
    """Format a date as 'Jan 5, 2024', or a dash when absent."""
    if value is None:
        return EMPTY_PLACEHOLDER
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_relative_days(days: Optional[int]) -> str:
    """
    Describe a day offset relative to today.

    Positive values are in the past ("3 days ago"), negative values in the
    future ("in 2 days").
    """
    if days is None:
        return ""
    if days == 0:
        return "today"
    if days > 0:
        return f"{_plural_days(days)} ago"
    return f"in {_plural_days(abs(days))}"


def format_next_contact(days_until: Optional[int], placeholder: str = "Log an interaction") -> str:
    """
    Describe when the next contact is due.

    Args:
        days_until: Signed days until the next contact (negative = overdue)
        placeholder: Text shown when no next contact date is known

    Returns:
        "N days overdue", "Due today", "in N days" or the placeholder
    """
    if days_until is None:
        return placeholder
    if days_until < 0:
        return f"{_plural_days(abs(days_until))} overdue"
    if days_until == 0:
        return "Due today"
    return f"in {_plural_days(days_until)}"


def format_last_contact(last_contact: Optional[date]) -> str:
    if last_contact is None:
        return "No interactions yet"
    return f"Last: {format_display_date(last_contact)}"


def format_open_loops(count: int) -> str:
    if count == 0:
        return "No open loops"
    if count == 1:
        return "1 open loop"
    return f"{count} open loops"


def format_recency(recency_days: Optional[int]) -> str:
    if recency_days is None:
        return f"Recency: {EMPTY_PLACEHOLDER}"
    return f"Recency: {recency_days}d"
