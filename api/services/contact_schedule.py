"""
Contact Schedule - Next-contact-due estimation.

Given the date of the last interaction with a person and their ideal contact
frequency, computes:
- days_since_last: whole days since last contact (never negative)
- next_contact_date: last contact + frequency days
- days_until_next: signed days until the next contact (negative = overdue)
- is_overdue: next contact date is strictly before today

Invalid input never raises. Unparsable dates and missing or non-positive
frequencies resolve to None and propagate as None fields, so list and
detail views can always render a result.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

from api.services.contact_dates import (
    DateInput,
    days_between,
    format_next_contact,
    parse_date,
    sanitize_frequency,
    start_of_day,
)


@dataclass(frozen=True)
class ContactMetrics:
    """Derived contact cadence metrics for one person. Never persisted."""

    last_contact_date: Optional[date] = None
    days_since_last: Optional[int] = None
    next_contact_date: Optional[date] = None
    days_until_next: Optional[int] = None
    is_overdue: bool = False

    @property
    def next_contact_label(self) -> str:
        """Display text for the next contact ("3 days overdue", "Due today", ...)."""
        return format_next_contact(self.days_until_next)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "last_contact_date": self.last_contact_date.isoformat() if self.last_contact_date else None,
            "days_since_last": self.days_since_last,
            "next_contact_date": self.next_contact_date.isoformat() if self.next_contact_date else None,
            "days_until_next": self.days_until_next,
            "is_overdue": self.is_overdue,
        }


def compute_schedule(
    last_contact: DateInput,
    ideal_frequency_days: Optional[float],
    today: Optional[date] = None,
) -> ContactMetrics:
    """
    Compute contact metrics from a single last-contact date.

    Args:
        last_contact: Date, datetime, ISO string or None
        ideal_frequency_days: Target days between contacts (None or <= 0 = no target)
        today: Reference day (defaults to the current local date)

    Returns:
        ContactMetrics for the person
    """
    today_start = start_of_day(today if today is not None else date.today())
    last_date = parse_date(last_contact)
    frequency = sanitize_frequency(ideal_frequency_days)

    if last_date is None:
        return ContactMetrics()

    # Future last-contact dates count as contacted today
    days_since_last = max(0, days_between(last_date, today_start))

    without_next_contact = ContactMetrics(
        last_contact_date=last_date,
        days_since_last=days_since_last,
    )
    if frequency is None:
        return without_next_contact

    try:
        next_contact = last_date + timedelta(days=frequency)
    except OverflowError:
        # Due date past date.max: no representable next contact
        return without_next_contact
    return ContactMetrics(
        last_contact_date=last_date,
        days_since_last=days_since_last,
        next_contact_date=next_contact,
        days_until_next=days_between(today_start, next_contact),
        is_overdue=today_start > next_contact,
    )


def _interaction_date(interaction: Any) -> DateInput:
    if isinstance(interaction, Mapping):
        value = interaction.get("date")
        return value if value is not None else interaction.get("occurred_at")
    value = getattr(interaction, "date", None)
    return value if value is not None else getattr(interaction, "occurred_at", None)


def most_recent_date(interactions: Iterable[Any]) -> Optional[date]:
    """
    Pick the most recent parsable date from interaction records.

    Records may be mappings with a "date" key or objects with a ``date``
    attribute. Unparsable dates are skipped.
    """
    parsed = (parse_date(_interaction_date(i)) for i in interactions)
    return max((d for d in parsed if d is not None), default=None)


def compute_schedule_from_interactions(
    interactions: Iterable[Any],
    ideal_frequency_days: Optional[float],
    today: Optional[date] = None,
) -> ContactMetrics:
    """
    Compute contact metrics from a person's interaction history.

    The most recent successfully parsed interaction date is used as the last
    contact. With no parsable dates the person is treated as never contacted.
    """
    return compute_schedule(most_recent_date(interactions), ideal_frequency_days, today)
