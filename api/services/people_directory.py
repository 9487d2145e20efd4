"""
People directory - the people list decorated with contact cadence.

Each person is paired with their ContactMetrics so the list can be sorted
by name, last contact or next contact, or narrowed to overdue people.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from api.services.contact_dates import format_relative_days
from api.services.contact_schedule import ContactMetrics, compute_schedule
from api.services.interaction_store import get_interaction_store
from api.services.person_store import Person, get_person_store

logger = logging.getLogger(__name__)

SORT_MODES = ("name", "last_contact", "next_contact", "overdue")


@dataclass
class DirectoryEntry:
    """A person with their derived contact metrics."""

    person: Person
    metrics: ContactMetrics

    def to_dict(self) -> dict:
        return {
            **self.person.to_dict(),
            "metrics": self.metrics.to_dict(),
            "last_contact_label": (
                format_relative_days(self.metrics.days_since_last)
                if self.metrics.last_contact_date
                else "No interactions yet"
            ),
            "next_contact_label": self.metrics.next_contact_label,
        }


def _sort_key(mode: str):
    if mode == "name":
        return lambda e: e.person.name.casefold()
    if mode == "last_contact":
        # Most recent first, never-contacted last
        return lambda e: -e.metrics.last_contact_date.toordinal() if e.metrics.last_contact_date else math.inf
    if mode == "next_contact":
        return lambda e: e.metrics.next_contact_date.toordinal() if e.metrics.next_contact_date else math.inf
    # overdue: overdue first, then soonest due, no cadence last
    return lambda e: (
        not e.metrics.is_overdue,
        e.metrics.days_until_next if e.metrics.days_until_next is not None else math.inf,
    )


def sort_entries(entries: list[DirectoryEntry], mode: str = "name") -> list[DirectoryEntry]:
    """
    Sort directory entries.

    Raises:
        ValueError: If mode is not one of SORT_MODES
    """
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode}")
    return sorted(entries, key=_sort_key(mode))


def list_people(
    today: Optional[date] = None,
    sort: str = "name",
    overdue_only: bool = False,
) -> list[DirectoryEntry]:
    """
    List all people with contact metrics.

    Args:
        today: Reference day (defaults to the current local date)
        sort: One of SORT_MODES
        overdue_only: Keep only people whose next contact is overdue

    Returns:
        Sorted DirectoryEntry list
    """
    if today is None:
        today = date.today()

    people = get_person_store().get_all()
    last_dates = get_interaction_store().get_last_dates()

    entries = [
        DirectoryEntry(
            person=person,
            metrics=compute_schedule(
                last_dates.get(person.id),
                person.ideal_contact_frequency_days,
                today,
            ),
        )
        for person in people
    ]
    if overdue_only:
        entries = [e for e in entries if e.metrics.is_overdue]

    logger.debug(f"Listed {len(entries)} of {len(people)} people (sort={sort}, overdue_only={overdue_only})")
    return sort_entries(entries, sort)
