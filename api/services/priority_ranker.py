"""
Priority Ranker - Weekly review scoring.

Ranks people by how much attention the relationship needs this week:

    score = importance * IMPORTANCE_WEIGHT
            + recency * RECENCY_WEIGHT
            + open_loops * OPEN_LOOP_WEIGHT

Where recency is days since last contact capped at RECENCY_CAP_DAYS, and a
person with no recorded contact is scored as RECENCY_CAP_DAYS stale so they
surface instead of looking freshly contacted.

See config/priority_weights.py for the default weights.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from api.services.contact_dates import days_between, parse_date, start_of_day
from config.priority_weights import (
    DEFAULT_IMPORTANCE,
    DEFAULT_OPEN_LOOPS,
    DEFAULT_REVIEW_LIMIT,
    IMPORTANCE_WEIGHT,
    OPEN_LOOP_WEIGHT,
    RECENCY_CAP_DAYS,
    RECENCY_WEIGHT,
)


@dataclass(frozen=True)
class PriorityWeights:
    """Weights for the weekly review score."""

    importance: float = IMPORTANCE_WEIGHT
    recency: float = RECENCY_WEIGHT
    open_loop: float = OPEN_LOOP_WEIGHT
    recency_cap_days: int = RECENCY_CAP_DAYS


DEFAULT_WEIGHTS = PriorityWeights()


@dataclass(frozen=True)
class PriorityRow:
    """One ranked person in the weekly review. Never persisted."""

    person_id: str
    name: str
    importance: int
    last_contact_date: Optional[date]
    open_loop_count: int
    recency_days: Optional[int]
    score: float

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "person_id": self.person_id,
            "name": self.name,
            "importance": self.importance,
            "last_contact_date": self.last_contact_date.isoformat() if self.last_contact_date else None,
            "open_loop_count": self.open_loop_count,
            "recency_days": self.recency_days,
            "score": self.score,
        }


def _field(row: Any, *names: str) -> Any:
    """Read the first present field from a mapping or object."""
    for name in names:
        if isinstance(row, Mapping):
            value = row.get(name)
        else:
            value = getattr(row, name, None)
        if value is not None:
            return value
    return None


def compute_recency_days(
    last_contact: Any,
    today: date,
    cap_days: int = RECENCY_CAP_DAYS,
) -> Optional[int]:
    """
    Days since last contact, capped at cap_days.

    Returns None when there is no parsable last contact. Future dates count
    as zero days.
    """
    last_date = parse_date(last_contact)
    if last_date is None:
        return None
    days_since = max(0, days_between(last_date, start_of_day(today)))
    return min(days_since, cap_days)


def compute_priority_score(
    importance: float,
    recency_days: Optional[int],
    open_loop_count: int,
    weights: PriorityWeights = DEFAULT_WEIGHTS,
) -> float:
    """
    Compute the weekly review score for one person.

    A missing recency is scored as maximally stale (the recency cap).
    """
    recency_for_score = recency_days if recency_days is not None else weights.recency_cap_days
    return (
        importance * weights.importance
        + recency_for_score * weights.recency
        + open_loop_count * weights.open_loop
    )


def score_row(
    row: Any,
    today: date,
    weights: PriorityWeights = DEFAULT_WEIGHTS,
) -> PriorityRow:
    """
    Score a single roster row.

    Rows can be mappings or objects exposing id, name, importance,
    last_contact_date (or last) and open_loop_count (or open_loops).
    Missing importance defaults to 3 and missing open loops to 0.
    """
    importance = _field(row, "importance")
    if importance is None:
        importance = DEFAULT_IMPORTANCE
    open_loops = _field(row, "open_loop_count", "open_loops")
    if open_loops is None:
        open_loops = DEFAULT_OPEN_LOOPS

    recency_days = compute_recency_days(
        _field(row, "last_contact_date", "last"),
        today,
        weights.recency_cap_days,
    )

    return PriorityRow(
        person_id=_field(row, "id", "person_id"),
        name=_field(row, "name") or "",
        importance=importance,
        last_contact_date=parse_date(_field(row, "last_contact_date", "last")),
        open_loop_count=open_loops,
        recency_days=recency_days,
        score=compute_priority_score(importance, recency_days, open_loops, weights),
    )


def rank_top_priorities(
    rows: Iterable[Any],
    today: Optional[date] = None,
    limit: int = DEFAULT_REVIEW_LIMIT,
    weights: Optional[PriorityWeights] = None,
) -> list[PriorityRow]:
    """
    Rank people by weekly review score, highest first.

    Ties keep their input order.

    Args:
        rows: Roster rows (mappings or objects)
        today: Reference day (defaults to the current local date)
        limit: Maximum rows returned
        weights: Score weights (defaults to config/priority_weights.py)

    Returns:
        Up to ``limit`` PriorityRows ordered by descending score
    """
    if today is None:
        today = date.today()
    weights = weights or DEFAULT_WEIGHTS

    scored = [score_row(row, today, weights) for row in rows]
    scored.sort(key=lambda r: r.score, reverse=True)
    return scored[:max(limit, 0)]
