"""
Weekly review service.

Builds the weekly review from stored people, interactions and commitments:
every person gets an importance, last contact date and open-loop count,
and the priority ranker picks the ones that deserve focus this week.
"""
import logging
from datetime import date
from typing import Optional

from api.services.commitments import get_commitment_store
from api.services.contact_dates import (
    format_last_contact,
    format_open_loops,
    format_recency,
)
from api.services.interaction_store import get_interaction_store
from api.services.person_store import get_person_store
from api.services.priority_ranker import PriorityRow, PriorityWeights, rank_top_priorities
from config.settings import settings

logger = logging.getLogger(__name__)


def get_review_roster(today: date, lookahead_days: Optional[int] = None) -> list[dict]:
    """
    Collect the ranking input for every person.

    Args:
        today: Reference day for the open-loop window
        lookahead_days: Open-loop window (default from settings)

    Returns:
        List of dicts with id, name, importance, last_contact_date, open_loop_count
    """
    if lookahead_days is None:
        lookahead_days = settings.open_loop_lookahead_days

    people = get_person_store().get_all()
    last_dates = get_interaction_store().get_last_dates()
    open_loops = get_commitment_store().count_open_loops(today, lookahead_days)

    return [
        {
            "id": person.id,
            "name": person.name,
            "importance": person.importance,
            "last_contact_date": last_dates.get(person.id),
            "open_loop_count": open_loops.get(person.id, 0),
        }
        for person in people
    ]


def review_item(row: PriorityRow) -> dict:
    """PriorityRow plus the display labels shown in the review list."""
    return {
        **row.to_dict(),
        "last_contact_label": format_last_contact(row.last_contact_date),
        "open_loops_label": format_open_loops(row.open_loop_count),
        "recency_label": format_recency(row.recency_days),
    }


def build_weekly_review(
    today: Optional[date] = None,
    limit: Optional[int] = None,
    weights: Optional[PriorityWeights] = None,
) -> dict:
    """
    Build the weekly review.

    Args:
        today: Reference day (defaults to the current local date)
        limit: Max people returned (default from settings)
        weights: Score weights (default from config/priority_weights.py)

    Returns:
        Dict with the review date, total people considered and ranked items
    """
    if today is None:
        today = date.today()
    if limit is None:
        limit = settings.review_limit

    roster = get_review_roster(today)
    ranked = rank_top_priorities(roster, today=today, limit=limit, weights=weights)

    logger.info(f"Weekly review for {today.isoformat()}: {len(ranked)} of {len(roster)} people")
    return {
        "today": today.isoformat(),
        "total_people": len(roster),
        "items": [review_item(row) for row in ranked],
    }
