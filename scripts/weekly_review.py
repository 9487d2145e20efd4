#!/usr/bin/env python3
"""
Print the weekly review from the local database.

Shows the people who deserve focus this week, and optionally everyone whose
next contact is overdue.

Usage:
    python -m scripts.weekly_review
    python -m scripts.weekly_review --limit 10 --today 2024-03-01 --overdue
"""
import logging
from datetime import date
from typing import Optional

from api.services.people_directory import list_people
from api.services.weekly_review import build_weekly_review

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def format_review_lines(review: dict) -> list[str]:
    """Render weekly review items as one line per person."""
    if not review["items"]:
        return ["No people to review yet."]

    lines = [f"Top priorities for {review['today']} ({review['total_people']} people tracked):"]
    for rank, item in enumerate(review["items"], start=1):
        lines.append(
            f"{rank}. {item['name']} (score {item['score']:g}) - "
            f"{item['last_contact_label']} • {item['open_loops_label']} • {item['recency_label']}"
        )
    return lines


def run(today: Optional[date] = None, limit: Optional[int] = None, show_overdue: bool = False) -> dict:
    """
    Build and log the weekly review.

    Returns:
        The review dict
    """
    review = build_weekly_review(today=today, limit=limit)
    for line in format_review_lines(review):
        logger.info(line)

    if show_overdue:
        overdue = list_people(today=today, sort="overdue", overdue_only=True)
        logger.info(f"\n=== Overdue ({len(overdue)}) ===")
        for entry in overdue:
            logger.info(f"{entry.person.name}: {entry.metrics.next_contact_label}")

    return review


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Print the weekly relationship review')
    parser.add_argument('--limit', type=int, default=None, help='Number of people to show')
    parser.add_argument('--today', type=date.fromisoformat, default=None, help='Reference day (YYYY-MM-DD)')
    parser.add_argument('--overdue', action='store_true', help='Also list overdue people')
    args = parser.parse_args()

    run(today=args.today, limit=args.limit, show_overdue=args.overdue)
