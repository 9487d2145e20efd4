"""
Weekly review API endpoint.

Ranks the relationships that deserve focus this week by importance,
recency and open loops.
"""
from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Query

from api.services.weekly_review import build_weekly_review
from config.priority_weights import MAX_REVIEW_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["review"])


@router.get("/review")
async def get_weekly_review(
    limit: Optional[int] = Query(None, ge=1, le=MAX_REVIEW_LIMIT, description="Max people (default from settings)"),
    today: Optional[date] = Query(None, description="Reference day (defaults to today)"),
):
    """Get the top priorities for this week's review."""
    return build_weekly_review(today=today, limit=limit)
