"""
Insights Router
===============
GET /api/v1/insights/moods — Mood statistics over a trailing window.

Returns in one call, so the timeline header renders in a single
round-trip:

  mood_counts:         Entries per mood, every mood present (zero-filled).
  dominant_mood:       The most frequent mood, null with no entries.
  average_mood_score:  Mean 0-1 score across the window, null with no entries.
  mood_trend:          Array of {date, mood_score} daily averages, ascending.
                       Days without entries are omitted; the chart handles gaps.
  truncated:           The window held more entries than the cap; the
                       statistics cover only the newest ones.

Reads only mood, mood_score and created_at. Journal text never leaves
the entries endpoints.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Header, Query, status
from pydantic import BaseModel

from ai_journal.auth import get_authenticated_user_id
from ai_journal.models.entry import Mood
from ai_journal.services.entry_store import get_entry_store
from ai_journal.services.mood_stats import summarise_moods

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/insights", tags=["insights"])

# Upper bound on entries aggregated for one window. Older entries past the
# cap are left out and the response is flagged as truncated.
_MAX_WINDOW_ENTRIES = 1000


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class MoodTrendPoint(BaseModel):
    """A single day's average mood score."""
    date: date
    mood_score: float


class MoodInsightsResponse(BaseModel):
    """Aggregate mood statistics returned to the web client."""
    total_entries: int
    mood_counts: dict[Mood, int]
    dominant_mood: Optional[Mood]
    average_mood_score: Optional[float]
    mood_trend: list[MoodTrendPoint]
    window_start: date
    window_end: date
    truncated: bool = False  # True when the window held more than the cap


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.get(
    "/moods",
    response_model=MoodInsightsResponse,
    status_code=status.HTTP_200_OK,
    summary="Get mood statistics",
    description=(
        "Mood distribution, dominant mood, average score and daily trend for the "
        "last `days` days. All sections are empty for a new user."
    ),
    responses={
        200: {"description": "Mood insights returned"},
        401: {"description": "Authentication required"},
    },
)
async def get_mood_insights(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
    days: int = Query(default=30, ge=1, le=365),
) -> MoodInsightsResponse:
    user_id = get_authenticated_user_id(authorization)

    window_end = datetime.now(timezone.utc).date()
    window_start = window_end - timedelta(days=days - 1)  # inclusive window

    entries = get_entry_store().list_entries(
        user_id,
        since=datetime.combine(window_start, time.min, tzinfo=timezone.utc),
        limit=_MAX_WINDOW_ENTRIES + 1,
    )
    truncated = len(entries) > _MAX_WINDOW_ENTRIES
    if truncated:
        logger.warning(
            "Mood insights for user %s capped at %d entries over %d days",
            user_id,
            _MAX_WINDOW_ENTRIES,
            days,
        )
        entries = entries[:_MAX_WINDOW_ENTRIES]
    stats = summarise_moods(entries)

    return MoodInsightsResponse(
        total_entries=stats.total_entries,
        mood_counts=stats.mood_counts,
        dominant_mood=stats.dominant_mood,
        average_mood_score=stats.average_mood_score,
        mood_trend=[
            MoodTrendPoint(date=day, mood_score=score)
            for day, score in stats.daily_scores
        ],
        window_start=window_start,
        window_end=window_end,
        truncated=truncated,
    )
