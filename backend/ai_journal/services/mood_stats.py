"""
Mood Statistics
===============
Aggregates a window of journal entries into the numbers the timeline
header shows: how often each mood appeared, the dominant mood, the
average mood score, and a per-day score trend.

Pure functions over already-fetched entries. No database access here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ai_journal.models.entry import JournalEntry, Mood


@dataclass
class MoodStats:
    total_entries: int
    mood_counts: dict[Mood, int]
    dominant_mood: Optional[Mood]
    average_mood_score: Optional[float]
    daily_scores: list[tuple[date, float]] = field(default_factory=list)


def summarise_moods(entries: Iterable[JournalEntry]) -> MoodStats:
    """Summarise *entries* (any order).

    mood_counts always has every vocabulary member, zero-filled. A tie
    for dominant mood goes to the mood listed first in ``Mood``.
    """
    counts: dict[Mood, int] = {mood: 0 for mood in Mood}
    by_day: dict[date, list[float]] = {}
    scores: list[float] = []

    for entry in entries:
        counts[entry.mood] += 1
        scores.append(entry.mood_score)
        by_day.setdefault(entry.created_at.date(), []).append(entry.mood_score)

    total = len(scores)
    if total == 0:
        return MoodStats(
            total_entries=0,
            mood_counts=counts,
            dominant_mood=None,
            average_mood_score=None,
        )

    # max() returns the first maximal key, and dicts keep Mood's order
    dominant = max(counts, key=lambda mood: counts[mood])

    return MoodStats(
        total_entries=total,
        mood_counts=counts,
        dominant_mood=dominant,
        average_mood_score=round(sum(scores) / total, 3),
        daily_scores=[
            (day, round(sum(day_scores) / len(day_scores), 3))
            for day, day_scores in sorted(by_day.items())
        ],
    )
