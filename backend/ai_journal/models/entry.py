"""
Journal Entry Schemas
=====================
Pydantic models for the journal API. These are the contract between
the web client, the mood-inference pipeline, and the entry store.

Key design decisions:
- Mood is a closed vocabulary so timeline colouring and the insights
  aggregation have a fixed set to switch on.
- AnalysisResult always carries mood, summary, score and tags. The
  pipeline never hands back a partially-filled result.
- ``source`` records which path produced the analysis (language model
  or keyword fallback) so the client can show provenance.
- ExternalAnalysis is deliberately forgiving about field names
  (moodScore/mood_score, tags/keywords) because it parses model output.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

MAX_TAGS = 5


class Mood(str, Enum):
    """Closed mood vocabulary. REFLECTIVE is the neutral default."""

    JOYFUL = "Joyful"
    FRUSTRATED = "Frustrated"
    NERVOUS = "Nervous"
    LONELY = "Lonely"
    PEACEFUL = "Peaceful"
    INSPIRED = "Inspired"
    REFLECTIVE = "Reflective"


AnalysisSource = Literal["external", "fallback"]


def clamp_score(value: float) -> float:
    """Clamp a mood score into [0, 1]."""
    return max(0.0, min(1.0, value))


# ---------------------------------------------------------------------------
# Pipeline output
# ---------------------------------------------------------------------------

class AnalysisResult(BaseModel):
    """Normalised output of the mood-inference pipeline."""

    mood: Mood
    summary: str = Field(..., min_length=1)
    mood_score: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="0.0 = most negative, 0.5 = neutral, 1.0 = most positive.",
    )
    tags: list[str] = Field(default_factory=list)
    source: AnalysisSource = Field(
        ...,
        description="'external' if the language model produced it, 'fallback' otherwise.",
    )

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("summary must not be blank")
        return value


class ExternalAnalysis(BaseModel):
    """The JSON object the language model is asked to return.

    mood is kept as free text here; mapping it onto ``Mood`` happens in
    the analyzer so an unknown label can trigger the fallback path.
    """

    mood: str
    summary: str
    mood_score: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("mood_score", "moodScore"),
    )
    tags: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("tags", "keywords"),
    )

    @field_validator("mood", "summary")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("mood_score")
    @classmethod
    def _normalise_score(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        # Some prompts produce a 0-100 scale
        if 1.0 < value <= 100.0:
            value = value / 100.0
        return clamp_score(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, list):
            return value  # let pydantic reject it

        cleaned: list[str] = []
        for tag in value:
            if not isinstance(tag, str):
                continue
            tag = tag.strip().lower()
            if tag and tag not in cleaned:
                cleaned.append(tag)
        return cleaned[:MAX_TAGS]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class JournalEntryCreate(BaseModel):
    """Payload the web client sends when the user saves an entry."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Free-text journal entry. Whitespace-only text is rejected.",
    )
    title: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Optional entry title. Counted alongside the text for scoring and tags.",
    )


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class JournalEntry(BaseModel):
    """A stored journal entry.

    Only its owner can edit it. An edit replaces the text and the whole
    analysis, and sets updated_at; created_at never changes.
    """

    id: str = Field(..., description="UUID assigned by the database.")
    owner_id: str
    title: Optional[str] = None
    raw_text: str
    mood: Mood
    mood_score: float = Field(..., ge=0.0, le=1.0)
    summary: str
    tags: list[str] = Field(default_factory=list)
    analysis_source: AnalysisSource
    created_at: datetime
    updated_at: Optional[datetime] = None


class JournalEntryList(BaseModel):
    """Timeline page, newest entry first."""

    entries: list[JournalEntry]
    count: int
