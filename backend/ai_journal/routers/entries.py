"""
Journal Entries Router
======================
POST /api/v1/entries          — Write a journal entry (analyse + store)
GET  /api/v1/entries          — Timeline, newest first, with filters
PUT  /api/v1/entries/{id}     — Edit an entry (re-analyse + update)
POST /api/v1/entries/analyze  — Analyse text without storing it

Submission flow:

    1. Verify the bearer token, resolve the user id
    2. Reject blank text (422) before any analysis is attempted
    3. Analyse: Claude API → structured mood/summary/tags, or the
       keyword fallback if Claude is off, down, or talks nonsense
    4. Insert the entry with its analysis (one write)
    5. Return the stored entry

An edit runs the same analysis on the new text and replaces the stored
analysis wholesale, so mood, summary and tags always describe the text
they sit next to.

Analysis cannot fail the submission: the analyzer always produces a
result. Only a database failure turns a valid submission into a 500.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query, status

from ai_journal.auth import get_authenticated_user_id
from ai_journal.config import get_settings
from ai_journal.models.entry import (
    AnalysisResult,
    JournalEntry,
    JournalEntryCreate,
    JournalEntryList,
    Mood,
)
from ai_journal.services.entry_store import PersistenceError, get_entry_store
from ai_journal.services.mood_analyzer import InvalidInputError, get_mood_analyzer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/entries", tags=["entries"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _analyze_or_422(body: JournalEntryCreate) -> AnalysisResult:
    """Run the analyzer, mapping blank input to a 422."""
    try:
        return await get_mood_analyzer().analyze(body.text, body.title)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": str(exc), "code": "empty_entry"},
        ) from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=JournalEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Write a journal entry",
    description=(
        "Analyse the entry for mood, score, summary and tags, then store it. "
        "If the AI service is unavailable the keyword fallback is used; "
        "analysis_source tells the client which one ran."
    ),
    responses={
        201: {"description": "Entry created"},
        401: {"description": "Authentication required"},
        422: {"description": "Empty or invalid entry"},
        500: {"description": "Entry could not be saved"},
    },
)
async def create_entry(
    body: JournalEntryCreate,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> JournalEntry:
    user_id = get_authenticated_user_id(authorization)

    analysis = await _analyze_or_422(body)

    try:
        entry = get_entry_store().put(user_id, body.text.strip(), body.title, analysis)
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to save entry", "code": "db_error"},
        ) from exc

    logger.info(
        "Journal entry %s saved: %s (score %.2f, source %s)",
        entry.id,
        entry.mood.value,
        entry.mood_score,
        entry.analysis_source,
    )
    return entry


@router.get(
    "",
    response_model=JournalEntryList,
    status_code=status.HTTP_200_OK,
    summary="List journal entries",
    description="The caller's entries, newest first, optionally filtered by mood or tag.",
    responses={
        200: {"description": "Entries returned"},
        401: {"description": "Authentication required"},
    },
)
async def list_entries(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
    mood: Optional[Mood] = Query(default=None, description="Only entries with this mood."),
    tag: Optional[str] = Query(default=None, max_length=50, description="Only entries with this tag."),
    limit: Optional[int] = Query(default=None, ge=1, le=200),
) -> JournalEntryList:
    user_id = get_authenticated_user_id(authorization)

    entries = get_entry_store().list_entries(
        user_id,
        mood=mood,
        tag=tag.strip().lower() if tag else None,
        limit=limit or get_settings().entries_page_size,
    )
    return JournalEntryList(entries=entries, count=len(entries))


@router.put(
    "/{entry_id}",
    response_model=JournalEntry,
    status_code=status.HTTP_200_OK,
    summary="Edit a journal entry",
    description=(
        "Replace the entry's text and title. The new text is analysed again and "
        "the stored mood, score, summary and tags are replaced with the result."
    ),
    responses={
        200: {"description": "Entry updated"},
        401: {"description": "Authentication required"},
        404: {"description": "No such entry for this user"},
        422: {"description": "Empty or invalid entry"},
    },
)
async def update_entry(
    entry_id: uuid.UUID,
    body: JournalEntryCreate,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> JournalEntry:
    user_id = get_authenticated_user_id(authorization)

    analysis = await _analyze_or_422(body)

    entry = get_entry_store().update(
        user_id, str(entry_id), body.text.strip(), body.title, analysis
    )
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Journal entry not found", "code": "entry_not_found"},
        )

    logger.info(
        "Journal entry %s updated: %s (score %.2f, source %s)",
        entry.id,
        entry.mood.value,
        entry.mood_score,
        entry.analysis_source,
    )
    return entry


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    status_code=status.HTTP_200_OK,
    summary="Analyse text without saving",
    description="Preview the mood analysis for a draft. Nothing is stored.",
    responses={
        200: {"description": "Analysis returned"},
        401: {"description": "Authentication required"},
        422: {"description": "Empty or invalid entry"},
    },
)
async def analyze_entry(
    body: JournalEntryCreate,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> AnalysisResult:
    get_authenticated_user_id(authorization)
    return await _analyze_or_422(body)
