"""
Entry Store
===========
Persistence for journal entries in the Supabase ``journal_entries`` table.

Entries are inserted, listed, and edited by their owner. An edit
rewrites the text and the whole analysis in one update; there is no
partial patch of analysis fields.

Table columns:
    id, user_id, title, content, mood, mood_score, summary, tags,
    analysis_source, created_at, updated_at

``id`` and ``created_at`` are assigned by the database on insert.
``updated_at`` is null until the first edit.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ai_journal.db.supabase import get_supabase_client
from ai_journal.models.entry import AnalysisResult, JournalEntry, Mood

logger = logging.getLogger(__name__)

TABLE = "journal_entries"

_COLUMNS = (
    "id, user_id, title, content, mood, mood_score, summary, tags, "
    "analysis_source, created_at, updated_at"
)


class PersistenceError(Exception):
    """The database did not confirm a write."""


def _row_to_entry(row: dict) -> JournalEntry:
    return JournalEntry(
        id=str(row["id"]),
        owner_id=str(row["user_id"]),
        title=row.get("title"),
        raw_text=row["content"],
        mood=Mood(row["mood"]),
        mood_score=float(row["mood_score"]),
        summary=row["summary"],
        tags=row.get("tags") or [],
        analysis_source=row.get("analysis_source") or "fallback",
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


class EntryStore:
    """Reads and writes journal entries for a single owner at a time."""

    def __init__(self) -> None:
        self._db = get_supabase_client()

    def put(
        self,
        owner_id: str,
        text: str,
        title: Optional[str],
        analysis: AnalysisResult,
    ) -> JournalEntry:
        """Insert a new entry and return it with its DB-assigned id/created_at.

        Raises PersistenceError if the insert returns no row.
        """
        insert_data: dict = {
            "user_id": owner_id,
            "title": title,
            "content": text,
            "mood": analysis.mood.value,
            "mood_score": analysis.mood_score,
            "summary": analysis.summary,
            "tags": analysis.tags,
            "analysis_source": analysis.source,
        }

        result = self._db.table(TABLE).insert(insert_data).execute()

        if not result.data:
            logger.error("Failed to insert journal entry for user %s", owner_id)
            raise PersistenceError("Insert returned no rows")

        return _row_to_entry(result.data[0])

    def update(
        self,
        owner_id: str,
        entry_id: str,
        text: str,
        title: Optional[str],
        analysis: AnalysisResult,
    ) -> Optional[JournalEntry]:
        """Replace an entry's text and analysis.

        Scoped by both id and owner, so another user's entry is never
        touched. Returns None when no row matched.
        """
        update_data: dict = {
            "title": title,
            "content": text,
            "mood": analysis.mood.value,
            "mood_score": analysis.mood_score,
            "summary": analysis.summary,
            "tags": analysis.tags,
            "analysis_source": analysis.source,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        result = (
            self._db.table(TABLE)
            .update(update_data)
            .eq("id", entry_id)
            .eq("user_id", owner_id)
            .execute()
        )

        if not result.data:
            return None

        return _row_to_entry(result.data[0])

    def list_entries(
        self,
        owner_id: str,
        mood: Optional[Mood] = None,
        tag: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
    ) -> list[JournalEntry]:
        """Entries for *owner_id*, newest first, with optional filters."""
        query = self._db.table(TABLE).select(_COLUMNS).eq("user_id", owner_id)

        if mood is not None:
            query = query.eq("mood", mood.value)
        if tag:
            query = query.contains("tags", [tag])
        if since is not None:
            query = query.gte("created_at", since.isoformat())

        result = query.order("created_at", desc=True).limit(limit).execute()

        return [_row_to_entry(row) for row in (result.data or [])]


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_store: EntryStore | None = None


def get_entry_store() -> EntryStore:
    global _default_store
    if _default_store is None:
        _default_store = EntryStore()
    return _default_store
