"""
Tests for EntryStore
====================
Covers:
- put(): insert payload shape, row → JournalEntry mapping
- put(): empty insert result raises PersistenceError
- list_entries(): owner scoping, newest-first ordering, limit
- list_entries(): mood / tag / since filters only applied when given
- update(): scoped by id and owner, replaces text + analysis, sets updated_at
- update(): no matching row returns None
- Row mapping: null tags, missing analysis_source, updated_at

Run: pytest tests/test_entry_store.py -v
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from ai_journal.models.entry import AnalysisResult, Mood
from ai_journal.services.entry_store import TABLE, EntryStore, PersistenceError

_USER_ID = str(uuid.uuid4())


def _row(**overrides) -> dict:
    row = {
        "id": str(uuid.uuid4()),
        "user_id": _USER_ID,
        "title": None,
        "content": "Quiet morning with coffee",
        "mood": "Peaceful",
        "mood_score": 0.6,
        "summary": "Reflecting on moments of peace and tranquility.",
        "tags": [],
        "analysis_source": "fallback",
        "created_at": "2026-03-01T08:30:00+00:00",
    }
    row.update(overrides)
    return row


class _FakeQuery:
    """Chainable stand-in for a Supabase query builder.

    Records every call as (method, args, kwargs) and returns itself,
    so tests can assert on the exact query the store built.
    """

    def __init__(self, data: list[dict] | None) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self._data = data

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        def _record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return _record

    def execute(self) -> MagicMock:
        self.calls.append(("execute", (), {}))
        result = MagicMock()
        result.data = self._data
        return result

    def methods(self) -> list[str]:
        return [name for name, _, _ in self.calls]


def _store_with(query: _FakeQuery) -> tuple[EntryStore, MagicMock]:
    mock_db = MagicMock()
    mock_db.table.return_value = query
    with patch("ai_journal.services.entry_store.get_supabase_client", return_value=mock_db):
        store = EntryStore()
    return store, mock_db


_ANALYSIS = AnalysisResult(
    mood=Mood.JOYFUL,
    summary="Celebrating a new job.",
    mood_score=0.8,
    tags=["work"],
    source="external",
)


class TestPut:

    def test_inserts_full_payload(self):
        query = _FakeQuery([_row(mood="Joyful", mood_score=0.8, tags=["work"])])
        store, mock_db = _store_with(query)

        store.put(_USER_ID, "Got the job!", "Big news", _ANALYSIS)

        mock_db.table.assert_called_with(TABLE)
        name, args, _ = query.calls[0]
        assert name == "insert"
        assert args[0] == {
            "user_id": _USER_ID,
            "title": "Big news",
            "content": "Got the job!",
            "mood": "Joyful",
            "mood_score": 0.8,
            "summary": "Celebrating a new job.",
            "tags": ["work"],
            "analysis_source": "external",
        }

    def test_returns_stored_entry(self):
        row = _row(
            title="Big news",
            content="Got the job!",
            mood="Joyful",
            mood_score=0.8,
            summary="Celebrating a new job.",
            tags=["work"],
            analysis_source="external",
        )
        store, _ = _store_with(_FakeQuery([row]))

        entry = store.put(_USER_ID, "Got the job!", "Big news", _ANALYSIS)

        assert entry.id == row["id"]
        assert entry.owner_id == _USER_ID
        assert entry.raw_text == "Got the job!"
        assert entry.mood == Mood.JOYFUL
        assert entry.analysis_source == "external"
        assert entry.created_at == datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("data", [[], None])
    def test_empty_insert_raises(self, data):
        store, _ = _store_with(_FakeQuery(data))

        with pytest.raises(PersistenceError):
            store.put(_USER_ID, "Got the job!", None, _ANALYSIS)


class TestListEntries:

    def test_scoped_ordered_and_limited(self):
        query = _FakeQuery([_row(), _row()])
        store, _ = _store_with(query)

        entries = store.list_entries(_USER_ID, limit=20)

        assert len(entries) == 2
        assert query.methods() == ["select", "eq", "order", "limit", "execute"]
        assert ("eq", ("user_id", _USER_ID), {}) in query.calls
        assert ("order", ("created_at",), {"desc": True}) in query.calls
        assert ("limit", (20,), {}) in query.calls

    def test_mood_filter(self):
        query = _FakeQuery([])
        store, _ = _store_with(query)

        store.list_entries(_USER_ID, mood=Mood.NERVOUS)

        assert ("eq", ("mood", "Nervous"), {}) in query.calls

    def test_tag_filter(self):
        query = _FakeQuery([])
        store, _ = _store_with(query)

        store.list_entries(_USER_ID, tag="family")

        assert ("contains", ("tags", ["family"]), {}) in query.calls

    def test_since_filter(self):
        query = _FakeQuery([])
        store, _ = _store_with(query)
        since = datetime(2026, 2, 1, tzinfo=timezone.utc)

        store.list_entries(_USER_ID, since=since)

        assert ("gte", ("created_at", since.isoformat()), {}) in query.calls

    def test_no_rows(self):
        store, _ = _store_with(_FakeQuery(None))
        assert store.list_entries(_USER_ID) == []

    def test_null_tags_and_missing_source(self):
        row = _row(tags=None)
        del row["analysis_source"]
        store, _ = _store_with(_FakeQuery([row]))

        entry = store.list_entries(_USER_ID)[0]

        assert entry.tags == []
        assert entry.analysis_source == "fallback"

    def test_updated_at_mapped(self):
        row = _row(updated_at="2026-03-02T09:00:00+00:00")
        store, _ = _store_with(_FakeQuery([row]))

        entry = store.list_entries(_USER_ID)[0]

        assert entry.updated_at == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class TestUpdate:

    def test_scoped_to_entry_and_owner(self):
        entry_id = str(uuid.uuid4())
        query = _FakeQuery([_row(id=entry_id)])
        store, mock_db = _store_with(query)

        store.update(_USER_ID, entry_id, "Edited text", "New title", _ANALYSIS)

        mock_db.table.assert_called_with(TABLE)
        assert query.methods() == ["update", "eq", "eq", "execute"]
        assert ("eq", ("id", entry_id), {}) in query.calls
        assert ("eq", ("user_id", _USER_ID), {}) in query.calls

    def test_replaces_text_and_analysis(self):
        query = _FakeQuery([_row()])
        store, _ = _store_with(query)

        store.update(_USER_ID, str(uuid.uuid4()), "Edited text", "New title", _ANALYSIS)

        _, args, _ = query.calls[0]
        payload = args[0]
        assert payload["title"] == "New title"
        assert payload["content"] == "Edited text"
        assert payload["mood"] == "Joyful"
        assert payload["mood_score"] == 0.8
        assert payload["summary"] == "Celebrating a new job."
        assert payload["tags"] == ["work"]
        assert payload["analysis_source"] == "external"
        assert datetime.fromisoformat(payload["updated_at"]).tzinfo is not None
        assert "user_id" not in payload
        assert "created_at" not in payload

    def test_returns_updated_entry(self):
        entry_id = str(uuid.uuid4())
        row = _row(
            id=entry_id,
            content="Edited text",
            mood="Joyful",
            updated_at="2026-03-02T09:00:00+00:00",
        )
        store, _ = _store_with(_FakeQuery([row]))

        entry = store.update(_USER_ID, entry_id, "Edited text", None, _ANALYSIS)

        assert entry is not None
        assert entry.id == entry_id
        assert entry.raw_text == "Edited text"
        assert entry.created_at == datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
        assert entry.updated_at == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("data", [[], None])
    def test_no_matching_row_returns_none(self, data):
        store, _ = _store_with(_FakeQuery(data))

        assert store.update(_USER_ID, str(uuid.uuid4()), "Edited text", None, _ANALYSIS) is None
