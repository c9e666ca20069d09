"""Tests for the SQLite store adapter.

Happy paths run against a temp DB; failures use a mocked AffirmationDB.
"""

import asyncio
import sqlite3
import time
from unittest.mock import MagicMock

import pytest

from conftest import make_affirmation, make_category
from wellness.adapters.sqlite_store import SQLiteDocumentStore
from wellness.data.db import AffirmationDB
from wellness.ports.store_port import StoreUnavailable


class TestSQLiteDocumentStore:
    @pytest.mark.asyncio
    async def test_categories_round_trip(self, store):
        await store.put_categories([make_category("mindfulness"), make_category("health")])
        cats = await store.list_categories()
        assert [c.id for c in cats] == ["mindfulness", "health"]

    @pytest.mark.asyncio
    async def test_affirmations_by_category_and_id(self, store):
        await store.add_affirmations([
            make_affirmation("m1", "mindfulness"),
            make_affirmation("h1", "health"),
        ])
        found = await store.list_by_categories({"health"})
        assert [a.id for a in found] == ["h1"]
        assert (await store.get_by_id("m1")).category == "mindfulness"
        assert await store.get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_delete_affirmation(self, store):
        await store.add_affirmations([make_affirmation("m1", "mindfulness")])
        assert await store.delete_affirmation("m1") is True
        assert await store.get_by_id("m1") is None

    @pytest.mark.asyncio
    async def test_preferences_merge(self, store):
        await store.put("u1", {"selected_categories": ["a"]})
        await store.put("u1", {"last_affirmation_date": "2026-03-01", "last_affirmation_id": "x"})
        prefs = await store.get("u1")
        assert prefs.selected_categories == ["a"]
        assert prefs.last_affirmation_id == "x"

    @pytest.mark.asyncio
    async def test_preferences_replace(self, store):
        await store.put("u1", {"selected_categories": ["a"], "last_affirmation_id": "x"})
        await store.put("u1", {"selected_categories": ["b"]}, merge_on_create=False)
        prefs = await store.get("u1")
        assert prefs.selected_categories == ["b"]
        assert prefs.last_affirmation_id is None


class TestSQLiteDocumentStoreFailures:
    @pytest.mark.asyncio
    async def test_read_error_becomes_store_unavailable(self):
        db = MagicMock()
        db.list_categories.side_effect = sqlite3.OperationalError("database is locked")
        store = SQLiteDocumentStore(db=db)
        with pytest.raises(StoreUnavailable) as exc_info:
            await store.list_categories()
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    @pytest.mark.asyncio
    async def test_write_error_becomes_store_unavailable(self):
        db = MagicMock()
        db.put_preferences.side_effect = sqlite3.DatabaseError("disk I/O error")
        store = SQLiteDocumentStore(db=db)
        with pytest.raises(StoreUnavailable):
            await store.put("u1", {"selected_categories": []})

    @pytest.mark.asyncio
    async def test_non_sqlite_errors_propagate(self):
        db = MagicMock()
        db.put_preferences.side_effect = ValueError("Unknown preference fields")
        store = SQLiteDocumentStore(db=db)
        with pytest.raises(ValueError):
            await store.put("u1", {"bogus": 1})

    @pytest.mark.asyncio
    async def test_unreachable_db_file(self, tmp_path):
        db = AffirmationDB(db_path=str(tmp_path / "gone.db"))
        db._db_path = str(tmp_path / "missing-dir" / "gone.db")
        store = SQLiteDocumentStore(db=db)
        with pytest.raises(StoreUnavailable):
            await store.get("u1")


class _SlowConnection:
    """Connection wrapper that pauses before every statement."""

    def __init__(self, conn):
        self._conn = conn

    def execute(self, *args):
        time.sleep(0.02)
        return self._conn.execute(*args)

    def __enter__(self):
        self._conn.__enter__()
        return self

    def __exit__(self, *exc_info):
        return self._conn.__exit__(*exc_info)


class _SlowAffirmationDB(AffirmationDB):
    def _connect(self):
        return _SlowConnection(super()._connect())


class TestConcurrentPreferenceWrites:
    @pytest.mark.asyncio
    async def test_overlapping_partial_writes_keep_both_fields(self, tmp_db_path):
        store = SQLiteDocumentStore(db=_SlowAffirmationDB(db_path=tmp_db_path))
        await store.put("u1", {"selected_categories": ["a", "b"], "updated_at": "t0"})

        await asyncio.gather(
            store.put("u1", {
                "last_affirmation_date": "2026-03-01",
                "last_affirmation_id": "m1",
                "updated_at": "t1",
            }),
            store.put("u1", {"selected_categories": ["c"], "updated_at": "t2"}),
        )

        prefs = await store.get("u1")
        assert prefs.selected_categories == ["c"]
        assert prefs.last_affirmation_date == "2026-03-01"
        assert prefs.last_affirmation_id == "m1"
