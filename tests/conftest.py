"""Shared test fixtures and configuration.

Sets up fake environment variables so wellness.config doesn't sys.exit(),
and provides common fixtures like a temp DB, a fixed clock and a
deterministic picker.
"""

import os

# Patch env vars BEFORE any wellness imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("DEFAULT_LANGUAGE", "en")

import pytest


class FakeClock:
    """Clock whose date only changes when a test advances it."""

    def __init__(self, today: str = "2026-03-01") -> None:
        self.current = today

    def today(self) -> str:
        return self.current

    def now(self) -> str:
        return f"{self.current}T08:00:00+00:00"

    def advance(self, days: int = 1) -> None:
        from datetime import date, timedelta

        self.current = (date.fromisoformat(self.current) + timedelta(days=days)).isoformat()


class IndexPicker:
    """Always picks candidates[index] and remembers what it was offered."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self.calls: list[list] = []

    def pick(self, candidates):
        self.calls.append(list(candidates))
        return candidates[self.index % len(candidates)]


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_wellness.db")


@pytest.fixture
def affirmation_db(tmp_db_path):
    """Return an AffirmationDB instance backed by a temp file."""
    from wellness.data.db import AffirmationDB
    return AffirmationDB(db_path=tmp_db_path)


@pytest.fixture
def store(affirmation_db):
    """Return the async SQLite store over the temp DB."""
    from wellness.adapters.sqlite_store import SQLiteDocumentStore
    return SQLiteDocumentStore(db=affirmation_db)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def picker():
    return IndexPicker()


@pytest.fixture
def engine(store, clock, picker):
    """Return a DailyAffirmationEngine wired to the temp store and fakes."""
    from wellness.core.affirmation_engine import DailyAffirmationEngine
    return DailyAffirmationEngine(
        categories=store,
        affirmations=store,
        preferences=store,
        clock=clock,
        picker=picker,
    )


def make_category(category_id, en=None, es=None):
    from wellness.data.models import AffirmationCategory

    name = {"en": en or category_id.title()}
    if es:
        name["es"] = es
    return AffirmationCategory(id=category_id, name=name)


def make_affirmation(affirmation_id, category, en=None, es=None, images=None):
    from wellness.data.models import Affirmation

    text = {"en": en or f"Affirmation {affirmation_id}"}
    if es:
        text["es"] = es
    return Affirmation(
        id=affirmation_id,
        text=text,
        category=category,
        images=images or {},
        created_at="2026-01-01T00:00:00+00:00",
    )
