"""SQLite store adapter — implements the category, affirmation and
preferences store ports on top of AffirmationDB.

AffirmationDB is synchronous, so every call is wrapped with
asyncio.to_thread to keep the bot's event loop free. Any sqlite3 failure
is re-raised as StoreUnavailable; retries are left to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, Callable, Iterable, TypeVar

from wellness.data.db import AffirmationDB
from wellness.data.models import (
    Affirmation,
    AffirmationCategory,
    UserAffirmationPreferences,
)
from wellness.ports.store_port import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteDocumentStore:
    """SQLite implementation of CategoryStore, AffirmationStore and PreferencesStore."""

    def __init__(self, db: AffirmationDB | None = None, db_path: str | None = None) -> None:
        self._db = db if db is not None else AffirmationDB(db_path=db_path)

    async def _run(self, op: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except sqlite3.Error as exc:
            logger.error("SQLite store error during %s: %s", op, exc)
            raise StoreUnavailable(f"Failed to {op}: {exc}") from exc

    # CategoryStore

    async def list_categories(self) -> list[AffirmationCategory]:
        return await self._run("list categories", self._db.list_categories)

    async def put_categories(self, categories: Iterable[AffirmationCategory]) -> None:
        await self._run("write categories", self._db.put_categories, list(categories))

    # AffirmationStore

    async def list_by_categories(self, category_ids: Iterable[str]) -> list[Affirmation]:
        return await self._run(
            "list affirmations", self._db.list_by_categories, list(category_ids),
        )

    async def get_by_id(self, affirmation_id: str) -> Affirmation | None:
        return await self._run(
            "fetch affirmation", self._db.get_affirmation, affirmation_id,
        )

    async def add_affirmations(self, affirmations: Iterable[Affirmation]) -> None:
        await self._run(
            "write affirmations", self._db.add_affirmations, list(affirmations),
        )

    async def delete_affirmation(self, affirmation_id: str) -> bool:
        return await self._run(
            "delete affirmation", self._db.delete_affirmation, affirmation_id,
        )

    # PreferencesStore

    async def get(self, user_id: str) -> UserAffirmationPreferences | None:
        return await self._run("load preferences", self._db.get_preferences, user_id)

    async def put(
        self,
        user_id: str,
        record: dict,
        merge_on_create: bool = True,
    ) -> UserAffirmationPreferences:
        return await self._run(
            "save preferences",
            self._db.put_preferences,
            user_id,
            record,
            merge=merge_on_create,
        )
