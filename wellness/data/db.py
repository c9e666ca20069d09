"""
Wellness Affirmations — Document Database.

SQLite stand-in for a hosted document store. Localized fields are kept as
JSON text so each row reads back as the same document that was written.
All methods are synchronous; the async store adapter runs them in a thread.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import asdict, fields
from pathlib import Path
from typing import Iterable

from wellness.data.models import (
    Affirmation,
    AffirmationCategory,
    AffirmationImage,
    UserAffirmationPreferences,
)

logger = logging.getLogger(__name__)

# Max ids per IN (...) query
IN_QUERY_CHUNK = 30

_PREFERENCE_FIELDS = {f.name for f in fields(UserAffirmationPreferences)}


class AffirmationDB:
    """SQLite-backed storage for categories, affirmations and preferences."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from wellness.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS affirmation_categories (
                    id           TEXT PRIMARY KEY,
                    name         TEXT NOT NULL,
                    description  TEXT,
                    enabled      INTEGER NOT NULL DEFAULT 1,
                    created_at   TEXT NOT NULL DEFAULT '',
                    updated_at   TEXT NOT NULL DEFAULT '',
                    position     INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS affirmations (
                    id          TEXT PRIMARY KEY,
                    text        TEXT NOT NULL,
                    category    TEXT NOT NULL,
                    images      TEXT NOT NULL DEFAULT '{}',
                    created_at  TEXT NOT NULL DEFAULT '',
                    updated_at  TEXT NOT NULL DEFAULT ''
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_affirmations_category "
                "ON affirmations (category)"
            )
            conn.execute("""
                CREATE TABLE IF NOT EXISTS affirmation_preferences (
                    user_id               TEXT PRIMARY KEY,
                    selected_categories   TEXT NOT NULL DEFAULT '[]',
                    last_affirmation_date TEXT,
                    last_affirmation_id   TEXT,
                    updated_at            TEXT NOT NULL DEFAULT ''
                )
            """)
        logger.debug("Affirmation tables initialized at %s", self._db_path)

    # -- row mapping -------------------------------------------------------

    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> AffirmationCategory:
        description = row["description"]
        return AffirmationCategory(
            id=row["id"],
            name=json.loads(row["name"]),
            description=json.loads(description) if description else None,
            enabled=bool(row["enabled"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_affirmation(row: sqlite3.Row) -> Affirmation:
        raw_images = json.loads(row["images"] or "{}")
        images = {
            lang: [AffirmationImage(**img) for img in imgs]
            for lang, imgs in raw_images.items()
        }
        return Affirmation(
            id=row["id"],
            text=json.loads(row["text"]),
            category=row["category"],
            images=images,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_preferences(row: sqlite3.Row) -> UserAffirmationPreferences:
        return UserAffirmationPreferences(
            user_id=row["user_id"],
            selected_categories=json.loads(row["selected_categories"]),
            last_affirmation_date=row["last_affirmation_date"],
            last_affirmation_id=row["last_affirmation_id"],
            updated_at=row["updated_at"],
        )

    # -- categories --------------------------------------------------------

    def list_categories(self) -> list[AffirmationCategory]:
        """Return all categories in insertion order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM affirmation_categories ORDER BY position, id"
            ).fetchall()
        return [self._row_to_category(r) for r in rows]

    def put_categories(self, categories: Iterable[AffirmationCategory]) -> int:
        """Insert or overwrite categories by id. Returns the number written."""
        count = 0
        with self._connect() as conn:
            next_pos = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM affirmation_categories"
            ).fetchone()[0]
            for category in categories:
                existing = conn.execute(
                    "SELECT position FROM affirmation_categories WHERE id = ?",
                    (category.id,),
                ).fetchone()
                if existing is not None:
                    position = existing["position"]
                else:
                    position = next_pos
                    next_pos += 1
                conn.execute(
                    """
                    INSERT OR REPLACE INTO affirmation_categories
                        (id, name, description, enabled, created_at, updated_at, position)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        category.id,
                        json.dumps(category.name, ensure_ascii=False),
                        json.dumps(category.description, ensure_ascii=False)
                        if category.description else None,
                        int(category.enabled),
                        category.created_at,
                        category.updated_at,
                        position,
                    ),
                )
                count += 1
        logger.info("Wrote %d affirmation categories", count)
        return count

    # -- affirmations ------------------------------------------------------

    def list_by_categories(self, category_ids: Iterable[str]) -> list[Affirmation]:
        """Return affirmations whose category is in category_ids."""
        ids = list(dict.fromkeys(category_ids))
        if not ids:
            return []

        results: list[Affirmation] = []
        with self._connect() as conn:
            for start in range(0, len(ids), IN_QUERY_CHUNK):
                chunk = ids[start:start + IN_QUERY_CHUNK]
                placeholders = ", ".join("?" for _ in chunk)
                rows = conn.execute(
                    f"SELECT * FROM affirmations WHERE category IN ({placeholders}) "
                    "ORDER BY created_at, id",
                    chunk,
                ).fetchall()
                results.extend(self._row_to_affirmation(r) for r in rows)
        return results

    def get_affirmation(self, affirmation_id: str) -> Affirmation | None:
        """Fetch a single affirmation by ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM affirmations WHERE id = ?", (affirmation_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_affirmation(row)

    def add_affirmations(self, affirmations: Iterable[Affirmation]) -> int:
        """Insert affirmations in a single transaction. Returns the number written."""
        count = 0
        with self._connect() as conn:
            for affirmation in affirmations:
                images = {
                    lang: [asdict(img) for img in imgs]
                    for lang, imgs in affirmation.images.items()
                }
                conn.execute(
                    """
                    INSERT OR REPLACE INTO affirmations
                        (id, text, category, images, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        affirmation.id,
                        json.dumps(affirmation.text, ensure_ascii=False),
                        affirmation.category,
                        json.dumps(images, ensure_ascii=False),
                        affirmation.created_at,
                        affirmation.updated_at,
                    ),
                )
                count += 1
        logger.debug("Wrote %d affirmations", count)
        return count

    def delete_affirmation(self, affirmation_id: str) -> bool:
        """Permanently delete an affirmation by ID."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM affirmations WHERE id = ?", (affirmation_id,),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Affirmation %s deleted", affirmation_id)
        return deleted

    # -- preferences -------------------------------------------------------

    def get_preferences(self, user_id: str) -> UserAffirmationPreferences | None:
        """Fetch a user's preferences record."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM affirmation_preferences WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_preferences(row)

    def put_preferences(
        self, user_id: str, record: dict, merge: bool = True,
    ) -> UserAffirmationPreferences:
        """Write a preferences record in one statement.

        With merge=True only the columns named in *record* are written, as an
        upsert, so concurrent partial writes touching different fields don't
        overwrite each other. With merge=False the record replaces the stored
        one wholesale and missing fields fall back to their defaults.
        """
        unknown = set(record) - _PREFERENCE_FIELDS
        if unknown:
            raise ValueError(f"Unknown preference fields: {sorted(unknown)}")

        if merge:
            values = {k: v for k, v in record.items() if k != "user_id"}
        else:
            values = asdict(UserAffirmationPreferences(user_id=user_id))
            values.update(record)
            values.pop("user_id")
        if "selected_categories" in values:
            values["selected_categories"] = json.dumps(list(values["selected_categories"]))

        columns = ["user_id", *values]
        placeholders = ", ".join("?" for _ in columns)
        if not merge:
            sql = (
                f"INSERT OR REPLACE INTO affirmation_preferences ({', '.join(columns)}) "
                f"VALUES ({placeholders})"
            )
        elif values:
            updates = ", ".join(f"{col} = excluded.{col}" for col in values)
            sql = (
                f"INSERT INTO affirmation_preferences ({', '.join(columns)}) "
                f"VALUES ({placeholders}) "
                f"ON CONFLICT(user_id) DO UPDATE SET {updates}"
            )
        else:
            sql = (
                "INSERT INTO affirmation_preferences (user_id) VALUES (?) "
                "ON CONFLICT(user_id) DO NOTHING"
            )

        with self._connect() as conn:
            conn.execute(sql, (user_id, *values.values()))
            row = conn.execute(
                "SELECT * FROM affirmation_preferences WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        logger.debug("Preferences written for user %s", user_id)
        return self._row_to_preferences(row)
