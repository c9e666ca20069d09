"""
Wellness Affirmations — Bulk CSV Import.

Admins load affirmations from a spreadsheet with one row per affirmation:

    es,en,category,categoryTranslated
    Estoy en calma,I am calm,Atención plena,Mindfulness

Categories are derived from the rows (deduplicated by slug) and written
first; affirmations follow in batches.
"""

from __future__ import annotations

import csv
import logging
import re
import unicodedata
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping

from wellness.data.models import Affirmation, AffirmationCategory, BulkImportRow
from wellness.ports.store_port import StoreUnavailable

if TYPE_CHECKING:
    from wellness.ports.clock_port import Clock
    from wellness.ports.store_port import AffirmationStore, CategoryStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("es", "en", "category", "categoryTranslated")
BATCH_SIZE = 500

_FIELD_LABELS = {
    "es": "Spanish text",
    "en": "English text",
    "category": "category",
    "categoryTranslated": "category translation",
}


class AffirmationImportError(Exception):
    """Raised when imported data could not be written to the store."""


@dataclass
class ImportValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    categories_count: int
    affirmations_count: int


def create_category_id(name: str) -> str:
    """Slugify a category name: "Atención Plena" → "atencion-plena"."""
    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"[^a-z0-9]+", "-", stripped).strip("-")


def validate_rows(rows: list[Mapping[str, str | None]]) -> ImportValidation:
    """Check the CSV shape and that every row has all four values."""
    errors: list[str] = []

    if not rows:
        return ImportValidation(valid=False, errors=["CSV file is empty"])

    first = rows[0]
    for column in REQUIRED_COLUMNS:
        if column not in first:
            errors.append(f"Missing required column: {column}")

    for index, row in enumerate(rows, start=1):
        for column in REQUIRED_COLUMNS:
            if not (row.get(column) or "").strip():
                errors.append(f"Row {index}: Missing {_FIELD_LABELS[column]}")

    return ImportValidation(valid=not errors, errors=errors)


def to_import_rows(rows: Iterable[Mapping[str, str | None]]) -> list[BulkImportRow]:
    return [
        BulkImportRow(
            es=(row.get("es") or "").strip(),
            en=(row.get("en") or "").strip(),
            category=(row.get("category") or "").strip(),
            category_translated=(row.get("categoryTranslated") or "").strip(),
        )
        for row in rows
    ]


def build_documents(
    rows: Iterable[BulkImportRow], timestamp: str,
) -> tuple[list[AffirmationCategory], list[Affirmation]]:
    """Turn import rows into category and affirmation documents."""
    categories: dict[str, AffirmationCategory] = {}
    affirmations: list[Affirmation] = []

    for row in rows:
        category_id = create_category_id(row.category)
        if category_id not in categories:
            categories[category_id] = AffirmationCategory(
                id=category_id,
                name={"es": row.category, "en": row.category_translated},
                enabled=True,
                created_at=timestamp,
                updated_at=timestamp,
            )

        affirmations.append(
            Affirmation(
                id=uuid.uuid4().hex,
                text={"es": row.es, "en": row.en},
                category=category_id,
                images={"en": [], "es": []},
                created_at=timestamp,
                updated_at=timestamp,
            )
        )

    return list(categories.values()), affirmations


async def import_rows(
    rows: list[Mapping[str, str | None]],
    categories: CategoryStore,
    affirmations: AffirmationStore,
    clock: Clock,
) -> ImportResult:
    """Validate and write rows. Raises ValueError listing every problem found."""
    validation = validate_rows(rows)
    if not validation.valid:
        raise ValueError("Invalid import data:\n" + "\n".join(validation.errors))

    category_docs, affirmation_docs = build_documents(to_import_rows(rows), clock.now())

    try:
        await categories.put_categories(category_docs)
        logger.info("Imported %d categories", len(category_docs))

        for start in range(0, len(affirmation_docs), BATCH_SIZE):
            chunk = affirmation_docs[start:start + BATCH_SIZE]
            await affirmations.add_affirmations(chunk)
            logger.info(
                "Imported affirmations %d to %d", start + 1, start + len(chunk),
            )
    except StoreUnavailable as exc:
        logger.error("Import failed: %s", exc)
        raise AffirmationImportError("Failed to import data") from exc

    return ImportResult(
        categories_count=len(category_docs),
        affirmations_count=len(affirmation_docs),
    )


def read_csv(path: str | Path) -> list[dict[str, str]]:
    """Load a UTF-8 CSV file (BOM tolerated) as a list of row dicts."""
    with open(path, newline="", encoding="utf-8-sig") as fh:
        return list(csv.DictReader(fh))
