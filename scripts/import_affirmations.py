"""
Bulk-import affirmations from a CSV file into the affirmation store.

Usage:
    python scripts/import_affirmations.py data/affirmations.csv [--db PATH]

The CSV needs the columns es, en, category and categoryTranslated.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from wellness.adapters.sqlite_store import SQLiteDocumentStore
from wellness.adapters.system_clock import SystemClock
from wellness.core.affirmation_import import (
    AffirmationImportError,
    import_rows,
    read_csv,
    validate_rows,
)

logger = logging.getLogger(__name__)


async def run(csv_path: str, db_path: str | None, dry_run: bool) -> int:
    rows = read_csv(csv_path)

    validation = validate_rows(rows)
    if not validation.valid:
        for error in validation.errors:
            print(f"❌ {error}", file=sys.stderr)
        return 1

    if dry_run:
        print(f"✅ {len(rows)} rows are valid (dry run, nothing written)")
        return 0

    store = SQLiteDocumentStore(db_path=db_path)
    try:
        result = await import_rows(rows, store, store, SystemClock())
    except AffirmationImportError as exc:
        print(f"❌ {exc}: {exc.__cause__}", file=sys.stderr)
        return 1

    print(
        f"✅ Imported {result.categories_count} categories and "
        f"{result.affirmations_count} affirmations"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Bulk-import affirmations from a CSV file."
    )
    parser.add_argument("csv_path", help="Path to the CSV file to import.")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="SQLite database path (defaults to DATABASE_PATH from .env).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing anything.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return asyncio.run(run(args.csv_path, args.db_path, args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
