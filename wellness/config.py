"""
Wellness Affirmations — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from wellness/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # SQLite document store
    DATABASE_PATH: str = "data/wellness.db"

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Language shown until a user picks one with /language
    DEFAULT_LANGUAGE: str = "en"

    # Seed for the affirmation picker (empty → nondeterministic)
    RANDOM_SEED: int | None = None

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("DEFAULT_LANGUAGE", mode="before")
    @classmethod
    def parse_language(cls, v: str) -> str:
        return (v or "en").strip().lower()

    @field_validator("RANDOM_SEED", mode="before")
    @classmethod
    def parse_seed(cls, v: str | int | None) -> int | None:
        if v is None or v == "":
            return None
        return int(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/wellness.db"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        DEFAULT_LANGUAGE=os.getenv("DEFAULT_LANGUAGE", "en"),
        RANDOM_SEED=os.getenv("RANDOM_SEED", ""),
    )


# Singleton — imported by all other modules as:
#   from wellness.config import settings
settings = _load_settings()
