"""
Wellness Affirmations — Data Models.

Affirmations and their categories are shared, read-only content managed by
admins. The only per-user state is UserAffirmationPreferences, which also
remembers which affirmation was shown on which day.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# language code → text, e.g. {"en": "I am calm", "es": "Estoy en calma"}
LocalizedContent = dict[str, str]


@dataclass
class AffirmationImage:
    """A wallpaper-style rendering of an affirmation for one language."""

    url: str
    width: int
    height: int
    aspect_ratio: str                 # "square" | "portrait" | "landscape"
    style: str | None = None


@dataclass
class AffirmationCategory:
    """A topic users can opt into, e.g. "mindfulness".

    The id is a slug derived from the category name at import time.
    """

    id: str
    name: LocalizedContent
    description: LocalizedContent | None = None
    enabled: bool = True
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Affirmation:
    """A single localized affirmation belonging to one category."""

    id: str
    text: LocalizedContent
    category: str                     # AffirmationCategory.id
    images: dict[str, list[AffirmationImage]] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    def image_urls(self) -> dict[str, str | None]:
        """First image URL per language, None where a language has no images."""
        return {
            lang: (imgs[0].url if imgs else None)
            for lang, imgs in self.images.items()
        }


@dataclass
class UserAffirmationPreferences:
    """Per-user category selection plus the last daily pick.

    last_affirmation_date and last_affirmation_id are always written together.
    """

    user_id: str
    selected_categories: list[str] = field(default_factory=list)
    last_affirmation_date: str | None = None    # ISO date YYYY-MM-DD
    last_affirmation_id: str | None = None
    updated_at: str = ""


@dataclass
class BulkImportRow:
    """One row of the admin CSV import file."""

    es: str
    en: str
    category: str
    category_translated: str
