"""
Wellness Affirmations — Localization Resolver.

Turns a localized value into the single string (or URL) to show for the
active language. Fallback order: requested language → English → first
available entry. Every display path (daily affirmation, category list)
goes through resolve(), so the fallback chain lives only here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Union

FALLBACK_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "es")


@dataclass(frozen=True)
class PlainText:
    """Content stored as a bare string, identical in every language."""

    text: str


@dataclass(frozen=True)
class Localized:
    """Content stored per language code."""

    values: Mapping[str, str] = field(default_factory=dict)


LocalizedText = Union[PlainText, Localized]


def normalize(raw: object) -> LocalizedText:
    """Coerce whatever the store returned into PlainText or Localized.

    Upstream data is not always normalized: older records carry a bare
    string where a language mapping is expected, and missing fields come
    back as None.
    """
    if isinstance(raw, (PlainText, Localized)):
        return raw
    if raw is None:
        return Localized({})
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, Mapping):
        return Localized(dict(raw))
    raise TypeError(f"Cannot localize value of type {type(raw).__name__}")


def _pick(values: Mapping[str, str | None], language: str) -> str | None:
    """Requested language, then English; None when neither has a value."""
    preferred = values.get(language)
    if preferred:
        return preferred
    fallback = values.get(FALLBACK_LANGUAGE)
    if fallback:
        return fallback
    return None


def resolve(content: object, language: str) -> str:
    """Return the text to display for *language*. Never raises for missing data.

    >>> resolve({"en": "Hello"}, "es")
    'Hello'
    >>> resolve({"es": "Hola"}, "fr")
    'Hola'
    >>> resolve({}, "en")
    ''
    >>> resolve("Plain", "es")
    'Plain'
    """
    value = normalize(content)
    if isinstance(value, PlainText):
        return value.text
    picked = _pick(value.values, language)
    if picked is not None:
        return picked
    # Last resort: first entry in insertion order
    first = next(iter(value.values.values()), None)
    return first or ""


def resolve_url(
    urls: Mapping[str, str | None] | None, language: str
) -> str | None:
    """Like resolve(), but None when no URL exists so callers show a placeholder."""
    if not urls:
        return None
    picked = _pick(urls, language)
    if picked is not None:
        return picked
    return next((url for url in urls.values() if url is not None), None)


def normalize_language(code: str | None, default: str = FALLBACK_LANGUAGE) -> str:
    """Reduce a locale tag such as "es-MX" to its language code."""
    if not code:
        return default
    return code.strip().lower().replace("_", "-").split("-")[0] or default
