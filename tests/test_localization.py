"""Tests for wellness.core.localization — language fallback chain."""

import pytest

from wellness.core.localization import (
    Localized,
    PlainText,
    normalize,
    normalize_language,
    resolve,
    resolve_url,
)


class TestResolve:
    def test_requested_language(self):
        assert resolve({"en": "Hello", "es": "Hola"}, "es") == "Hola"

    def test_falls_back_to_english(self):
        assert resolve({"en": "Hello"}, "es") == "Hello"

    def test_falls_back_to_first_available(self):
        assert resolve({"es": "Hola"}, "fr") == "Hola"

    def test_first_available_uses_insertion_order(self):
        assert resolve({"de": "Hallo", "es": "Hola"}, "fr") == "Hallo"

    def test_empty_requested_value_is_skipped(self):
        assert resolve({"es": "", "en": "Hello"}, "es") == "Hello"

    def test_empty_mapping(self):
        assert resolve({}, "en") == ""

    def test_none(self):
        assert resolve(None, "en") == ""

    def test_plain_string_unchanged(self):
        assert resolve("Plain", "es") == "Plain"

    def test_accepts_tagged_variants(self):
        assert resolve(PlainText("Plain"), "es") == "Plain"
        assert resolve(Localized({"en": "Hello"}), "es") == "Hello"

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            resolve(42, "en")


class TestResolveUrl:
    def test_requested_language(self):
        urls = {"en": "https://x/en.jpg", "es": "https://x/es.jpg"}
        assert resolve_url(urls, "es") == "https://x/es.jpg"

    def test_falls_back_to_english(self):
        assert resolve_url({"en": "https://x/en.jpg"}, "es") == "https://x/en.jpg"

    def test_skips_missing_values(self):
        assert resolve_url({"de": None, "fr": "https://x/fr.jpg"}, "es") == "https://x/fr.jpg"

    def test_nothing_resolves_returns_none(self):
        assert resolve_url({"en": None, "es": None}, "es") is None
        assert resolve_url({}, "es") is None
        assert resolve_url(None, "es") is None


class TestNormalize:
    def test_string_becomes_plain_text(self):
        assert normalize("x") == PlainText("x")

    def test_mapping_becomes_localized(self):
        assert normalize({"en": "x"}) == Localized({"en": "x"})

    def test_none_becomes_empty_localized(self):
        assert normalize(None) == Localized({})

    def test_variants_pass_through(self):
        value = PlainText("x")
        assert normalize(value) is value


class TestNormalizeLanguage:
    def test_region_is_dropped(self):
        assert normalize_language("es-MX") == "es"
        assert normalize_language("pt_BR") == "pt"

    def test_case_and_whitespace(self):
        assert normalize_language(" EN ") == "en"

    def test_empty_uses_default(self):
        assert normalize_language("") == "en"
        assert normalize_language(None, default="es") == "es"
