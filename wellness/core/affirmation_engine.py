"""
Wellness Affirmations — Daily Affirmation Engine.

Picks one affirmation per user per day from the categories they opted into.
The pick is cached in the user's preferences record as a
(last_affirmation_date, last_affirmation_id) pair, so every call on the same
day returns the same affirmation. Rollover is detected lazily: the first call
on a new date makes a fresh pick, avoiding yesterday's affirmation whenever
another one is available.

The read-decide-write sequence is not transactional. Two concurrent calls for
the same user on a new day can both pick and both write; the last write wins.

This module is storage-agnostic: it depends on the store, clock and random
source protocols, not on specific implementations.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from wellness.data.models import Affirmation, AffirmationCategory, UserAffirmationPreferences

if TYPE_CHECKING:
    from wellness.ports.clock_port import Clock, RandomSource
    from wellness.ports.store_port import (
        AffirmationStore,
        CategoryStore,
        PreferencesStore,
    )

logger = logging.getLogger(__name__)


class EmptyReason(enum.Enum):
    """Why no affirmation could be shown. None of these are errors."""

    NO_CATEGORIES_EXIST = "no_categories_exist"
    NO_CATEGORIES_SELECTED = "no_categories_selected"
    NO_CANDIDATES = "no_candidates"


@dataclass
class DailyAffirmationResult:
    """Outcome of get_daily_affirmation: an affirmation or an empty-state reason."""

    affirmation: Affirmation | None = None
    reason: EmptyReason | None = None
    from_cache: bool = False

    def __bool__(self) -> bool:
        return self.affirmation is not None

    @classmethod
    def empty(cls, reason: EmptyReason) -> DailyAffirmationResult:
        return cls(affirmation=None, reason=reason)


class DailyAffirmationEngine:
    """Selects and remembers each user's affirmation of the day."""

    def __init__(
        self,
        categories: CategoryStore,
        affirmations: AffirmationStore,
        preferences: PreferencesStore,
        clock: Clock,
        picker: RandomSource,
    ) -> None:
        self._categories = categories
        self._affirmations = affirmations
        self._preferences = preferences
        self._clock = clock
        self._picker = picker

    async def list_categories(self) -> list[AffirmationCategory]:
        """Return every known category in store order."""
        return await self._categories.list_categories()

    async def load_preferences(
        self,
        user_id: str,
        categories: list[AffirmationCategory] | None = None,
    ) -> UserAffirmationPreferences:
        """Return the user's preferences, creating the record on first access.

        A new record selects every category that exists right now. Categories
        added later are not added to existing records.
        """
        _require_user_id(user_id)
        prefs = await self._preferences.get(user_id)
        if prefs is not None:
            return prefs

        if categories is None:
            categories = await self._categories.list_categories()
        prefs = await self._preferences.put(
            user_id, self._default_record(categories), merge_on_create=True,
        )
        logger.info(
            "Created affirmation preferences for user %s with %d categories",
            user_id, len(prefs.selected_categories),
        )
        return prefs

    def _default_record(self, categories: list[AffirmationCategory]) -> dict:
        return {
            "selected_categories": [c.id for c in categories],
            "updated_at": self._clock.now(),
        }

    async def get_daily_affirmation(self, user_id: str) -> DailyAffirmationResult:
        """Return today's affirmation for *user_id*.

        Empty states come back as a falsy result with a reason; only store
        failures raise (StoreUnavailable, propagated untouched).
        """
        _require_user_id(user_id)
        today = self._clock.today()

        categories = await self._categories.list_categories()

        # Read once. A missing record is created by whichever write this
        # call ends up making, so the record is also written at most once.
        pending: dict = {}
        prefs = await self._preferences.get(user_id)
        if prefs is None:
            pending = self._default_record(categories)
            prefs = UserAffirmationPreferences(user_id=user_id, **pending)

        if not prefs.selected_categories:
            if pending:
                await self._preferences.put(user_id, pending, merge_on_create=True)
            if not categories:
                return DailyAffirmationResult.empty(EmptyReason.NO_CATEGORIES_EXIST)
            return DailyAffirmationResult.empty(EmptyReason.NO_CATEGORIES_SELECTED)

        if prefs.last_affirmation_date == today and prefs.last_affirmation_id:
            cached = await self._affirmations.get_by_id(prefs.last_affirmation_id)
            if cached is not None:
                return DailyAffirmationResult(affirmation=cached, from_cache=True)
            logger.warning(
                "Cached affirmation %s for user %s no longer exists, picking a new one",
                prefs.last_affirmation_id, user_id,
            )

        eligible = await self._affirmations.list_by_categories(prefs.selected_categories)
        if not eligible:
            if pending:
                await self._preferences.put(user_id, pending, merge_on_create=True)
            logger.info(
                "No affirmations in categories %s for user %s",
                prefs.selected_categories, user_id,
            )
            return DailyAffirmationResult.empty(EmptyReason.NO_CANDIDATES)

        candidates = [a for a in eligible if a.id != prefs.last_affirmation_id]
        if not candidates:
            # Only the previous affirmation is eligible; allow the repeat
            candidates = eligible

        selected = self._picker.pick(candidates)

        await self._preferences.put(
            user_id,
            {
                **pending,
                "last_affirmation_date": today,
                "last_affirmation_id": selected.id,
                "updated_at": self._clock.now(),
            },
            merge_on_create=True,
        )
        logger.info(
            "Daily affirmation for user %s on %s: %s (%d candidates)",
            user_id, today, selected.id, len(candidates),
        )
        return DailyAffirmationResult(affirmation=selected)

    async def update_preferences(
        self, user_id: str, category_ids: list[str] | set[str] | tuple[str, ...],
    ) -> UserAffirmationPreferences:
        """Replace the user's selected categories wholesale.

        Does not pick a new affirmation; the next get_daily_affirmation call
        re-evaluates against the new selection.
        """
        _require_user_id(user_id)
        selected = list(dict.fromkeys(category_ids))
        prefs = await self._preferences.put(
            user_id,
            {"selected_categories": selected, "updated_at": self._clock.now()},
            merge_on_create=True,
        )
        logger.info("User %s selected %d affirmation categories", user_id, len(selected))
        return prefs

    async def toggle_category(self, user_id: str, category_id: str) -> list[str]:
        """Flip one category in or out of the user's selection."""
        prefs = await self.load_preferences(user_id)
        if category_id in prefs.selected_categories:
            selected = [c for c in prefs.selected_categories if c != category_id]
        else:
            selected = [*prefs.selected_categories, category_id]
        updated = await self.update_preferences(user_id, selected)
        return updated.selected_categories


def _require_user_id(user_id: str) -> None:
    if not user_id:
        raise ValueError("user_id must be a non-empty string")
