"""Store ports — abstract interfaces for the document store.

Core modules depend on these protocols, never on a specific backend.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from wellness.data.models import (
    Affirmation,
    AffirmationCategory,
    UserAffirmationPreferences,
)


class StoreUnavailable(Exception):
    """Raised when the backing store cannot be read or written."""


class CategoryStore(Protocol):
    """Read access to affirmation categories (writes only from bulk import)."""

    async def list_categories(self) -> list[AffirmationCategory]: ...

    async def put_categories(
        self, categories: Iterable[AffirmationCategory]
    ) -> None: ...


class AffirmationStore(Protocol):
    """Shared affirmation content."""

    async def list_by_categories(
        self, category_ids: Iterable[str]
    ) -> list[Affirmation]: ...

    async def get_by_id(self, affirmation_id: str) -> Affirmation | None: ...

    async def add_affirmations(
        self, affirmations: Iterable[Affirmation]
    ) -> None: ...

    async def delete_affirmation(self, affirmation_id: str) -> bool:
        """Remove an affirmation; admin tooling only.

        The engine never calls this. A user whose cached pick was deleted
        gets a fresh pick on their next daily request.
        """
        ...


class PreferencesStore(Protocol):
    """Per-user affirmation preferences, one record per user."""

    async def get(self, user_id: str) -> UserAffirmationPreferences | None: ...

    async def put(
        self,
        user_id: str,
        record: dict,
        merge_on_create: bool = True,
    ) -> UserAffirmationPreferences: ...
