"""System clock adapter — implements the Clock port."""

from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock time in UTC.

    today() is the UTC calendar date, so a user's daily rollover happens at
    UTC midnight rather than local midnight.
    """

    def today(self) -> str:
        return datetime.now(timezone.utc).date().isoformat()

    def now(self) -> str:
        return datetime.now(timezone.utc).isoformat()
