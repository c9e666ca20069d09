"""Clock and randomness ports — injected so daily rotation is testable."""

from __future__ import annotations

from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class Clock(Protocol):
    """Source of the current calendar date and timestamp."""

    def today(self) -> str: ...

    def now(self) -> str: ...


class RandomSource(Protocol):
    """Picks one element uniformly from a non-empty sequence."""

    def pick(self, candidates: Sequence[T]) -> T: ...
