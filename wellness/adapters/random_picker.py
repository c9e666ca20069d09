"""Random picker adapter — implements the RandomSource port."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class RandomPicker:
    """Uniform choice backed by random.Random (not for security use)."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def pick(self, candidates: Sequence[T]) -> T:
        if not candidates:
            raise ValueError("Cannot pick from an empty sequence")
        return self._rng.choice(candidates)
