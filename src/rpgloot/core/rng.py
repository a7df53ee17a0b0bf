"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random
from typing import Sequence, TypeVar

T_co = TypeVar("T_co")


class RNG:
    """Wrapper around random.Random that provides deterministic helpers.

    Every loot operation takes one of these explicitly. Instances are not
    shared between threads; concurrent callers should each own an RNG.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = Random(seed)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def uniform(self, a: float, b: float) -> float:
        """Return a random float N such that a <= N <= b."""
        return self._random.uniform(a, b)

    def choice(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)

    def weighted_choice(self, options: Sequence[T_co], weights: Sequence[float]) -> T_co:
        """Return one element of ``options`` drawn proportionally to ``weights``."""
        if not options or len(options) != len(weights):
            raise ValueError("Options and weights must be non-empty and of equal length.")
        total = sum(weights)
        if total <= 0:
            raise ValueError("At least one weight must be positive.")
        roll = self._random.random() * total
        cumulative = 0.0
        for option, weight in zip(options, weights):
            cumulative += weight
            if roll < cumulative:
                return option
        # Float rounding can leave roll == total; the last positive weight wins.
        for option, weight in zip(reversed(options), reversed(weights)):
            if weight > 0:
                return option
        raise ValueError("At least one weight must be positive.")
