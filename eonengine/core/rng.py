"""
Deterministic pseudo-random source.

Every probabilistic decision in the game (loot, capture, enhancement,
quest rerolls) draws from an RNG instance injected by the composition
root. Two instances constructed with the same seed produce identical
streams for identical call sequences.
"""

from __future__ import annotations

import time
from typing import Sequence, TypeVar

T = TypeVar('T')

# Numerical Recipes LCG constants
_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 2 ** 32

DEFAULT_SEED = 12345


class RNG:
    """
    Linear congruential generator.

    Usage:
        rng = RNG(12345)
        rng.next()          # float in [0, 1)
        rng.range(5, 15)    # inclusive integer
        rng.chance(0.3)     # True with probability 0.3
        rng.pick(["a", "b"])
    """

    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = int(time.time() * 1000)
        self._seed = seed % _MODULUS

    @property
    def seed(self) -> int:
        """Current internal state."""
        return self._seed

    def next(self) -> float:
        """Advance the generator and return a float in [0, 1)."""
        self._seed = (self._seed * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self._seed / _MODULUS

    def range(self, minimum: int, maximum: int) -> int:
        """Return an integer in [minimum, maximum]."""
        return int(self.next() * (maximum - minimum + 1)) + minimum

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self.next() < probability

    def pick(self, items: Sequence[T]) -> T:
        """
        Pick a uniformly random element.

        Raises:
            IndexError: if items is empty (callers must guard)
        """
        if not items:
            raise IndexError("Cannot pick from an empty sequence")
        return items[int(self.next() * len(items))]
