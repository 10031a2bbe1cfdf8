"""Seeded pseudo-random source shared by the simulator and optimizer.

Mulberry32 over the low 32 bits of the seed. It is small, fast, and the
same seed always yields the same games on every platform, which makes
fixed-seed regression runs reproducible.
"""

from __future__ import annotations

from collections.abc import MutableSequence
from typing import TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


class GameRng:
    """Deterministic random number generator."""

    __slots__ = ("_state", "seed")

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._state = seed & _MASK32

    def next_u32(self) -> int:
        """Next raw 32-bit output."""
        self._state = (self._state + _INCREMENT) & _MASK32
        t = self._state
        t = ((t ^ (t >> 15)) * (t | 1)) & _MASK32
        t ^= (t + (((t ^ (t >> 7)) * (t | 61)) & _MASK32)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self.next_u32() / _TWO_POW_32

    def random_range(self, upper: int) -> int:
        """Uniform int in [0, upper)."""
        if upper <= 0:
            raise ValueError(f"upper must be positive, got {upper}")
        return int(self.random() * upper)

    def randint(self, low: int, high: int) -> int:
        """Uniform int in [low, high] inclusive."""
        return low + self.random_range(high - low + 1)

    def choice(self, items: list[T]) -> T:
        return items[self.random_range(len(items))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place; every permutation equally likely."""
        for i in range(len(items) - 1, 0, -1):
            j = self.random_range(i + 1)
            items[i], items[j] = items[j], items[i]
