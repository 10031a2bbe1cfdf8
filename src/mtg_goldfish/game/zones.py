"""Zones a single game mutates: library, hand, battlefield, graveyard."""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from mtg_goldfish.data.models.card import Card, LandCard
from mtg_goldfish.rng import GameRng


class CounterType(str, Enum):
    """Counters tracked on permanents."""

    TIME = "time"
    LORE = "lore"


@dataclass(eq=False)
class Permanent:
    """A card on the battlefield with its tapped status and counters.

    Compared by identity: two untapped copies of a land are still two
    permanents.
    """

    card: Card
    tapped: bool = False
    turn_entered: int = 0
    counters: Counter[CounterType] = field(default_factory=Counter)

    @property
    def is_land(self) -> bool:
        return isinstance(self.card, LandCard)

    def add_counters(self, kind: CounterType, amount: int = 1) -> int:
        self.counters[kind] += amount
        return self.counters[kind]

    def remove_counter(self, kind: CounterType) -> int:
        """Remove one counter of ``kind`` if present; returns what is left."""
        if self.counters[kind] > 0:
            self.counters[kind] -= 1
        return self.counters[kind]


class Library:
    """Ordered library; index 0 is the top."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: deque[Card] = deque(cards)

    def shuffle(self, rng: GameRng) -> None:
        cards = list(self._cards)
        rng.shuffle(cards)
        self._cards = deque(cards)

    def draw(self) -> Card | None:
        """Remove and return the top card, or None when empty."""
        return self._cards.popleft() if self._cards else None

    def take(self, count: int) -> list[Card]:
        """Remove up to ``count`` cards from the top, top first."""
        return [self._cards.popleft() for _ in range(min(count, len(self._cards)))]

    def peek(self, count: int) -> list[Card]:
        return [self._cards[i] for i in range(min(count, len(self._cards)))]

    def put_on_top(self, cards: list[Card]) -> None:
        """Put cards on top so that ``cards[0]`` becomes the new top."""
        self._cards.extendleft(reversed(cards))

    def put_on_bottom(self, cards: list[Card]) -> None:
        self._cards.extend(cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __bool__(self) -> bool:
        return bool(self._cards)
