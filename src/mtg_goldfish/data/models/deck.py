"""Deck-related models."""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field

from .card import Card


class Deck(BaseModel):
    """An ordered multiset of cards, built once per batch of games."""

    model_config = ConfigDict(frozen=True)

    name: str = "deck"
    cards: tuple[Card, ...] = Field(default_factory=tuple)

    @property
    def size(self) -> int:
        """Total cards in the deck."""
        return len(self.cards)

    @property
    def land_count(self) -> int:
        """Number of land cards."""
        return sum(1 for card in self.cards if card.is_land)

    def counts(self) -> Counter[str]:
        """Copies per card name."""
        return Counter(card.name for card in self.cards)

    def card_ids(self) -> Counter[int]:
        """Copies per catalog id; the multiset every game must conserve."""
        return Counter(card.card_id for card in self.cards)


class FixedCards(BaseModel):
    """The non-land portion of a base deck, reused by every candidate."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[tuple[str, int], ...] = ()  # (name, count) sorted by name

    @property
    def total(self) -> int:
        """Total non-land cards."""
        return sum(count for _, count in self.entries)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]
