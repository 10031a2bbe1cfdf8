"""Data models for cards and decks."""

from .card import (
    BaseCard,
    Card,
    CreatureCard,
    LandCard,
    LandSubtype,
    SagaCard,
    SpellCard,
    card_abilities,
    parse_card,
)
from .deck import Deck, FixedCards

__all__ = [
    "BaseCard",
    "Card",
    "CreatureCard",
    "Deck",
    "FixedCards",
    "LandCard",
    "LandSubtype",
    "SagaCard",
    "SpellCard",
    "card_abilities",
    "parse_card",
]
