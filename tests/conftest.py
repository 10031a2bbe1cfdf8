"""Pytest fixtures for MTG Goldfish tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from mtg_goldfish.config import get_settings
from mtg_goldfish.data.catalog import CardCatalog
from mtg_goldfish.data.decklist import load_deck
from mtg_goldfish.data.models.deck import Deck

CARD_ENTRIES: list[dict[str, Any]] = [
    {"card_type": "land", "name": "Forest", "subtype": "basic", "colors": ["G"]},
    {"card_type": "land", "name": "Island", "subtype": "basic", "colors": ["U"]},
    {"card_type": "land", "name": "Swamp", "subtype": "basic", "colors": ["B"]},
    {"card_type": "land", "name": "Watery Grave", "subtype": "shock", "colors": ["U", "B"]},
    {
        "card_type": "land",
        "name": "Undercity Sewers",
        "subtype": "surveil",
        "colors": ["U", "B"],
        "enters_tapped": True,
        "has_surveil": True,
        "surveil_amount": 1,
    },
    {"card_type": "land", "name": "Blooming Marsh", "subtype": "fastland", "colors": ["B", "G"]},
    {"card_type": "land", "name": "Starting Town", "subtype": "town", "colors": ["U", "B", "G"]},
    {
        "card_type": "land",
        "name": "Gloomy Tapland",
        "subtype": "basic",
        "colors": ["U", "B", "G"],
        "enters_tapped": True,
    },
    {
        "card_type": "creature",
        "name": "Superior Spider-Man",
        "mana_cost": "{1}{U}{B}{G}",
        "power": 4,
        "toughness": 4,
        "is_legendary": True,
        "combo_tags": ["enabler"],
    },
    {
        "card_type": "creature",
        "name": "Bringer of the Last Gift",
        "mana_cost": "{6}{B}{B}",
        "power": 6,
        "toughness": 6,
        "creature_types": ["Vampire", "Demon"],
    },
    {
        "card_type": "creature",
        "name": "Terror of the Peaks",
        "mana_cost": "{3}{R}{R}",
        "power": 5,
        "toughness": 4,
        "creature_types": ["Dragon"],
    },
    {
        "card_type": "creature",
        "name": "Town Greeter",
        "mana_cost": {"generic": 1, "green": 1},
        "power": 1,
        "toughness": 1,
        "abilities": ["mill:4"],
    },
    {
        "card_type": "creature",
        "name": "Overlord of the Balemurk",
        "mana_cost": "{3}{B}{B}",
        "power": 5,
        "toughness": 5,
        "abilities": ["mill:4"],
        "impending_cost": "{1}{B}",
        "impending_counters": 5,
    },
    {"card_type": "instant", "name": "Cache Grab", "mana_cost": "{1}{G}", "abilities": ["mill:4"]},
    {"card_type": "instant", "name": "Think Twice", "mana_cost": "{1}{U}"},
    {"card_type": "enchantment", "name": "Dredger's Insight", "mana_cost": "{1}{G}"},
    {
        "card_type": "saga",
        "name": "Awaken the Honored Dead",
        "mana_cost": "{B}{G}{U}",
        "chapters": ["destroy_nonland", "mill:3", "reanimate"],
    },
]


def make_deck(catalog: CardCatalog, counts: dict[str, int], name: str = "test") -> Deck:
    """Build a deck from name -> count without going through a deck list."""
    cards = []
    for card_name, count in counts.items():
        cards.extend([catalog.get(card_name)] * count)
    return Deck(name=name, cards=tuple(cards))


@pytest.fixture
def card_entries() -> list[dict[str, Any]]:
    """Raw catalog entries for the in-memory catalog."""
    return [dict(entry) for entry in CARD_ENTRIES]


@pytest.fixture
def deck_factory(catalog: CardCatalog) -> Callable[[dict[str, int]], Deck]:
    """Build decks from name -> count against the in-memory catalog."""
    return lambda counts: make_deck(catalog, counts)


@pytest.fixture
def catalog() -> CardCatalog:
    """Small in-memory catalog covering every card kind."""
    return CardCatalog.from_entries(CARD_ENTRIES)


@pytest.fixture
def bundled_catalog() -> CardCatalog:
    """The catalog shipped with the package."""
    return CardCatalog.from_file(get_settings().cards_path)


@pytest.fixture
def reanimator_deck(bundled_catalog: CardCatalog) -> Deck:
    """The bundled 60-card base deck."""
    return load_deck(get_settings().deck_path, bundled_catalog)


@pytest.fixture
def basics_deck(catalog: CardCatalog) -> Deck:
    """24 basic lands and 36 generic instants."""
    return make_deck(catalog, {"Island": 8, "Swamp": 8, "Forest": 8, "Think Twice": 36})


@pytest.fixture
def combo_deck(catalog: CardCatalog) -> Deck:
    """A 60-card deck able to assemble the reanimator combo."""
    return make_deck(
        catalog,
        {
            "Island": 4,
            "Swamp": 4,
            "Forest": 4,
            "Watery Grave": 4,
            "Undercity Sewers": 4,
            "Blooming Marsh": 2,
            "Starting Town": 2,
            "Superior Spider-Man": 4,
            "Bringer of the Last Gift": 4,
            "Terror of the Peaks": 4,
            "Town Greeter": 4,
            "Overlord of the Balemurk": 4,
            "Cache Grab": 4,
            "Dredger's Insight": 4,
            "Awaken the Honored Dead": 4,
            "Think Twice": 4,
        },
    )
