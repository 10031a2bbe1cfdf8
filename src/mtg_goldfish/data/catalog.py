"""Card catalog: name to immutable card record lookup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mtg_goldfish.exceptions import CardNotFoundError, CatalogError

from .models.card import Card, parse_card

logger = logging.getLogger(__name__)


class CardCatalog:
    """Immutable lookup of cards by name.

    Each entry gets a stable small integer id in load order, so zone
    bookkeeping compares ints instead of names.
    """

    def __init__(self, cards: list[Card]) -> None:
        self._by_name: dict[str, Card] = {}
        self._cards: list[Card] = []
        self._by_id: dict[int, Card] = {}
        for card in cards:
            if card.name in self._by_name:
                raise CatalogError(f"Duplicate catalog entry: {card.name}", entry=card.name)
            self._by_name[card.name] = card
            self._cards.append(card)
            self._by_id[card.card_id] = card

    @classmethod
    def from_entries(cls, entries: list[dict[str, Any]]) -> CardCatalog:
        """
        Build a catalog from raw card dicts.

        Args:
            entries: Card objects tagged with ``card_type``

        Returns:
            Catalog with ids assigned in entry order

        Raises:
            CatalogError: If an entry is malformed (bad mana symbol, unknown
                land subtype, missing ``card_type``, ...)
        """
        cards: list[Card] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise CatalogError(f"Catalog entry {index} is not an object", entry=str(index))
            try:
                cards.append(parse_card(entry, card_id=index))
            except ValidationError as e:
                name = entry.get("name", f"#{index}")
                raise CatalogError(f"Malformed catalog entry {name}: {e}", entry=name) from e
        return cls(cards)

    @classmethod
    def from_json(cls, text: str) -> CardCatalog:
        """Build a catalog from JSON text (a list, or an object with ``cards``)."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog is not valid JSON: {e}") from e
        if isinstance(data, dict):
            data = data.get("cards")
        if not isinstance(data, list):
            raise CatalogError("Catalog must be a list of card objects")
        return cls.from_entries(data)

    @classmethod
    def from_file(cls, path: Path) -> CardCatalog:
        """Load a catalog from a JSON file."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Cannot read catalog {path}: {e}") from e
        catalog = cls.from_json(text)
        logger.info("Loaded %d cards from %s", len(catalog), path)
        return catalog

    def get(self, name: str) -> Card:
        """Resolve a card by exact name; never substitutes another card."""
        card = self._by_name.get(name)
        if card is None:
            raise CardNotFoundError(name)
        return card

    def by_id(self, card_id: int) -> Card:
        """Resolve a card by its catalog id."""
        card = self._by_id.get(card_id)
        if card is None:
            raise CardNotFoundError(f"#{card_id}")
        return card

    def names(self) -> list[str]:
        """Card names in load order."""
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
