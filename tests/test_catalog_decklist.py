"""Tests for the card catalog, deck lists and deck saving."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mtg_goldfish.data.catalog import CardCatalog
from mtg_goldfish.data.decklist import (
    DeckSaveParams,
    deck_hash,
    extract_fixed_cards,
    load_deck,
    parse_deck_list,
    save_deck,
)
from mtg_goldfish.data.models.card import (
    CreatureCard,
    LandCard,
    LandSubtype,
    SagaCard,
    SpellCard,
    card_abilities,
)
from mtg_goldfish.data.models.deck import Deck, FixedCards
from mtg_goldfish.exceptions import (
    CardNotFoundError,
    CatalogError,
    DeckLoadError,
    DeckParseError,
)
from mtg_goldfish.utils.mana import Color


class TestCardCatalog:
    """Tests for CardCatalog."""

    def test_variants_parsed(self, catalog: CardCatalog) -> None:
        """Entries should become the model for their card_type."""
        assert isinstance(catalog.get("Island"), LandCard)
        assert isinstance(catalog.get("Town Greeter"), CreatureCard)
        assert isinstance(catalog.get("Cache Grab"), SpellCard)
        assert isinstance(catalog.get("Dredger's Insight"), SpellCard)
        assert isinstance(catalog.get("Awaken the Honored Dead"), SagaCard)

    def test_land_fields(self, catalog: CardCatalog) -> None:
        """Land colors should be a bitset and subtype an enum."""
        sewers = catalog.get("Undercity Sewers")
        assert isinstance(sewers, LandCard)
        assert sewers.colors == Color.U | Color.B
        assert sewers.subtype is LandSubtype.SURVEIL
        assert sewers.enters_tapped
        assert sewers.surveil_amount == 1

    def test_ids_stable_in_load_order(
        self, catalog: CardCatalog, card_entries: list[dict[str, Any]]
    ) -> None:
        """Card ids should follow entry order."""
        for index, name in enumerate(catalog.names()):
            assert catalog.get(name).card_id == index
            assert catalog.by_id(index).name == name
        assert len(catalog) == len(card_entries)

    def test_mana_value_derived(self, catalog: CardCatalog) -> None:
        """Mana value is the total of the cost."""
        assert catalog.get("Bringer of the Last Gift").mana_value == 8
        assert catalog.get("Island").mana_value == 0

    def test_impending_cost(self, catalog: CardCatalog) -> None:
        """Impending fields should parse."""
        overlord = catalog.get("Overlord of the Balemurk")
        assert isinstance(overlord, CreatureCard)
        assert overlord.impending_cost is not None
        assert overlord.impending_cost.total == 2
        assert overlord.impending_counters == 5

    def test_card_abilities(self, catalog: CardCatalog) -> None:
        """Abilities come from abilities or chapters; lands have none."""
        assert card_abilities(catalog.get("Cache Grab")) == ("mill:4",)
        assert card_abilities(catalog.get("Awaken the Honored Dead"))[1] == "mill:3"
        assert card_abilities(catalog.get("Forest")) == ()

    def test_cards_are_immutable(self, catalog: CardCatalog) -> None:
        """Cards are frozen reference data."""
        island = catalog.get("Island")
        with pytest.raises(Exception):
            island.name = "Mountain"  # type: ignore[misc]

    def test_not_found(self, catalog: CardCatalog) -> None:
        """Unknown names raise CardNotFoundError with the name."""
        with pytest.raises(CardNotFoundError) as exc_info:
            catalog.get("Islnd")
        assert exc_info.value.name == "Islnd"
        assert "Islnd" not in catalog

    def test_malformed_entry(self) -> None:
        """A bad mana symbol should be a CatalogError naming the card."""
        with pytest.raises(CatalogError) as exc_info:
            CardCatalog.from_entries(
                [{"card_type": "instant", "name": "Broken", "mana_cost": "{Z}"}]
            )
        assert exc_info.value.entry == "Broken"

    def test_unknown_land_subtype(self) -> None:
        """An unknown land subtype should be a CatalogError."""
        with pytest.raises(CatalogError):
            CardCatalog.from_entries([{"card_type": "land", "name": "Odd", "subtype": "weird"}])

    def test_unknown_card_type(self) -> None:
        """A missing or unknown card_type should be a CatalogError."""
        with pytest.raises(CatalogError):
            CardCatalog.from_entries([{"card_type": "planeswalker", "name": "Jace"}])

    def test_duplicate_names(self) -> None:
        """Duplicate names should be rejected."""
        entry = {"card_type": "land", "name": "Island", "colors": ["U"]}
        with pytest.raises(CatalogError):
            CardCatalog.from_entries([entry, entry])

    def test_from_json_accepts_cards_object(self, card_entries: list[dict[str, Any]]) -> None:
        """An object with a cards list should load too."""
        text = json.dumps({"cards": card_entries[:3]})
        assert CardCatalog.from_json(text).names() == ["Forest", "Island", "Swamp"]

    def test_from_json_invalid(self) -> None:
        """Invalid JSON should be a CatalogError."""
        with pytest.raises(CatalogError):
            CardCatalog.from_json("{not json")

    def test_from_file_missing(self, tmp_path: Path) -> None:
        """A missing file should be a CatalogError."""
        with pytest.raises(CatalogError):
            CardCatalog.from_file(tmp_path / "missing.json")

    def test_by_id_uses_card_id(self) -> None:
        """by_id should resolve the card carrying that id, not a list position."""
        swamp = LandCard(card_id=7, name="Swamp", colors=Color.B)
        island = LandCard(card_id=3, name="Island", colors=Color.U)
        catalog = CardCatalog([swamp, island])
        assert catalog.by_id(3) is island
        assert catalog.by_id(7) is swamp
        with pytest.raises(CardNotFoundError):
            catalog.by_id(0)

    def test_cards_compare_by_id(self, catalog: CardCatalog) -> None:
        """Cataloged cards are equal and hash alike when their ids match."""
        island = catalog.get("Island")
        renamed = island.model_copy(update={"name": "Island Copy"})
        assert renamed == island
        assert hash(renamed) == hash(island)
        assert island != catalog.get("Swamp")
        assert len({island, renamed, catalog.get("Swamp")}) == 2

    def test_uncataloged_cards_compare_by_fields(self) -> None:
        """Cards without a catalog id fall back to field equality."""
        assert LandCard(name="Island") == LandCard(name="Island")
        assert LandCard(name="Island") != LandCard(name="Swamp")
        assert LandCard(name="Island") != LandCard(card_id=0, name="Island")

    def test_bundled_catalog_loads(self, bundled_catalog: CardCatalog) -> None:
        """The shipped catalog should validate."""
        assert "Superior Spider-Man" in bundled_catalog
        assert "Cavern of Souls" in bundled_catalog


class TestParseDeckList:
    """Tests for deck list parsing."""

    def test_parse_with_comments(self, catalog: CardCatalog) -> None:
        """Comments and blank lines are skipped; counts expand."""
        text = "# main\n4 Island\n\n// spells\n2 Cache Grab\n"
        deck = parse_deck_list(text, catalog, name="mini")
        assert deck.name == "mini"
        assert deck.size == 6
        assert deck.land_count == 4
        assert deck.counts() == {"Island": 4, "Cache Grab": 2}

    def test_unknown_card_reports_token(self, catalog: CardCatalog) -> None:
        """An unknown card should report its line and name."""
        text = "4 Island\n3 Not A Real Card\n"
        with pytest.raises(DeckParseError) as exc_info:
            parse_deck_list(text, catalog)
        error = exc_info.value
        assert error.line == 2
        assert error.token == "Not A Real Card"
        assert isinstance(error.__cause__, CardNotFoundError)

    def test_malformed_line(self, catalog: CardCatalog) -> None:
        """A line without a count should fail with the line number."""
        with pytest.raises(DeckParseError) as exc_info:
            parse_deck_list("4 Island\nIsland\n", catalog)
        assert exc_info.value.line == 2
        assert exc_info.value.token == "Island"

    def test_zero_count(self, catalog: CardCatalog) -> None:
        """A zero count should be rejected."""
        with pytest.raises(DeckParseError):
            parse_deck_list("0 Island\n", catalog)

    def test_load_deck_names_after_file(self, catalog: CardCatalog, tmp_path: Path) -> None:
        """load_deck should name the deck after the file stem."""
        path = tmp_path / "my_list.txt"
        path.write_text("2 Swamp\n1 Town Greeter\n")
        deck = load_deck(path, catalog)
        assert deck.name == "my_list"
        assert deck.size == 3

    def test_load_deck_missing_file(self, catalog: CardCatalog, tmp_path: Path) -> None:
        """A missing deck file should be a DeckLoadError naming the path."""
        path = tmp_path / "nope.txt"
        with pytest.raises(DeckLoadError) as exc_info:
            load_deck(path, catalog)
        assert exc_info.value.path == str(path)

    def test_load_deck_undecodable_file(self, catalog: CardCatalog, tmp_path: Path) -> None:
        """A file that is not UTF-8 should be a DeckLoadError."""
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe\x00 Island")
        with pytest.raises(DeckLoadError):
            load_deck(path, catalog)

    def test_bundled_deck(self, reanimator_deck: Deck) -> None:
        """The shipped base deck has 60 cards and 24 lands."""
        assert reanimator_deck.size == 60
        assert reanimator_deck.land_count == 24


class TestFixedCardsAndSave:
    """Tests for non-land extraction and deck saving."""

    def test_extract_fixed_cards(self, catalog: CardCatalog) -> None:
        """Only non-land cards remain, sorted by name."""
        deck = parse_deck_list("4 Island\n2 Town Greeter\n3 Cache Grab\n", catalog)
        fixed = extract_fixed_cards(deck)
        assert fixed.entries == (("Cache Grab", 3), ("Town Greeter", 2))
        assert fixed.total == 5

    def test_deck_hash_order_independent(self) -> None:
        """The hash should not depend on dict order."""
        fixed = FixedCards(entries=(("Cache Grab", 4),))
        a = deck_hash({"Island": 3, "Swamp": 2}, fixed)
        b = deck_hash({"Swamp": 2, "Island": 3}, fixed)
        assert a == b
        assert len(a) == 12
        assert a != deck_hash({"Island": 2, "Swamp": 3}, fixed)

    def test_save_deck_layout(self, catalog: CardCatalog, tmp_path: Path) -> None:
        """Saved decks have a header, fixed cards, then lands by count."""
        fixed = FixedCards(entries=(("Cache Grab", 4), ("Town Greeter", 2)))
        params = DeckSaveParams(
            fixed_cards=fixed,
            strategy="weighted",
            num_simulations=100,
            win_rate=0.5,
            avg_win_turn=5.25,
            turn_distribution={5: 30, 6: 20},
        )
        path = save_deck({"Swamp": 2, "Island": 4, "Forest": 2}, params, tmp_path / "out")

        assert path.parent == tmp_path / "out"
        assert path.name.startswith("deck_") and path.suffix == ".txt"
        text = path.read_text()
        assert "# Strategy: weighted" in text
        assert "# Win rate: 50.0%" in text
        assert "# Average win turn: 5.250" in text
        assert "# Turn 5: 30 (60.0%)" in text
        assert "# Fixed cards (6)" in text
        assert "# Lands (8)" in text
        body = [line for line in text.splitlines() if line and not line.startswith("#")]
        assert body == [
            "4 Cache Grab",
            "2 Town Greeter",
            "4 Island",
            "2 Forest",
            "2 Swamp",
        ]

        # The saved file is itself a valid deck list
        deck = load_deck(path, catalog)
        assert deck.size == 14
