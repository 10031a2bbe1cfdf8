"""Tests for land configuration generation and the optimizer."""

from __future__ import annotations

from pathlib import Path

import pytest

from mtg_goldfish.data.catalog import CardCatalog
from mtg_goldfish.data.decklist import extract_fixed_cards
from mtg_goldfish.data.models.deck import Deck, FixedCards
from mtg_goldfish.exceptions import DeckBuildError, LandConfigError, UnknownStrategyError
from mtg_goldfish.rng import GameRng
from mtg_goldfish.simulation.aggregate import GameStats
from mtg_goldfish.simulation.combo import Combo
from mtg_goldfish.simulation.engine import SimulationConfig
from mtg_goldfish.simulation.optimize import (
    DEFAULT_LAND_TYPES,
    STRATEGIES,
    CandidateResult,
    LandOptimizer,
    LandType,
    build_deck,
    config_to_string,
    get_strategy,
    validate_land_types,
)

LAND_TYPES = (
    LandType("Island", 0, 4),
    LandType("Swamp", 0, 4),
    LandType("Forest", 0, 4),
    LandType("Watery Grave", 2, 4),
    LandType("Undercity Sewers", 0, 4),
    LandType("Blooming Marsh", 0, 4),
    LandType("Starting Town", 0, 4),
)


@pytest.fixture
def fixed(combo_deck: Deck) -> FixedCards:
    return extract_fixed_cards(combo_deck)


def canned_stats(average: int) -> GameStats:
    """Stats for a candidate winning one game on ``average`` (no wins for 0)."""
    if average == 0:
        return GameStats(total=1)
    return GameStats(total=1, wins=1, win_turn_sum=average, turn_histogram={average: 1})


class TestStrategies:
    """Tests for the land generation strategies."""

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_fills_slots_within_bounds(self, strategy: str) -> None:
        """Every configuration fills 24 slots and respects copy limits."""
        generate = get_strategy(strategy)
        bounds = {land.name: land for land in LAND_TYPES}
        rng = GameRng(99)
        for _ in range(200):
            lands = generate(LAND_TYPES, 24, rng)
            assert sum(lands.values()) == 24
            for name, count in lands.items():
                assert bounds[name].min <= count <= bounds[name].max
                assert count > 0
            assert lands["Watery Grave"] >= 2

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_default_land_types(self, strategy: str) -> None:
        """Cavern of Souls is always a full playset."""
        rng = GameRng(3)
        for _ in range(50):
            lands = get_strategy(strategy)(DEFAULT_LAND_TYPES, 24, rng)
            assert sum(lands.values()) == 24
            assert lands["Cavern of Souls"] == 4
            assert lands.get("Restless Cottage", 0) <= 1

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_exact_capacity(self, strategy: str) -> None:
        """When maximums equal the slots every land is maxed."""
        types = (LandType("Island", 0, 4), LandType("Swamp", 1, 2))
        lands = get_strategy(strategy)(types, 6, GameRng(1))
        assert lands == {"Island": 4, "Swamp": 2}

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_deterministic(self, strategy: str) -> None:
        """The same seed generates the same configuration."""
        generate = get_strategy(strategy)
        assert generate(LAND_TYPES, 24, GameRng(5)) == generate(LAND_TYPES, 24, GameRng(5))

    def test_unknown_strategy(self) -> None:
        """Unknown strategy names are rejected."""
        with pytest.raises(UnknownStrategyError) as exc_info:
            get_strategy("greedy")
        assert "greedy" in str(exc_info.value)


class TestValidateLandTypes:
    """Tests for validate_land_types."""

    def test_valid(self) -> None:
        """Land types able to fill the slots pass."""
        validate_land_types(LAND_TYPES, 24)
        validate_land_types(DEFAULT_LAND_TYPES, 24)

    @pytest.mark.parametrize(
        ("types", "match"),
        [
            ((LandType("Island", 0, 10), LandType("Island", 0, 20)), "Duplicate"),
            ((LandType("Island", 5, 3), LandType("Swamp", 0, 30)), "Invalid bounds"),
            ((LandType("Island", 20, 20), LandType("Swamp", 10, 10)), "exceed"),
            ((LandType("Island", 0, 4), LandType("Swamp", 0, 4)), "cannot fill"),
        ],
    )
    def test_invalid(self, types: tuple[LandType, ...], match: str) -> None:
        """Impossible land type constraints are rejected."""
        with pytest.raises(LandConfigError, match=match):
            validate_land_types(types, 24)

    def test_optimizer_validates(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """The optimizer refuses land types that cannot fill the slots."""
        with pytest.raises(LandConfigError):
            LandOptimizer(catalog, fixed, land_types=(LandType("Island", 0, 4),))


class TestBuildDeck:
    """Tests for build_deck and config_to_string."""

    def test_merges_fixed_and_lands(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """Fixed cards and lands make a full deck."""
        deck = build_deck({"Island": 12, "Swamp": 12}, fixed, catalog)
        assert deck.size == 60
        assert deck.land_count == 24
        assert deck.counts()["Superior Spider-Man"] == 4

    def test_unknown_land(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """A land missing from the catalog cannot be built."""
        with pytest.raises(DeckBuildError, match="Mystery Land"):
            build_deck({"Mystery Land": 24}, fixed, catalog)

    def test_config_to_string(self) -> None:
        """Count descending, then name."""
        assert config_to_string({"Swamp": 4, "Island": 4, "Forest": 6}) == (
            "6 Forest, 4 Island, 4 Swamp"
        )


class TestLandOptimizer:
    """Tests for LandOptimizer.optimize."""

    def test_keeps_strictly_better(
        self, catalog: CardCatalog, fixed: FixedCards, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Ties and zero-win candidates never replace the best."""
        averages = [0, 5, 4, 4, 6]
        optimizer = LandOptimizer(catalog, fixed, land_types=LAND_TYPES)

        def fake_evaluate(
            index: int, lands: dict[str, int], games: int, base_seed: int
        ) -> CandidateResult:
            return CandidateResult(index=index, lands=lands, stats=canned_stats(averages[index]))

        monkeypatch.setattr(optimizer, "evaluate", fake_evaluate)
        result = optimizer.optimize(len(averages), 1, seed=7)

        assert result.best is not None
        assert result.best.index == 2
        assert [c.index for c in result.top(10)] == [2, 3, 1, 4]
        assert len(result.history) == 5

    def test_no_wins_no_best(
        self,
        catalog: CardCatalog,
        fixed: FixedCards,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        """Nothing is saved when no candidate won a game."""
        optimizer = LandOptimizer(catalog, fixed, land_types=LAND_TYPES)
        monkeypatch.setattr(
            optimizer,
            "evaluate",
            lambda index, lands, games, seed: CandidateResult(index, lands, canned_stats(0)),
        )
        result = optimizer.optimize(3, 1, seed=1, output_dir=tmp_path)
        assert result.best is None
        assert result.saved_path is None
        assert list(tmp_path.iterdir()) == []

    def test_unbuildable_candidates_skipped(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """A land missing from the catalog skips the candidate."""
        types = (*LAND_TYPES, LandType("Mystery Land", 1, 1))
        optimizer = LandOptimizer(catalog, fixed, land_types=types, combo=Combo.always())
        result = optimizer.optimize(3, 2, seed=1)
        assert result.skipped == 3
        assert result.history == []
        assert result.best is None

    def test_unknown_strategy(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """Unknown strategy names are rejected."""
        optimizer = LandOptimizer(catalog, fixed, land_types=LAND_TYPES)
        with pytest.raises(UnknownStrategyError):
            optimizer.optimize(1, 1, strategy="greedy", seed=1)

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_end_to_end(
        self, catalog: CardCatalog, fixed: FixedCards, tmp_path: Path, strategy: str
    ) -> None:
        """Real simulation: every candidate is a legal 60-card deck and the best is saved."""
        seen: list[CandidateResult] = []
        optimizer = LandOptimizer(
            catalog,
            fixed,
            land_types=LAND_TYPES,
            combo=Combo.always(),
            config=SimulationConfig(turn_cap=5),
        )
        result = optimizer.optimize(
            4, 5, strategy=strategy, seed=11, output_dir=tmp_path, on_candidate=seen.append
        )

        assert seen == result.history
        assert len(result.history) == 4
        for candidate in result.history:
            assert sum(candidate.lands.values()) == 24
            assert candidate.stats.total == 5
            assert candidate.average_win_turn == 1.0
        # every candidate ties, so the first stays best
        assert result.best is result.history[0]
        assert result.saved_path is not None and result.saved_path.exists()
        text = result.saved_path.read_text()
        assert text.startswith("# MTG Reanimator Deck")
        assert f"# Strategy: {strategy}" in text

    def test_seeded_search_repeatable(self, catalog: CardCatalog, fixed: FixedCards) -> None:
        """A seeded search generates the same candidates."""
        def run() -> list[dict[str, int]]:
            optimizer = LandOptimizer(catalog, fixed, land_types=LAND_TYPES, combo=Combo.always())
            return [c.lands for c in optimizer.optimize(3, 2, seed=21).history]

        assert run() == run()
