"""Land-base optimizer.

Randomized search over land-count assignments. Each candidate fills the
land slots within per-land copy limits, is merged with the deck's fixed
non-land cards, and is scored by the average win turn of a batch of
simulated games. Candidates are evaluated one after another; each batch of
games runs in parallel.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from mtg_goldfish.data.catalog import CardCatalog
from mtg_goldfish.data.decklist import DeckSaveParams, save_deck, sorted_by_count
from mtg_goldfish.data.models.card import Card
from mtg_goldfish.data.models.deck import Deck, FixedCards
from mtg_goldfish.exceptions import (
    CardNotFoundError,
    DeckBuildError,
    LandConfigError,
    UnknownStrategyError,
)
from mtg_goldfish.rng import GameRng

from .aggregate import GameStats, summarize_games
from .combo import Combo
from .engine import SimulationConfig
from .runner import simulate_games, time_seed

logger = logging.getLogger(__name__)

DEFAULT_LAND_SLOTS = 24

LandConfig = dict[str, int]


@dataclass(frozen=True)
class LandType:
    """A land the optimizer may include, with its copy limits."""

    name: str
    min: int = 0
    max: int = 4


DEFAULT_LAND_TYPES: tuple[LandType, ...] = (
    LandType("Forest", 0, 4),
    LandType("Island", 0, 4),
    LandType("Swamp", 0, 4),
    LandType("Watery Grave", 0, 4),
    LandType("Undercity Sewers", 0, 4),
    LandType("Underground Mortuary", 0, 4),
    LandType("Cavern of Souls", 4, 4),
    LandType("Restless Cottage", 0, 1),
    LandType("Wastewood Verge", 0, 4),
    LandType("Gloomlake Verge", 0, 4),
    LandType("Multiversal Passage", 0, 4),
    LandType("Blooming Marsh", 0, 4),
    LandType("Starting Town", 0, 4),
)


def validate_land_types(land_types: Sequence[LandType], slots: int) -> None:
    """
    Check the land types can fill exactly ``slots`` slots.

    Raises:
        LandConfigError: On duplicate names, bad bounds, or when the minimums
            exceed the slots or the maximums cannot reach them
    """
    names = [land.name for land in land_types]
    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        raise LandConfigError(f"Duplicate land types: {', '.join(duplicates)}")

    for land in land_types:
        if land.min < 0 or land.max < land.min:
            raise LandConfigError(f"Invalid bounds for {land.name}: min={land.min} max={land.max}")

    min_total = sum(land.min for land in land_types)
    max_total = sum(land.max for land in land_types)
    if min_total > slots:
        raise LandConfigError(f"Land minimums ({min_total}) exceed {slots} slots")
    if max_total < slots:
        raise LandConfigError(f"Land maximums ({max_total}) cannot fill {slots} slots")


# =============================================================================
# Generation strategies
# =============================================================================


def generate_weighted(land_types: Sequence[LandType], slots: int, rng: GameRng) -> LandConfig:
    """
    Sample a count per land type, then top up to the slot count.

    Minimums are placed first. Land types are visited in random order, each
    taking a random count bounded by its remaining copies and the open
    slots. Open slots left after that go one at a time to random types that
    still have room.
    """
    counts = {land.name: land.min for land in land_types}
    remaining = slots - sum(counts.values())

    order = list(land_types)
    rng.shuffle(order)
    for land in order:
        if remaining == 0:
            break
        room = min(land.max - counts[land.name], remaining)
        if room > 0:
            added = rng.random_range(room + 1)
            counts[land.name] += added
            remaining -= added

    while remaining > 0:
        open_types = [land for land in land_types if counts[land.name] < land.max]
        land = rng.choice(open_types)
        counts[land.name] += 1
        remaining -= 1

    return {name: count for name, count in counts.items() if count}


def generate_shuffle(land_types: Sequence[LandType], slots: int, rng: GameRng) -> LandConfig:
    """
    Draw open slots from a shuffled pool of every optional copy.

    Minimums are placed first; the pool holds ``max - min`` copies of each
    type, so no type can exceed its maximum.
    """
    counts = {land.name: land.min for land in land_types}
    remaining = slots - sum(counts.values())

    pool = [land.name for land in land_types for _ in range(land.max - land.min)]
    rng.shuffle(pool)
    for name in pool[:remaining]:
        counts[name] += 1

    return {name: count for name, count in counts.items() if count}


Strategy = Callable[[Sequence[LandType], int, GameRng], LandConfig]

STRATEGIES: dict[str, Strategy] = {
    "weighted": generate_weighted,
    "shuffle": generate_shuffle,
}


def get_strategy(name: str) -> Strategy:
    strategy = STRATEGIES.get(name)
    if strategy is None:
        raise UnknownStrategyError(name, sorted(STRATEGIES))
    return strategy


# =============================================================================
# Deck building
# =============================================================================


def build_deck(
    lands: LandConfig, fixed: FixedCards, catalog: CardCatalog, name: str = "candidate"
) -> Deck:
    """
    Merge a land configuration with the fixed cards into a full deck.

    Raises:
        DeckBuildError: If any card name is missing from the catalog
    """
    cards: list[Card] = []
    for card_name, count in [*fixed.entries, *lands.items()]:
        try:
            card = catalog.get(card_name)
        except CardNotFoundError as e:
            raise DeckBuildError(card_name) from e
        cards.extend([card] * count)
    return Deck(name=name, cards=tuple(cards))


def config_to_string(lands: LandConfig) -> str:
    """Render as ``"4 Island, 3 Swamp, ..."`` (count descending, then name)."""
    return ", ".join(f"{count} {name}" for name, count in sorted_by_count(lands) if count)


# =============================================================================
# Search
# =============================================================================


@dataclass(frozen=True)
class CandidateResult:
    """One evaluated land configuration."""

    index: int
    lands: LandConfig
    stats: GameStats

    @property
    def win_rate(self) -> float:
        return self.stats.win_rate

    @property
    def average_win_turn(self) -> float:
        return self.stats.average_win_turn


@dataclass
class OptimizationResult:
    """Full search history plus the best candidate."""

    strategy: str
    games_per_config: int
    history: list[CandidateResult] = field(default_factory=list)
    best: CandidateResult | None = None
    skipped: int = 0
    saved_path: Path | None = None

    def top(self, n: int = 10) -> list[CandidateResult]:
        """Best ``n`` candidates with at least one win, fastest first."""
        ranked = sorted(
            (c for c in self.history if c.stats.wins > 0),
            key=lambda c: (c.average_win_turn, -c.win_rate, c.index),
        )
        return ranked[:n]


class LandOptimizer:
    """Randomized land-base search against a fixed non-land core."""

    def __init__(
        self,
        catalog: CardCatalog,
        fixed: FixedCards,
        land_types: Sequence[LandType] = DEFAULT_LAND_TYPES,
        combo: Combo | None = None,
        config: SimulationConfig | None = None,
        land_slots: int = DEFAULT_LAND_SLOTS,
        max_workers: int | None = None,
    ) -> None:
        validate_land_types(land_types, land_slots)
        self.catalog = catalog
        self.fixed = fixed
        self.land_types = tuple(land_types)
        self.combo = combo
        self.config = config
        self.land_slots = land_slots
        self.max_workers = max_workers

    def evaluate(self, index: int, lands: LandConfig, games: int, base_seed: int) -> CandidateResult:
        """Score one configuration; raises DeckBuildError if it cannot be built."""
        deck = build_deck(lands, self.fixed, self.catalog, name=f"candidate-{index}")
        results = simulate_games(
            deck,
            games,
            combo=self.combo,
            config=self.config,
            base_seed=base_seed,
            max_workers=self.max_workers,
        )
        return CandidateResult(index=index, lands=lands, stats=summarize_games(results))

    def optimize(
        self,
        num_configs: int,
        games_per_config: int,
        strategy: str = "weighted",
        seed: int | None = None,
        output_dir: Path | None = None,
        on_candidate: Callable[[CandidateResult], None] | None = None,
    ) -> OptimizationResult:
        """
        Generate and evaluate ``num_configs`` candidates.

        A candidate becomes the best only with at least one win and a strictly
        lower average win turn than the current best; ties keep the earlier
        one. Candidates that cannot be built are logged and skipped.

        Args:
            num_configs: Candidates to generate
            games_per_config: Games simulated per candidate
            strategy: Name registered in ``STRATEGIES``
            seed: Base seed for generation and games (wall clock when None)
            output_dir: Where to save the best deck (not saved when None)
            on_candidate: Called after each evaluated candidate

        Returns:
            OptimizationResult with history, best and saved path
        """
        generate = get_strategy(strategy)
        base_seed = time_seed() if seed is None else seed
        rng = GameRng(base_seed)
        result = OptimizationResult(strategy=strategy, games_per_config=games_per_config)
        best_turn = float("inf")

        logger.info(
            "Optimizing %d configurations x %d games (%s)", num_configs, games_per_config, strategy
        )
        for index in range(num_configs):
            lands = generate(self.land_types, self.land_slots, rng)
            try:
                candidate = self.evaluate(
                    index, lands, games_per_config, base_seed + (index + 1) * games_per_config
                )
            except DeckBuildError as e:
                result.skipped += 1
                logger.warning("Skipping configuration %d: %s", index, e.message)
                continue

            result.history.append(candidate)
            if on_candidate is not None:
                on_candidate(candidate)

            avg = candidate.average_win_turn
            if avg > 0 and avg < best_turn:
                best_turn = avg
                result.best = candidate
                logger.info(
                    "New best (config %d): %.3f avg turn, %.1f%% wins: %s",
                    index,
                    avg,
                    candidate.win_rate * 100,
                    config_to_string(lands),
                )

        if result.best is not None and output_dir is not None:
            params = DeckSaveParams(
                fixed_cards=self.fixed,
                strategy=strategy,
                num_simulations=games_per_config,
                win_rate=result.best.win_rate,
                avg_win_turn=result.best.average_win_turn,
                turn_distribution=dict(result.best.stats.turn_histogram),
            )
            result.saved_path = save_deck(result.best.lands, params, output_dir)

        return result
