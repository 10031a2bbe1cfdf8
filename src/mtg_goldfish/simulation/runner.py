"""Trial scheduling: run many independent seeded games.

Each trial is a pure function of its seed, so trials fan out to a process
pool (games are CPU-bound) with nothing shared between them. Parallel
trials and their arguments must be picklable. Trial ``i`` always gets
seed ``base_seed + i``; results come back sorted by seed whichever mode
ran them.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from functools import partial
from typing import Protocol, TypeVar

from mtg_goldfish.data.models.deck import Deck

from .analyze import TurnDiagnosis, run_game_to_turn
from .combo import Combo
from .engine import GameResult, SimulationConfig, run_game

logger = logging.getLogger(__name__)

_SEED_MASK = (1 << 64) - 1


class SeededResult(Protocol):
    seed: int


R = TypeVar("R", bound=SeededResult)


def time_seed() -> int:
    """A base seed from the wall clock, for unseeded batches."""
    return time.time_ns() & _SEED_MASK


def run_trials(
    trial: Callable[[int, bool], R],
    count: int,
    base_seed: int | None = None,
    parallel: bool = True,
    max_workers: int | None = None,
    trace_first: bool = False,
) -> list[R]:
    """
    Run ``count`` independent trials.

    Args:
        trial: Called as ``trial(seed, trace)``; a picklable module-level
            callable (or partial of one) in parallel mode
        count: Number of trials
        base_seed: Seed of trial 0 (wall clock when None)
        parallel: Fan out to a process pool; otherwise run in seed order
        max_workers: Process pool size (CPU count when None)
        trace_first: Trace trial 0 only (forces sequential execution)

    Returns:
        Results of the trials that completed, sorted by seed. Trials that
        raise are logged and dropped.
    """
    if count <= 0:
        return []
    if base_seed is None:
        base_seed = time_seed()
    seeds = [(base_seed + i) & _SEED_MASK for i in range(count)]

    results: list[R] = []
    failures = 0

    if parallel and not trace_first:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            future_map = {executor.submit(trial, seed, False): seed for seed in seeds}
            for future in as_completed(future_map):
                try:
                    results.append(future.result())
                except Exception as e:
                    failures += 1
                    logger.warning("Trial with seed %d failed: %s", future_map[future], e)
    else:
        for index, seed in enumerate(seeds):
            try:
                results.append(trial(seed, trace_first and index == 0))
            except Exception as e:
                failures += 1
                logger.warning("Trial with seed %d failed: %s", seed, e)

    if failures:
        logger.warning("%d of %d trials failed and were dropped", failures, count)
    results.sort(key=lambda result: result.seed)
    return results


# Module-level trial bodies, picklable for worker processes
def _play(
    deck: Deck, combo: Combo | None, config: SimulationConfig | None, seed: int, trace: bool
) -> GameResult:
    return run_game(deck, seed, combo=combo, config=config, trace=trace)


def _diagnose(
    deck: Deck,
    combo: Combo | None,
    config: SimulationConfig | None,
    cutoff_turn: int,
    seed: int,
    trace: bool,
) -> TurnDiagnosis:
    return run_game_to_turn(deck, seed, combo, config, cutoff_turn, trace)


def simulate_games(
    deck: Deck,
    count: int,
    combo: Combo | None = None,
    config: SimulationConfig | None = None,
    base_seed: int | None = None,
    parallel: bool = True,
    max_workers: int | None = None,
    trace_first: bool = False,
) -> list[GameResult]:
    """Run ``count`` full games of ``deck``."""
    trial = partial(_play, deck, combo, config)
    return run_trials(trial, count, base_seed, parallel, max_workers, trace_first)


def analyze_games(
    deck: Deck,
    count: int,
    combo: Combo | None = None,
    config: SimulationConfig | None = None,
    cutoff_turn: int = 4,
    base_seed: int | None = None,
    parallel: bool = True,
    max_workers: int | None = None,
) -> list[TurnDiagnosis]:
    """Run ``count`` truncated games and diagnose each at ``cutoff_turn``."""
    trial = partial(_diagnose, deck, combo, config, cutoff_turn)
    return run_trials(trial, count, base_seed, parallel, max_workers)
