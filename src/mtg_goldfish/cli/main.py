"""Goldfish CLI - simulate, analyze and optimize the reanimator deck."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from mtg_goldfish.config import get_settings
from mtg_goldfish.data.decklist import extract_fixed_cards
from mtg_goldfish.data.models.deck import Deck
from mtg_goldfish.simulation.aggregate import GameStats, summarize_diagnoses, summarize_games
from mtg_goldfish.simulation.combo import Combo
from mtg_goldfish.simulation.engine import SimulationConfig
from mtg_goldfish.simulation.optimize import (
    STRATEGIES,
    CandidateResult,
    LandOptimizer,
    config_to_string,
)
from mtg_goldfish.simulation.runner import analyze_games, simulate_games

from .context import SimulationContext, handle_errors, output_json, setup_logging
from .formatting import (
    board_table,
    candidates_table,
    compare_table,
    diagnosis_table,
    stats_table,
    turn_table,
)

console = Console()

# =============================================================================
# Main CLI app
# =============================================================================

cli = typer.Typer(
    name="goldfish",
    help="Goldfish - opening simulator and land optimizer for a reanimator deck.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Shared options
GamesOption = Annotated[int | None, typer.Option("-n", "--games", min=1, help="Number of games")]
SeedOption = Annotated[
    int | None,
    typer.Option("-s", "--seed", help="Base seed (runs sequentially, game i uses seed+i)"),
]
DeckOption = Annotated[Path | None, typer.Option("-d", "--deck", help="Deck list file")]
CardsOption = Annotated[Path | None, typer.Option("-c", "--cards", help="Card catalog JSON")]
ComboOption = Annotated[Path | None, typer.Option("--combo", help="Combo definition JSON")]
TurnsOption = Annotated[int | None, typer.Option("--turns", min=1, help="Turn cap")]
MulliganOption = Annotated[bool, typer.Option("--mulligan", help="Use the London mulligan")]
JsonOption = Annotated[bool, typer.Option("--json", help="Output JSON")]


def _simulate(
    deck: Deck,
    combo: Combo,
    config: SimulationConfig,
    games: int,
    seed: int | None,
    verbose: bool = False,
) -> GameStats:
    results = simulate_games(
        deck,
        games,
        combo=combo,
        config=config,
        base_seed=seed,
        parallel=seed is None,
        max_workers=get_settings().max_workers,
        trace_first=verbose,
    )
    return summarize_games(results)


def _config(turns: int | None, mulligan: bool) -> SimulationConfig:
    overrides: dict[str, object] = {"mulligan": mulligan}
    if turns is not None:
        overrides["turn_cap"] = turns
    return SimulationConfig.from_settings(get_settings(), **overrides)


# =============================================================================
# Commands
# =============================================================================


@cli.command()
def run(
    games: GamesOption = None,
    seed: SeedOption = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Trace the first game")
    ] = False,
    deck_file: DeckOption = None,
    cards: CardsOption = None,
    combo_file: ComboOption = None,
    turns: TurnsOption = None,
    mulligan: MulliganOption = False,
    as_json: JsonOption = False,
) -> None:
    """Simulate games and report win rate and win turns."""
    setup_logging(verbose)
    settings = get_settings()
    ctx = SimulationContext(cards)
    count = settings.num_games if games is None else games

    with handle_errors():
        deck = ctx.load_deck(deck_file)
        combo = ctx.load_combo(combo_file)
        config = _config(turns, mulligan)
        stats = _simulate(deck, combo, config, count, seed, verbose)

    if as_json:
        output_json(
            {
                "deck": deck.name,
                "games": stats.total,
                "wins": stats.wins,
                "win_rate": stats.win_rate,
                "average_win_turn": stats.average_win_turn,
                "turn_distribution": stats.turn_histogram,
                "colors_turn_distribution": stats.colors_turn_histogram,
            }
        )
        return

    console.print(f"\n[bold]Deck:[/] {deck.name} ({deck.size} cards, {deck.land_count} lands)")
    console.print(stats_table("Simulation Results", stats))
    console.print(turn_table(stats, config.turn_cap))


@cli.command()
def compare(
    deck1: Annotated[Path, typer.Argument(help="First deck list")],
    deck2: Annotated[Path, typer.Argument(help="Second deck list")],
    games: GamesOption = None,
    seed: SeedOption = None,
    cards: CardsOption = None,
    combo_file: ComboOption = None,
    turns: TurnsOption = None,
    mulligan: MulliganOption = False,
) -> None:
    """Compare two deck lists over the same number of games."""
    setup_logging()
    settings = get_settings()
    ctx = SimulationContext(cards)

    with handle_errors():
        first = ctx.load_deck(deck1)
        second = ctx.load_deck(deck2)
        combo = ctx.load_combo(combo_file)
        config = _config(turns, mulligan)
        count = settings.num_games if games is None else games
        first_stats = _simulate(first, combo, config, count, seed)
        second_stats = _simulate(second, combo, config, count, seed)

    console.print(compare_table((first.name, second.name), first_stats, second_stats))


@cli.command()
def analyze(
    games: GamesOption = None,
    seed: SeedOption = None,
    deck_file: DeckOption = None,
    cards: CardsOption = None,
    combo_file: ComboOption = None,
    turn: Annotated[int | None, typer.Option("-t", "--turn", min=1, help="Cutoff turn")] = None,
    mulligan: MulliganOption = False,
    as_json: JsonOption = False,
) -> None:
    """Explain why the combo is or is not ready at a cutoff turn."""
    setup_logging()
    settings = get_settings()
    ctx = SimulationContext(cards)
    cutoff = settings.cutoff_turn if turn is None else turn
    count = settings.num_games if games is None else games

    with handle_errors():
        deck = ctx.load_deck(deck_file)
        combo = ctx.load_combo(combo_file)
        diagnoses = analyze_games(
            deck,
            count,
            combo=combo,
            config=_config(None, mulligan),
            cutoff_turn=cutoff,
            base_seed=seed,
            parallel=seed is None,
            max_workers=settings.max_workers,
        )
    stats = summarize_diagnoses(diagnoses)

    if as_json:
        output_json(
            {
                "games": stats.total,
                "cutoff_turn": cutoff,
                "reasons": stats.reason_counts,
                "average_lands": stats.average_lands,
                "color_availability": stats.color_availability(),
                "combo_ready_rate": stats.combo_ready_rate,
            }
        )
        return

    console.print(diagnosis_table(stats, cutoff))
    console.print(board_table(stats))


@cli.command()
def optimize(
    configs: Annotated[int, typer.Option("--configs", min=1, help="Configurations to try")] = 100,
    games: Annotated[int, typer.Option("--games", min=1, help="Games per configuration")] = 1000,
    strategy: Annotated[
        str,
        typer.Option("--strategy", help=f"Generation strategy: {', '.join(sorted(STRATEGIES))}"),
    ] = "weighted",
    deck_file: DeckOption = None,
    cards: CardsOption = None,
    combo_file: ComboOption = None,
    seed: SeedOption = None,
    top: Annotated[int, typer.Option("--top", min=1, help="Configurations to list")] = 10,
    output_dir: Annotated[
        Path | None, typer.Option("-o", "--output", help="Directory for the best deck")
    ] = None,
    mulligan: MulliganOption = False,
) -> None:
    """Search land configurations for the fastest average win turn."""
    setup_logging()
    settings = get_settings()
    ctx = SimulationContext(cards)

    def report(candidate: CandidateResult) -> None:
        console.print(
            f"[dim]{candidate.index + 1}/{configs}[/] "
            f"avg {candidate.average_win_turn:.3f}, win {candidate.win_rate:.1%}: "
            f"{config_to_string(candidate.lands)}"
        )

    with handle_errors():
        base = ctx.load_deck(deck_file)
        optimizer = LandOptimizer(
            ctx.get_catalog(),
            extract_fixed_cards(base),
            combo=ctx.load_combo(combo_file),
            config=_config(None, mulligan),
            land_slots=settings.land_slots,
            max_workers=settings.max_workers,
        )
        result = optimizer.optimize(
            configs,
            games,
            strategy=strategy,
            seed=seed,
            output_dir=output_dir or settings.output_dir,
            on_candidate=report,
        )

    if result.skipped:
        console.print(f"[yellow]Skipped {result.skipped} configuration(s)[/]")
    if result.best is None:
        console.print("[red]No configuration won a game[/]")
        raise typer.Exit(1)

    console.print(candidates_table(result.top(top)))
    console.print(f"\n[bold]Best:[/] {config_to_string(result.best.lands)}")
    if result.saved_path is not None:
        console.print(f"Saved to [cyan]{result.saved_path}[/]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
