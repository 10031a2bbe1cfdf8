"""Rich tables for simulation reports."""

from __future__ import annotations

from rich.table import Table

from mtg_goldfish.simulation.aggregate import DiagnosisStats, GameStats
from mtg_goldfish.simulation.optimize import CandidateResult, config_to_string

# Rich styles per color letter
COLOR_STYLES = {"W": "white", "U": "blue", "B": "magenta", "R": "red", "G": "green", "C": "dim"}

BAR_WIDTH = 30


def bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """A block bar for a fraction in [0, 1]."""
    return "█" * int(max(0.0, min(fraction, 1.0)) * width)


def stats_table(title: str, stats: GameStats) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Games", str(stats.total))
    table.add_row("Wins", str(stats.wins))
    table.add_row("Win rate", f"{stats.win_rate:.1%}")
    table.add_row("Average win turn", f"{stats.average_win_turn:.3f}")
    table.add_row("On the play", str(stats.on_the_play))
    if stats.mulligans:
        table.add_row("Mulligans", str(stats.mulligans))
    return table


def turn_table(stats: GameStats, turn_cap: int) -> Table:
    """Wins per turn with cumulative rate and color availability."""
    table = Table(title="Turn Distribution")
    table.add_column("Turn", justify="right")
    table.add_column("Wins", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Cumulative", justify="right")
    table.add_column("")
    table.add_column("Colors by turn", justify="right")

    max_count = max(stats.turn_histogram.values(), default=0)
    curve = dict(stats.color_availability_curve(turn_cap))
    last_turn = max(
        max(stats.turn_histogram, default=1), max(stats.colors_turn_histogram, default=1)
    )
    for turn in range(1, min(last_turn, turn_cap) + 1):
        count = stats.turn_histogram.get(turn, 0)
        pct = count / stats.total if stats.total else 0.0
        table.add_row(
            str(turn),
            str(count),
            f"{pct:.1%}",
            f"{stats.cumulative_win_rate(turn):.1%}",
            f"[cyan]{bar(count / max_count if max_count else 0.0)}[/]",
            f"{curve[turn]:.1%}",
        )
    return table


def compare_table(names: tuple[str, str], first: GameStats, second: GameStats) -> Table:
    table = Table(title="Deck Comparison")
    table.add_column("Metric", style="cyan")
    table.add_column(names[0], justify="right")
    table.add_column(names[1], justify="right")
    table.add_column("Diff", justify="right")

    win_diff = (second.win_rate - first.win_rate) * 100
    turn_diff = second.average_win_turn - first.average_win_turn
    table.add_row("Games", str(first.total), str(second.total), "")
    table.add_row(
        "Win rate", f"{first.win_rate:.1%}", f"{second.win_rate:.1%}", f"{win_diff:+.1f}%"
    )
    table.add_row(
        "Average win turn",
        f"{first.average_win_turn:.3f}",
        f"{second.average_win_turn:.3f}",
        f"[{'green' if turn_diff < 0 else 'red'}]{turn_diff:+.3f}[/]",
    )
    return table


def diagnosis_table(stats: DiagnosisStats, cutoff_turn: int) -> Table:
    table = Table(title=f"Turn {cutoff_turn} Analysis ({stats.total} games)")
    table.add_column("Reason", style="cyan")
    table.add_column("Games", justify="right")
    table.add_column("%", justify="right")
    table.add_column("")

    for reason, count in stats.reason_counts.items():
        fraction = count / stats.total if stats.total else 0.0
        style = "green" if reason == "combo_available" else "yellow"
        table.add_row(f"[{style}]{reason}[/]", str(count), f"{fraction:.1%}", bar(fraction))
    return table


def board_table(stats: DiagnosisStats) -> Table:
    table = Table(title="Board at Cutoff")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Average lands", f"{stats.average_lands:.2f}")
    for color, pct in stats.color_availability().items():
        style = COLOR_STYLES.get(color, "white")
        table.add_row(f"[{style}]{color}[/] available", f"{pct:.1f}%")
    table.add_row("Combo ready", f"{stats.combo_ready_rate:.1%}")
    return table


def candidates_table(candidates: list[CandidateResult]) -> Table:
    table = Table(title=f"Top {len(candidates)} Land Configurations")
    table.add_column("#", justify="right")
    table.add_column("Avg turn", justify="right")
    table.add_column("Win rate", justify="right")
    table.add_column("Lands")

    for rank, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(rank),
            f"{candidate.average_win_turn:.3f}",
            f"{candidate.win_rate:.1%}",
            config_to_string(candidate.lands),
        )
    return table
