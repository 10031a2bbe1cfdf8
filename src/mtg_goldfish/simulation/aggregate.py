"""Reduce many game results or diagnoses into summary statistics.

Reductions use integer counters only, and outputs are sorted, so the same
multiset of inputs gives identical summaries in any arrival order.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from mtg_goldfish.utils.mana import COLOR_ORDER

from .analyze import TurnDiagnosis
from .combo import FailureKind
from .engine import GameResult


def _sorted_histogram(counter: Counter[int]) -> dict[int, int]:
    return {turn: counter[turn] for turn in sorted(counter)}


@dataclass(frozen=True)
class GameStats:
    """Summary of a batch of games."""

    total: int = 0
    wins: int = 0
    win_turn_sum: int = 0
    on_the_play: int = 0
    mulligans: int = 0
    turn_histogram: dict[int, int] = field(default_factory=dict)
    colors_turn_histogram: dict[int, int] = field(default_factory=dict)

    @property
    def win_rate(self) -> float:
        """Wins over total, in [0, 1]; 0 for an empty batch."""
        return self.wins / self.total if self.total else 0.0

    @property
    def average_win_turn(self) -> float:
        """Mean win turn over winning games; 0 when nothing won."""
        return self.win_turn_sum / self.wins if self.wins else 0.0

    def cumulative_win_rate(self, turn: int) -> float:
        """Fraction of all games won on or before ``turn``."""
        if not self.total:
            return 0.0
        won = sum(count for t, count in self.turn_histogram.items() if t <= turn)
        return won / self.total

    def color_availability_curve(self, turn_cap: int) -> list[tuple[int, float]]:
        """(turn, fraction of games with the tracked colors by that turn)."""
        curve: list[tuple[int, float]] = []
        running = 0
        for turn in range(1, turn_cap + 1):
            running += self.colors_turn_histogram.get(turn, 0)
            curve.append((turn, running / self.total if self.total else 0.0))
        return curve


def summarize_games(results: Iterable[GameResult]) -> GameStats:
    """Reduce game results into a GameStats."""
    total = wins = win_turn_sum = on_the_play = mulligans = 0
    turns: Counter[int] = Counter()
    colors: Counter[int] = Counter()

    for result in results:
        total += 1
        on_the_play += result.on_the_play
        mulligans += result.mulligans
        if result.win_turn is not None:
            wins += 1
            win_turn_sum += result.win_turn
            turns[result.win_turn] += 1
        if result.colors_turn is not None:
            colors[result.colors_turn] += 1

    return GameStats(
        total=total,
        wins=wins,
        win_turn_sum=win_turn_sum,
        on_the_play=on_the_play,
        mulligans=mulligans,
        turn_histogram=_sorted_histogram(turns),
        colors_turn_histogram=_sorted_histogram(colors),
    )


@dataclass(frozen=True)
class DiagnosisStats:
    """Summary of a batch of turn-N diagnoses."""

    total: int = 0
    reason_counts: dict[str, int] = field(default_factory=dict)
    kind_counts: dict[FailureKind, int] = field(default_factory=dict)
    lands_sum: int = 0
    color_counts: dict[str, int] = field(default_factory=dict)

    @property
    def average_lands(self) -> float:
        return self.lands_sum / self.total if self.total else 0.0

    @property
    def combo_ready_count(self) -> int:
        return self.kind_counts.get(FailureKind.COMBO_AVAILABLE, 0)

    @property
    def combo_ready_rate(self) -> float:
        """Share of games classified as combo available, in [0, 1]."""
        return self.combo_ready_count / self.total if self.total else 0.0

    def color_availability(self) -> dict[str, float]:
        """Percentage of games with each tracked color available."""
        if not self.total:
            return {color: 0.0 for color in self.color_counts}
        return {color: count / self.total * 100 for color, count in self.color_counts.items()}

    def percentage(self, reason: str) -> float:
        return self.reason_counts.get(reason, 0) / self.total * 100 if self.total else 0.0


def summarize_diagnoses(diagnoses: Iterable[TurnDiagnosis]) -> DiagnosisStats:
    """Reduce diagnoses into per-reason frequencies and board averages."""
    total = lands_sum = 0
    reasons: Counter[str] = Counter()
    kinds: Counter[FailureKind] = Counter()
    colors: Counter[str] = Counter()
    seen_colors: set[str] = set()

    for diagnosis in diagnoses:
        total += 1
        lands_sum += diagnosis.lands_count
        reasons[str(diagnosis.reason)] += 1
        kinds[diagnosis.reason.kind] += 1
        for color, available in diagnosis.colors_available.items():
            seen_colors.add(color)
            colors[color] += available

    ordered_colors = [c for c in [*COLOR_ORDER, "C"] if c in seen_colors]
    return DiagnosisStats(
        total=total,
        reason_counts=dict(sorted(reasons.items(), key=lambda item: (-item[1], item[0]))),
        kind_counts={kind: kinds[kind] for kind in FailureKind if kinds[kind]},
        lands_sum=lands_sum,
        color_counts={color: colors[color] for color in ordered_colors},
    )
