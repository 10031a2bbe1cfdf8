"""Truncated games: play to a cutoff turn and explain the board.

Turns before the cutoff are played in full. On the cutoff turn the game
stops at the start of the main phase (after untap, draw and saga lore);
the land that would be played counts if it would enter untapped.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from mtg_goldfish.data.models.deck import Deck
from mtg_goldfish.game.mana import AvailableMana, enters_tapped
from mtg_goldfish.utils.mana import Color, color_letters

from .combo import BoardView, Combo, FailureReason
from .engine import Game, SimulationConfig
from .policies import choose_land_drop

DEFAULT_CUTOFF_TURN = 4


@dataclass(frozen=True)
class TurnDiagnosis:
    """Board classification at the cutoff turn."""

    seed: int
    reason: FailureReason
    lands_count: int
    colors_available: dict[str, bool] = field(default_factory=dict)

    @property
    def combo_ready(self) -> bool:
        return self.reason.is_success


def run_game_to_turn(
    deck: Deck,
    seed: int,
    combo: Combo | None = None,
    config: SimulationConfig | None = None,
    cutoff_turn: int = DEFAULT_CUTOFF_TURN,
    trace: bool = False,
) -> TurnDiagnosis:
    """
    Play a game up to ``cutoff_turn`` and diagnose the board.

    Args:
        deck: Deck to shuffle
        seed: Game seed; same seed, same diagnosis
        combo: Combo whose readiness is classified
        config: Game options (the turn cap is ignored)
        cutoff_turn: Turn whose main phase is inspected (>= 1)
        trace: Log each step

    Returns:
        TurnDiagnosis with exactly one reason
    """
    if cutoff_turn < 1:
        raise ValueError(f"cutoff_turn must be >= 1, got {cutoff_turn}")

    game = Game(deck, seed, combo=combo, config=config, trace=trace)
    game.setup()
    for _ in range(cutoff_turn - 1):
        game.begin_turn()
        game.main_phase()
        game.end_step()
    game.begin_turn()

    state = game.state
    mana = state.available_mana()
    lands_count = len(state.lands())

    land = choose_land_drop(state, game.combo, game.config.prefer_untapped)
    if land is not None and not enters_tapped(land, lands_count, state.turn):
        mana = AvailableMana(mana.sources + (land.colors,))
        lands_count += 1

    view = replace(BoardView.from_state(state, mana), lands=lands_count)
    reason = game.combo.diagnose(view)

    tracked = game.config.tracked_colors
    if tracked is None:
        tracked = game.combo.requirements.colors
    colors_available = {
        letter: bool(mana.colors & Color[letter]) for letter in color_letters(tracked)
    }

    return TurnDiagnosis(
        seed=seed,
        reason=reason,
        lands_count=lands_count,
        colors_available=colors_available,
    )
