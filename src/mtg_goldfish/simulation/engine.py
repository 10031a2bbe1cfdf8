"""Single-game goldfish simulator.

A game is a pure function of (deck, seed, combo, config): it shuffles,
draws an opening hand, then plays turns until the combo is ready or the
turn cap is reached.

Turn procedure:
    untap -> draw (skipped turn 1 on the play) -> saga lore ->
    land drop (+ surveil on entry) -> combo check -> cast effect spells ->
    end step (time counters, discard to hand size)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from mtg_goldfish.config import Settings
from mtg_goldfish.data.models.card import Card, CreatureCard, SagaCard, SpellCard, card_abilities
from mtg_goldfish.data.models.deck import Deck
from mtg_goldfish.game.state import GameState
from mtg_goldfish.game.zones import CounterType, Library, Permanent
from mtg_goldfish.rng import GameRng
from mtg_goldfish.utils.mana import Color, ManaCost, color_letters

from .combo import REANIMATOR_COMBO, BoardView, Combo, Zone
from .effects import Effect, EffectKind, parse_effects
from .policies import (
    MAX_MULLIGANS,
    choose_bottom,
    choose_discards,
    choose_land_drop,
    should_keep,
    surveil,
)

logger = logging.getLogger(__name__)

PlayOrder = Literal["random", "play", "draw"]


@dataclass(frozen=True)
class SimulationConfig:
    """Per-run game options."""

    turn_cap: int = 20
    opening_hand_size: int = 7
    max_hand_size: int = 7
    play_order: PlayOrder = "random"
    mulligan: bool = False
    # Lands the deck wants in total; surveil and discard bin lands beyond it
    land_target: int = 5
    prefer_untapped: bool = True
    cast_spells: bool = True
    # Colors whose first simultaneous availability is recorded (combo colors if None)
    tracked_colors: Color | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> SimulationConfig:
        values: dict[str, object] = {
            "turn_cap": settings.turn_cap,
            "opening_hand_size": settings.opening_hand_size,
        }
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class GameResult:
    """Outcome of one game."""

    seed: int
    on_the_play: bool
    win_turn: int | None = None
    colors_turn: int | None = None
    mulligans: int = 0

    @property
    def won(self) -> bool:
        return self.win_turn is not None


class Game:
    """One goldfish game; owns its RNG and zone state exclusively."""

    def __init__(
        self,
        deck: Deck,
        seed: int,
        combo: Combo | None = None,
        config: SimulationConfig | None = None,
        trace: bool = False,
    ) -> None:
        self.deck = deck
        self.seed = seed
        self.combo = combo or REANIMATOR_COMBO
        self.config = config or SimulationConfig()
        self.trace = trace
        self.rng = GameRng(seed)
        self.state = GameState(library=Library(deck.cards))
        self.colors_turn: int | None = None
        self._tracked = (
            self.config.tracked_colors
            if self.config.tracked_colors is not None
            else self.combo.requirements.colors
        )

    def _log(self, message: str, *args: object) -> None:
        if self.trace:
            logger.info("[seed %d turn %d] " + message, self.seed, self.state.turn, *args)

    # =========================================================================
    # Setup
    # =========================================================================

    def setup(self) -> None:
        """Decide play order, shuffle, draw the opening hand, mulligan."""
        state = self.state
        match self.config.play_order:
            case "random":
                state.on_the_play = self.rng.random() < 0.5
            case "play":
                state.on_the_play = True
            case "draw":
                state.on_the_play = False

        state.library.shuffle(self.rng)
        state.draw(self.config.opening_hand_size)
        if self.config.mulligan:
            self._london_mulligan()

        self._log(
            "%s, opening hand: %s",
            "on the play" if state.on_the_play else "on the draw",
            ", ".join(card.name for card in state.hand),
        )

    def _london_mulligan(self) -> None:
        state = self.state
        while state.mulligans < MAX_MULLIGANS and not should_keep(
            len(state.hand) - state.mulligans, len(state.lands_in_hand())
        ):
            state.library.put_on_bottom(state.hand)
            state.hand.clear()
            state.library.shuffle(self.rng)
            state.draw(self.config.opening_hand_size)
            state.mulligans += 1

        if state.mulligans:
            bottom = choose_bottom(state.hand, state.mulligans)
            for card in bottom:
                state.hand.remove(card)
            state.library.put_on_bottom(bottom)
            self._log(
                "kept after %d mulligan(s), bottomed %s",
                state.mulligans,
                [c.name for c in bottom],
            )

    # =========================================================================
    # Turn steps
    # =========================================================================

    def begin_turn(self) -> None:
        """Untap, draw and advance sagas."""
        state = self.state
        state.turn += 1
        state.land_played = False
        state.untap_all()

        if state.turn == 1 and state.on_the_play:
            self._log("no draw on the play")
        else:
            drawn = state.draw()
            if drawn:
                self._log("draw %s", drawn[0].name)

        for permanent in list(state.battlefield):
            if isinstance(permanent.card, SagaCard) and permanent.turn_entered < state.turn:
                self._advance_saga(permanent)

    def play_land(self) -> Permanent | None:
        land = choose_land_drop(self.state, self.combo, self.config.prefer_untapped)
        if land is None:
            return None
        permanent = self.state.play_land(land)
        self._log("play %s%s", land.name, " (tapped)" if permanent.tapped else "")
        if land.has_surveil or land.surveil_amount:
            self._surveil(land.surveil_amount or 1)
        return permanent

    def main_phase(self) -> bool:
        """Land drop and combo check; returns True when the combo is ready."""
        self.play_land()

        mana = self.state.available_mana()
        if self.colors_turn is None and mana.can_produce_together(self._tracked):
            self.colors_turn = self.state.turn
            self._log("%s available", color_letters(self._tracked) or "colors")

        if self.combo.is_ready(BoardView.from_state(self.state, mana)):
            self._log("combo ready")
            return True

        if self.config.cast_spells:
            self.cast_spells()
        return False

    def end_step(self) -> None:
        state = self.state
        for permanent in state.battlefield:
            permanent.remove_counter(CounterType.TIME)

        excess = len(state.hand) - self.config.max_hand_size
        if excess > 0:
            self._discard(excess)

    # =========================================================================
    # Casting
    # =========================================================================

    def _held(self, card: Card) -> bool:
        """Combo pieces that must not be cast (needed in hand or graveyard)."""
        return any(
            piece.matches(card) and Zone.BATTLEFIELD not in piece.zones
            for piece in self.combo.requirements.pieces
        )

    def _worth_casting(self, card: Card) -> bool:
        match card:
            case CreatureCard() | SagaCard():
                return True
            case SpellCard():
                return card.is_permanent or bool(parse_effects(card.abilities))
        return False

    def _next_spell(self) -> tuple[Card, ManaCost, bool] | None:
        """Most expensive affordable spell in hand, name as tie-break."""
        mana = self.state.available_mana()
        candidates: list[tuple[int, str, Card, ManaCost, bool]] = []
        for card in self.state.hand:
            if card.is_land or self._held(card) or not self._worth_casting(card):
                continue
            if mana.can_pay(card.mana_cost):
                candidates.append((-card.mana_value, card.name, card, card.mana_cost, False))
            elif isinstance(card, CreatureCard) and card.impending_cost is not None:
                if mana.can_pay(card.impending_cost):
                    cost = card.impending_cost
                    candidates.append((-cost.total, card.name, card, cost, True))
        if not candidates:
            return None
        _, _, card, cost, impending = min(candidates, key=lambda c: (c[0], c[1]))
        return card, cost, impending

    def cast_spells(self) -> None:
        while (choice := self._next_spell()) is not None:
            card, cost, impending = choice
            if not self.state.pay(cost):
                break
            self._log("cast %s%s", card.name, " (impending)" if impending else "")
            self._resolve(card, impending)

    def _resolve(self, card: Card, impending: bool) -> None:
        state = self.state
        match card:
            case CreatureCard():
                permanent = state.put_onto_battlefield(card)
                if impending:
                    permanent.add_counters(CounterType.TIME, card.impending_counters)
            case SagaCard():
                permanent = state.put_onto_battlefield(card)
                self._advance_saga(permanent)
                return
            case SpellCard() if card.is_permanent:
                state.put_onto_battlefield(card)
            case SpellCard():
                state.discard(card)
        self._resolve_effects(parse_effects(card_abilities(card)))

    def _advance_saga(self, permanent: Permanent) -> None:
        assert isinstance(permanent.card, SagaCard)
        chapters = permanent.card.chapters
        lore = permanent.add_counters(CounterType.LORE)
        if lore <= len(chapters):
            self._log("%s chapter %d", permanent.card.name, lore)
            self._resolve_effects(parse_effects((chapters[lore - 1],)))
        if lore >= len(chapters) and any(p is permanent for p in self.state.battlefield):
            self.state.battlefield.remove(permanent)
            self.state.graveyard.append(permanent.card)

    # =========================================================================
    # Effects
    # =========================================================================

    def _resolve_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            match effect.kind:
                case EffectKind.MILL:
                    milled = self.state.mill(effect.amount)
                    self._log("mill %s", [c.name for c in milled])
                case EffectKind.DRAW:
                    self.state.draw(effect.amount)
                case EffectKind.SURVEIL:
                    self._surveil(effect.amount)
                case EffectKind.DISCARD:
                    self._discard(effect.amount)

    def _surveil(self, amount: int) -> None:
        binned = surveil(self.state, self.combo, amount, self.config.land_target)
        if binned:
            self._log("surveil %d, binned %s", amount, [c.name for c in binned])

    def _discard(self, count: int) -> None:
        for card in choose_discards(self.state, self.combo, count, self.config.land_target):
            self.state.discard(card)
            self._log("discard %s", card.name)

    # =========================================================================
    # Driver
    # =========================================================================

    def result(self, win_turn: int | None = None) -> GameResult:
        return GameResult(
            seed=self.seed,
            on_the_play=self.state.on_the_play,
            win_turn=win_turn,
            colors_turn=self.colors_turn,
            mulligans=self.state.mulligans,
        )

    def play(self) -> GameResult:
        """Run to exactly one outcome: a win turn or the turn cap."""
        self.setup()
        for _ in range(self.config.turn_cap):
            self.begin_turn()
            if self.main_phase():
                self._log("win")
                return self.result(self.state.turn)
            self.end_step()
        self._log("no win by turn %d", self.config.turn_cap)
        return self.result()


def run_game(
    deck: Deck,
    seed: int,
    combo: Combo | None = None,
    config: SimulationConfig | None = None,
    trace: bool = False,
) -> GameResult:
    """Simulate one game and return its result."""
    return Game(deck, seed, combo=combo, config=config, trace=trace).play()
