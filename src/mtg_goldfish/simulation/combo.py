"""Combo readiness: deck-supplied requirements evaluated against a board.

The engine knows nothing about specific cards. A deck supplies a ``Combo``:
declarative requirements (land count, colors, pieces by zone) plus an
optional predicate for anything card-text specific. The same evaluation
drives both the win check and the turn-N diagnosis, so they never disagree.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mtg_goldfish.data.models.card import Card, CreatureCard
from mtg_goldfish.exceptions import GoldfishError
from mtg_goldfish.game.mana import AvailableMana
from mtg_goldfish.game.state import GameState
from mtg_goldfish.game.zones import CounterType
from mtg_goldfish.utils.mana import COLOR_ORDER, Color, color_letters, parse_colors


class Zone(str, Enum):
    """Zones a combo piece can be found in."""

    HAND = "hand"
    BATTLEFIELD = "battlefield"
    GRAVEYARD = "graveyard"


@dataclass(frozen=True)
class BoardView:
    """Read-only snapshot of the zones and mana a combo check sees."""

    hand: tuple[Card, ...]
    battlefield: tuple[Card, ...]
    graveyard: tuple[Card, ...]
    mana: AvailableMana
    lands: int
    turn: int
    # Creatures on the battlefield able to attack this turn
    ready_attackers: tuple[Card, ...] = ()

    @classmethod
    def from_state(cls, state: GameState, mana: AvailableMana | None = None) -> BoardView:
        ready = tuple(
            p.card
            for p in state.battlefield
            if isinstance(p.card, CreatureCard)
            and p.counters[CounterType.TIME] == 0
            and p.turn_entered < state.turn
        )
        return cls(
            hand=tuple(state.hand),
            battlefield=tuple(p.card for p in state.battlefield),
            graveyard=tuple(state.graveyard),
            mana=mana if mana is not None else state.available_mana(),
            lands=len(state.lands()),
            turn=state.turn,
            ready_attackers=ready,
        )

    def zone(self, zone: Zone) -> tuple[Card, ...]:
        match zone:
            case Zone.HAND:
                return self.hand
            case Zone.BATTLEFIELD:
                return self.battlefield
            case Zone.GRAVEYARD:
                return self.graveyard
        raise ValueError(f"Unknown zone: {zone}")


class ComboPredicate(Protocol):
    """Deck-specific readiness check over a board snapshot."""

    label: str

    def __call__(self, view: BoardView) -> bool: ...


# =============================================================================
# Requirements
# =============================================================================


class ComboPiece(BaseModel):
    """A card the combo needs in one of the given zones."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Short name used in diagnoses")
    names: tuple[str, ...] = Field(default=(), description="Card names that satisfy this piece")
    tag: str | None = Field(default=None, description="Combo tag that satisfies this piece")
    zones: tuple[Zone, ...] = (Zone.HAND,)
    count: int = Field(default=1, ge=1)

    def matches(self, card: Card) -> bool:
        if card.name in self.names:
            return True
        return self.tag is not None and self.tag in card.combo_tags

    def found(self, view: BoardView) -> int:
        return sum(1 for zone in self.zones for card in view.zone(zone) if self.matches(card))

    def is_present(self, view: BoardView) -> bool:
        return self.found(view) >= self.count

    @property
    def wanted_in_graveyard(self) -> bool:
        """Pieces the deck wants milled or surveilled away rather than drawn."""
        return Zone.GRAVEYARD in self.zones and Zone.HAND not in self.zones


class ComboRequirements(BaseModel):
    """Declarative part of a combo: lands, colors and pieces."""

    model_config = ConfigDict(frozen=True)

    min_lands: int = Field(default=0, ge=0)
    colors: Color = Color.NONE
    pieces: tuple[ComboPiece, ...] = ()

    @field_validator("colors", mode="before")
    @classmethod
    def _parse_colors(cls, value: Any) -> Any:
        if isinstance(value, (str, list, tuple)):
            return parse_colors(value)
        return value

    @property
    def color_letters(self) -> list[str]:
        return [c for c in COLOR_ORDER if self.colors & Color[c]]


# =============================================================================
# Diagnosis
# =============================================================================


class FailureKind(str, Enum):
    """Diagnosis categories, in priority order."""

    INSUFFICIENT_LANDS = "insufficient_lands"
    MISSING_COLOR = "missing_color"
    MISSING_PIECE = "missing_piece"
    COMBO_INCOMPLETE = "combo_incomplete"
    COMBO_AVAILABLE = "combo_available"


@dataclass(frozen=True)
class FailureReason:
    """One diagnosis category plus its detail (color letter, piece label...)."""

    kind: FailureKind
    detail: str | None = None

    @property
    def is_success(self) -> bool:
        return self.kind is FailureKind.COMBO_AVAILABLE

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.detail}" if self.detail else self.kind.value


COMBO_AVAILABLE = FailureReason(FailureKind.COMBO_AVAILABLE)


@dataclass(frozen=True)
class Combo:
    """Requirements plus an optional deck-specific predicate."""

    name: str
    requirements: ComboRequirements
    predicate: ComboPredicate | Callable[[BoardView], bool] | None = None

    def diagnose(self, view: BoardView) -> FailureReason:
        """
        Classify a board into exactly one category, first match wins.

        Order: land count, each required color (WUBRG), colors needing
        distinct lands, each piece in declaration order, custom predicate,
        then success.
        """
        reqs = self.requirements
        if view.mana.total < reqs.min_lands:
            return FailureReason(FailureKind.INSUFFICIENT_LANDS)

        available = view.mana.colors
        for letter in reqs.color_letters:
            if not available & Color[letter]:
                return FailureReason(FailureKind.MISSING_COLOR, letter)
        if reqs.colors and not view.mana.can_produce_together(reqs.colors):
            return FailureReason(FailureKind.MISSING_COLOR, color_letters(reqs.colors))

        for piece in reqs.pieces:
            if not piece.is_present(view):
                return FailureReason(FailureKind.MISSING_PIECE, piece.label)

        if self.predicate is not None and not self.predicate(view):
            return FailureReason(
                FailureKind.COMBO_INCOMPLETE, getattr(self.predicate, "label", None)
            )
        return COMBO_AVAILABLE

    def is_ready(self, view: BoardView) -> bool:
        return self.diagnose(view).is_success

    def graveyard_wanted(self, card: Card) -> bool:
        """Whether a card is a piece the combo wants in the graveyard."""
        return any(p.wanted_in_graveyard and p.matches(card) for p in self.requirements.pieces)

    def relevance(self, card: Card) -> int:
        """Rank a card for surveil keeps: hand pieces first, then colors needed."""
        score = 0
        for piece in self.requirements.pieces:
            if piece.matches(card) and Zone.HAND in piece.zones:
                score += 10
        if card.is_land:
            score += 1
        return score

    @classmethod
    def always(cls) -> Combo:
        """Trivial combo that is ready on any board."""
        return cls(name="always", requirements=ComboRequirements())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Combo:
        if not isinstance(data, dict):
            raise GoldfishError("Invalid combo definition: expected a JSON object")
        try:
            requirements = ComboRequirements.model_validate(data.get("requirements", data))
        except ValidationError as e:
            raise GoldfishError(f"Invalid combo definition: {e}") from e
        predicate = LethalDamage() if data.get("lethal_check") else None
        return cls(name=data.get("name", "custom"), requirements=requirements, predicate=predicate)

    @classmethod
    def from_file(cls, path: Path) -> Combo:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise GoldfishError(f"Cannot read combo file {path}: {e}") from e
        return cls.from_dict(data)


# =============================================================================
# Reanimator combo
# =============================================================================

ENABLER = "Superior Spider-Man"
REANIMATION_TARGET = "Bringer of the Last Gift"
PAYOFF = "Terror of the Peaks"
HASTE_LORD = "Ardyn, the Usurper"


@dataclass(frozen=True)
class LethalDamage:
    """Checks the Terror of the Peaks triggers from a mass reanimation are lethal.

    The enabler enters as a copy of the reanimation target (6 power) and
    every creature in the graveyard returns at once; each entering creature
    deals damage equal to its power per payoff in play. Payoffs entering
    together trigger each other. Creatures that can attack add their power.
    """

    opponent_life: int = 20
    copy_power: int = 6
    label: str = "insufficient damage"

    def damage(self, view: BoardView) -> int:
        haste_lord = any(card.name == HASTE_LORD for card in view.battlefield)

        graveyard_creatures = [c for c in view.graveyard if isinstance(c, CreatureCard)]
        payoffs_in_graveyard = sum(1 for c in graveyard_creatures if c.name == PAYOFF)
        payoffs_in_play = sum(1 for c in view.battlefield if c.name == PAYOFF)
        payoffs = payoffs_in_play + payoffs_in_graveyard

        entering_power = sum(c.power for c in graveyard_creatures)
        damage = (self.copy_power + entering_power) * payoffs
        if payoffs_in_graveyard > 1:
            damage += 3 * payoffs_in_graveyard * (payoffs_in_graveyard - 1)

        combat = sum(c.power for c in view.ready_attackers if isinstance(c, CreatureCard))
        if haste_lord:
            combat += sum(c.power for c in graveyard_creatures if "Demon" in c.creature_types)
        return damage + combat

    def __call__(self, view: BoardView) -> bool:
        return self.damage(view) >= self.opponent_life


REANIMATOR_REQUIREMENTS = ComboRequirements(
    min_lands=4,
    colors=Color.U | Color.B | Color.G,
    pieces=(
        ComboPiece(label="enabler", names=(ENABLER,), tag="enabler", zones=(Zone.HAND,)),
        ComboPiece(
            label="reanimation_target",
            names=(REANIMATION_TARGET,),
            tag="reanimation_target",
            zones=(Zone.GRAVEYARD,),
        ),
        ComboPiece(
            label="payoff",
            names=(PAYOFF,),
            tag="payoff",
            zones=(Zone.GRAVEYARD, Zone.BATTLEFIELD),
        ),
    ),
)

REANIMATOR_COMBO = Combo(
    name="reanimator",
    requirements=REANIMATOR_REQUIREMENTS,
    predicate=LethalDamage(),
)
