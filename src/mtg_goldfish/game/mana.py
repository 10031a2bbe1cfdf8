"""Mana availability from untapped lands.

Each land produces one mana of any color in its color set. Paying a cost
is an assignment problem: every colored pip needs its own land able to
produce that color, and generic mana is paid by whatever is left.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from mtg_goldfish.data.models.card import LandCard, LandSubtype
from mtg_goldfish.utils.mana import Color, ManaCost, contains

# Fastlands enter tapped once this many other lands are in play
FASTLAND_THRESHOLD = 3
# Towns enter tapped from this turn on
TOWN_TAPPED_FROM_TURN = 4


def enters_tapped(land: LandCard, lands_in_play: int, turn: int) -> bool:
    """Whether a land enters tapped given the board it joins."""
    match land.subtype:
        case LandSubtype.FASTLAND:
            return lands_in_play >= FASTLAND_THRESHOLD
        case LandSubtype.TOWN:
            return turn >= TOWN_TAPPED_FROM_TURN
        case LandSubtype.SHOCK | LandSubtype.UTILITY:
            return False
        case _:
            return land.enters_tapped


def match_pips(pips: Sequence[Color], sources: Sequence[Color]) -> list[int] | None:
    """
    Assign each pip to a distinct source able to produce it.

    Augmenting-path bipartite matching; sources earlier in the sequence are
    tried first, so callers order them by preference.

    Args:
        pips: One Color bit per required pip
        sources: Color set of each available mana source

    Returns:
        Source index for each pip, or None if no full assignment exists
    """
    owner: list[int | None] = [None] * len(sources)

    def assign(pip: int, seen: set[int]) -> bool:
        for index, colors in enumerate(sources):
            if index in seen or not colors & pips[pip]:
                continue
            seen.add(index)
            current = owner[index]
            if current is None or assign(current, seen):
                owner[index] = pip
                return True
        return False

    for pip in range(len(pips)):
        if not assign(pip, set()):
            return None

    result = [0] * len(pips)
    for index, pip in enumerate(owner):
        if pip is not None:
            result[pip] = index
    return result


@dataclass(frozen=True)
class AvailableMana:
    """Snapshot of the mana the untapped lands can make this turn."""

    sources: tuple[Color, ...] = ()

    @property
    def total(self) -> int:
        return len(self.sources)

    @property
    def colors(self) -> Color:
        """Union of every color some source can make."""
        result = Color.NONE
        for colors in self.sources:
            result |= colors
        return result

    def has_colors(self, required: Color) -> bool:
        """Each required color can be made, possibly by the same land."""
        return contains(self.colors, required)

    def can_produce_together(self, required: Color) -> bool:
        """Each required color can be made at the same time by distinct lands."""
        pips = [color for color in Color if color and color & required]
        return match_pips(pips, self.sources) is not None

    def can_pay(self, cost: ManaCost) -> bool:
        if cost.total > self.total:
            return False
        return match_pips(cost.pips(), self.sources) is not None

    def without(self, indices: Sequence[int]) -> AvailableMana:
        """Mana left after tapping the sources at ``indices``."""
        used = set(indices)
        return AvailableMana(tuple(c for i, c in enumerate(self.sources) if i not in used))


def choose_sources(sources: Sequence[Color], cost: ManaCost) -> list[int] | None:
    """
    Pick which sources to tap for a cost.

    Lands that make fewer colors are spent first so flexible lands stay
    available for later spells.

    Returns:
        Indices into ``sources`` to tap, or None if the cost cannot be paid
    """
    if cost.total > len(sources):
        return None
    order = sorted(range(len(sources)), key=lambda i: (bin(sources[i]).count("1"), i))
    ordered = [sources[i] for i in order]

    assignment = match_pips(cost.pips(), ordered)
    if assignment is None:
        return None

    chosen = set(assignment)
    for position in range(len(ordered)):
        if len(chosen) >= cost.total:
            break
        chosen.add(position)
    return sorted(order[position] for position in chosen)
