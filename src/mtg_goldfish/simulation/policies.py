"""Deterministic decision policies used by the game simulator.

Every choice here is a pure function of the visible state, with card name
as the final tie-break, so identical hand/battlefield/library-head states
always produce the same choice.
"""

from __future__ import annotations

from mtg_goldfish.data.models.card import Card, LandCard
from mtg_goldfish.game.mana import enters_tapped
from mtg_goldfish.game.state import GameState
from mtg_goldfish.utils.mana import Color

from .combo import Combo

# =============================================================================
# Land drop
# =============================================================================


def required_colors(state: GameState, combo: Combo) -> Color:
    """Combo colors plus the colored pips of every non-land card in hand."""
    required = combo.requirements.colors
    for card in state.hand:
        if not card.is_land:
            required |= card.mana_cost.colors
    return required


def missing_colors(state: GameState, combo: Combo) -> Color:
    """Required colors no land on the battlefield can make yet."""
    required = required_colors(state, combo)
    return required ^ (required & state.battlefield_colors())


def choose_land_drop(
    state: GameState, combo: Combo, prefer_untapped: bool = True
) -> LandCard | None:
    """
    Pick the land to play this turn.

    Sort key, first difference wins:
        1. most currently missing required colors added
        2. untapped before tapped (reversed when ``prefer_untapped`` is False)
        3. card name
    """
    lands = state.lands_in_hand()
    if not lands:
        return None

    missing = missing_colors(state, combo)
    lands_in_play = len(state.lands())

    def key(land: LandCard) -> tuple[int, bool, str]:
        gained = bin(land.colors & missing).count("1")
        tapped = enters_tapped(land, lands_in_play, state.turn)
        return (-gained, tapped if prefer_untapped else not tapped, land.name)

    return min(lands, key=key)


# =============================================================================
# Surveil
# =============================================================================


def surveil(state: GameState, combo: Combo, amount: int, land_target: int) -> list[Card]:
    """
    Look at the top ``amount`` cards and bin or keep each one.

    A card goes to the graveyard when the combo wants it there, or when it is
    a land and the board already has ``land_target`` lands (in play plus in
    hand). Kept cards go back on top, most relevant first; ties keep library
    order.

    Returns:
        Cards put into the graveyard
    """
    looked = state.library.take(amount)
    enough_lands = len(state.lands()) + len(state.lands_in_hand()) >= land_target

    binned: list[Card] = []
    kept: list[Card] = []
    for card in looked:
        if combo.graveyard_wanted(card) or (card.is_land and enough_lands):
            binned.append(card)
        else:
            kept.append(card)

    kept.sort(key=combo.relevance, reverse=True)
    state.graveyard.extend(binned)
    state.library.put_on_top(kept)
    return binned


# =============================================================================
# Discard
# =============================================================================


def choose_discards(state: GameState, combo: Combo, count: int, land_target: int) -> list[Card]:
    """
    Pick ``count`` cards to discard from hand.

    Graveyard-wanted combo pieces go first, then lands beyond what the deck
    still needs, then the most expensive remaining card.
    """
    lands_needed = max(land_target - len(state.lands()), 0)
    lands_in_hand = len(state.lands_in_hand())

    def key(card: Card) -> tuple[int, int, str]:
        if combo.graveyard_wanted(card):
            tier = 0
        elif card.is_land and lands_in_hand > lands_needed:
            tier = 1
        elif card.is_land:
            tier = 3
        else:
            tier = 2
        return (tier, -card.mana_value, card.name)

    return sorted(state.hand, key=key)[: min(count, len(state.hand))]


# =============================================================================
# London mulligan
# =============================================================================

MAX_MULLIGANS = 3


def should_keep(hand_size: int, lands_in_hand: int) -> bool:
    """
    Keep rules per effective hand size.

    - 7 cards: keep with 2-5 lands
    - 6 cards: keep with 2-4 lands
    - 5 cards: keep with 1-4 lands
    - 4 or fewer: always keep
    """
    if hand_size >= 7:
        return 2 <= lands_in_hand <= 5
    elif hand_size == 6:
        return 2 <= lands_in_hand <= 4
    elif hand_size == 5:
        return 1 <= lands_in_hand <= 4
    else:
        return True


def choose_bottom(hand: list[Card], count: int) -> list[Card]:
    """
    Pick cards to put on the bottom after a London mulligan.

    Bottom a land while lands exceed half the hand (and more than two);
    otherwise bottom the most expensive spell.
    """
    remaining = list(hand)
    bottom: list[Card] = []
    for _ in range(count):
        lands = sorted((c for c in remaining if c.is_land), key=lambda c: c.name)
        spells = sorted(
            (c for c in remaining if not c.is_land), key=lambda c: (-c.mana_value, c.name)
        )
        if (len(lands) > len(remaining) // 2 and len(lands) > 2) or not spells:
            pick = lands[0]
        else:
            pick = spells[0]
        remaining.remove(pick)
        bottom.append(pick)
    return bottom
