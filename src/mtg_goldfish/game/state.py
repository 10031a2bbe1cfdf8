"""Mutable state of one in-progress game."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from mtg_goldfish.data.models.card import Card, LandCard
from mtg_goldfish.utils.mana import Color, ManaCost

from .mana import AvailableMana, choose_sources, enters_tapped
from .zones import Library, Permanent


@dataclass
class GameState:
    """Zone state owned by a single simulation run.

    Cards only move between zones; ``card_ids()`` always equals the deck's
    multiset.
    """

    library: Library
    hand: list[Card] = field(default_factory=list)
    battlefield: list[Permanent] = field(default_factory=list)
    graveyard: list[Card] = field(default_factory=list)
    turn: int = 0
    on_the_play: bool = True
    land_played: bool = False
    mulligans: int = 0

    # =========================================================================
    # Views
    # =========================================================================

    def card_ids(self) -> Counter[int]:
        """Multiset of catalog ids across all four zones."""
        ids: Counter[int] = Counter(card.card_id for card in self.library)
        ids.update(card.card_id for card in self.hand)
        ids.update(permanent.card.card_id for permanent in self.battlefield)
        ids.update(card.card_id for card in self.graveyard)
        return ids

    def lands(self) -> list[Permanent]:
        return [p for p in self.battlefield if p.is_land]

    def untapped_lands(self) -> list[Permanent]:
        return [p for p in self.battlefield if p.is_land and not p.tapped]

    def lands_in_hand(self) -> list[LandCard]:
        return [card for card in self.hand if isinstance(card, LandCard)]

    def battlefield_colors(self) -> Color:
        """Colors producible by any land on the battlefield, tapped or not."""
        result = Color.NONE
        for permanent in self.lands():
            assert isinstance(permanent.card, LandCard)
            result |= permanent.card.colors
        return result

    def available_mana(self) -> AvailableMana:
        sources = []
        for permanent in self.untapped_lands():
            assert isinstance(permanent.card, LandCard)
            sources.append(permanent.card.colors)
        return AvailableMana(tuple(sources))

    # =========================================================================
    # Zone moves
    # =========================================================================

    def draw(self, count: int = 1) -> list[Card]:
        """Draw up to ``count`` cards; an empty library draws nothing."""
        drawn = self.library.take(count)
        self.hand.extend(drawn)
        return drawn

    def mill(self, count: int) -> list[Card]:
        milled = self.library.take(count)
        self.graveyard.extend(milled)
        return milled

    def discard(self, card: Card) -> None:
        self.hand.remove(card)
        self.graveyard.append(card)

    def play_land(self, land: LandCard) -> Permanent:
        """Move a land from hand to battlefield, applying enters-tapped rules."""
        tapped = enters_tapped(land, len(self.lands()), self.turn)
        self.hand.remove(land)
        permanent = Permanent(card=land, tapped=tapped, turn_entered=self.turn)
        self.battlefield.append(permanent)
        self.land_played = True
        return permanent

    def put_onto_battlefield(self, card: Card) -> Permanent:
        """Move a resolved permanent spell from hand to battlefield."""
        self.hand.remove(card)
        permanent = Permanent(card=card, turn_entered=self.turn)
        self.battlefield.append(permanent)
        return permanent

    def pay(self, cost: ManaCost) -> bool:
        """Tap lands for ``cost``; returns False and taps nothing if unpayable."""
        untapped = self.untapped_lands()
        sources = [p.card.colors for p in untapped if isinstance(p.card, LandCard)]
        chosen = choose_sources(sources, cost)
        if chosen is None:
            return False
        for index in chosen:
            untapped[index].tapped = True
        return True

    def untap_all(self) -> None:
        for permanent in self.battlefield:
            permanent.tapped = False
