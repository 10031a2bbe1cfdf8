"""Card models.

Cards are immutable reference data shared by every simulated game. The six
card kinds form a closed union discriminated by ``card_type``; code that
needs kind-specific behavior matches on the concrete model class.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from mtg_goldfish.utils.mana import Color, ManaCost, parse_colors


class LandSubtype(str, Enum):
    """Land subtypes with distinct enters-tapped rules."""

    BASIC = "basic"
    SHOCK = "shock"
    SURVEIL = "surveil"
    UTILITY = "utility"
    FASTLAND = "fastland"
    TOWN = "town"


class BaseCard(BaseModel):
    """Fields shared by every card kind."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Assigned by the catalog at load time; -1 means "not cataloged"
    card_id: int = -1
    name: str = Field(min_length=1)
    mana_cost: ManaCost = Field(default_factory=ManaCost)
    combo_tags: tuple[str, ...] = Field(
        default=(),
        description="Deck-specific tags consulted by combo requirements",
    )

    @property
    def mana_value(self) -> int:
        """Total converted cost."""
        return self.mana_cost.total

    @property
    def is_land(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        # Cataloged cards are identified by id alone
        if isinstance(other, BaseCard) and self.card_id >= 0 and other.card_id >= 0:
            return self.card_id == other.card_id
        return super().__eq__(other)

    def __hash__(self) -> int:
        if self.card_id >= 0:
            return hash(self.card_id)
        return hash((type(self).__name__, self.name))

    def __str__(self) -> str:
        return self.name


class LandCard(BaseCard):
    """A land: produces mana, may enter tapped, may surveil on entry."""

    card_type: Literal["land"] = "land"
    subtype: LandSubtype = LandSubtype.BASIC
    enters_tapped: bool = False
    colors: Color = Color.NONE
    has_surveil: bool = False
    surveil_amount: int = Field(default=0, ge=0)

    @field_validator("colors", mode="before")
    @classmethod
    def _parse_colors(cls, value: Any) -> Any:
        if isinstance(value, (str, list, tuple)):
            return parse_colors(value)
        return value

    @property
    def is_land(self) -> bool:
        return True


class CreatureCard(BaseCard):
    """A creature, optionally castable for an impending cost."""

    card_type: Literal["creature"] = "creature"
    power: int = 0
    toughness: int = 0
    is_legendary: bool = False
    creature_types: tuple[str, ...] = ()
    abilities: tuple[str, ...] = ()
    impending_cost: ManaCost | None = None
    impending_counters: int = Field(default=0, ge=0)


class SpellCard(BaseCard):
    """An instant, sorcery or enchantment."""

    card_type: Literal["instant", "sorcery", "enchantment"] = "instant"
    abilities: tuple[str, ...] = ()

    @property
    def is_permanent(self) -> bool:
        return self.card_type == "enchantment"


class SagaCard(BaseCard):
    """A saga; chapter ``i`` resolves ``chapters[i - 1]`` when lore reaches ``i``."""

    card_type: Literal["saga"] = "saga"
    chapters: tuple[str, ...] = ()


Card = Annotated[
    LandCard | CreatureCard | SpellCard | SagaCard,
    Field(discriminator="card_type"),
]

CARD_ADAPTER: TypeAdapter[Card] = TypeAdapter(Card)


def parse_card(data: dict[str, Any], card_id: int = -1) -> Card:
    """Validate one raw catalog entry into its card model."""
    return CARD_ADAPTER.validate_python({**data, "card_id": card_id})


def card_abilities(card: Card) -> tuple[str, ...]:
    """Ability tags printed on a card (chapters for sagas, none for lands)."""
    match card:
        case LandCard():
            return ()
        case CreatureCard(abilities=abilities) | SpellCard(abilities=abilities):
            return abilities
        case SagaCard(chapters=chapters):
            return chapters
    raise TypeError(f"Unknown card kind: {type(card).__name__}")
