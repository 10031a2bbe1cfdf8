"""Mana cost parsing and color set utilities."""

from __future__ import annotations

import re
from enum import IntFlag
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mtg_goldfish.exceptions import ManaCostError


class Color(IntFlag):
    """Color bitset. Containment is ``required & available == required``."""

    NONE = 0
    W = 1
    U = 2
    B = 4
    R = 8
    G = 16
    C = 32


COLOR_ORDER = ["W", "U", "B", "R", "G"]

COLOR_NAMES = {
    "W": "White",
    "U": "Blue",
    "B": "Black",
    "R": "Red",
    "G": "Green",
    "C": "Colorless",
}

# Field name on ManaCost for each pip symbol
_PIP_FIELDS = {
    "W": "white",
    "U": "blue",
    "B": "black",
    "R": "red",
    "G": "green",
    "C": "colorless",
}

MANA_SYMBOL_PATTERN = re.compile(r"\{([^}]+)\}")


def parse_colors(symbols: str | list[str] | tuple[str, ...]) -> Color:
    """
    Parse color letters into a Color bitset.

    Args:
        symbols: Either a string like "UBG" or a sequence like ["U", "B", "G"]

    Returns:
        Color bitset with one bit per color
    """
    result = Color.NONE
    for symbol in symbols:
        key = symbol.strip().upper()
        if not key:
            continue
        if key not in Color.__members__ or key == "NONE":
            raise ManaCostError(symbol)
        result |= Color[key]
    return result


def color_letters(colors: Color) -> str:
    """Render a Color bitset as letters in WUBRG(C) order."""
    return "".join(c for c in [*COLOR_ORDER, "C"] if colors & Color[c])


def contains(available: Color, required: Color) -> bool:
    """Check whether ``available`` is a superset of ``required``."""
    return available & required == required


class ManaCost(BaseModel):
    """A mana cost: per-color pip counts plus generic mana.

    Accepts either a mapping of fields or a cost string like ``"{2}{U}{B}"``.
    """

    model_config = ConfigDict(frozen=True)

    white: int = Field(default=0, ge=0)
    blue: int = Field(default=0, ge=0)
    black: int = Field(default=0, ge=0)
    red: int = Field(default=0, ge=0)
    green: int = Field(default=0, ge=0)
    colorless: int = Field(default=0, ge=0)
    generic: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _parse_string(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, str):
            return parse_mana_cost(data)
        return data

    @property
    def total(self) -> int:
        """Converted mana cost."""
        return (
            self.white
            + self.blue
            + self.black
            + self.red
            + self.green
            + self.colorless
            + self.generic
        )

    @property
    def colors(self) -> Color:
        """Colors with at least one pip (colorless excluded)."""
        result = Color.NONE
        for symbol in COLOR_ORDER:
            if getattr(self, _PIP_FIELDS[symbol]):
                result |= Color[symbol]
        return result

    def pips(self) -> list[Color]:
        """Expand colored and colorless requirements into one entry per pip."""
        result: list[Color] = []
        for symbol, field in _PIP_FIELDS.items():
            result.extend([Color[symbol]] * getattr(self, field))
        return result

    def __str__(self) -> str:
        parts = [f"{{{self.generic}}}"] if self.generic else []
        for symbol, field in _PIP_FIELDS.items():
            parts.extend([f"{{{symbol}}}"] * getattr(self, field))
        return "".join(parts)


def parse_mana_cost(mana_cost: str | None) -> dict[str, int]:
    """
    Parse a mana cost string into ManaCost fields.

    Args:
        mana_cost: Mana cost string like "{2}{U}{B}" or "{C}{G}"

    Returns:
        Dict of ManaCost field values

    Raises:
        ManaCostError: If a symbol is not a number or one of W, U, B, R, G, C
    """
    fields: dict[str, int] = {}
    if not mana_cost:
        return fields

    leftover = MANA_SYMBOL_PATTERN.sub("", mana_cost).strip()
    if leftover:
        raise ManaCostError(leftover)

    for symbol in MANA_SYMBOL_PATTERN.findall(mana_cost):
        symbol_upper = symbol.strip().upper()

        if symbol_upper.isdigit():
            fields["generic"] = fields.get("generic", 0) + int(symbol_upper)
            continue

        field = _PIP_FIELDS.get(symbol_upper)
        if field is None:
            raise ManaCostError(symbol)
        fields[field] = fields.get(field, 0) + 1

    return fields
