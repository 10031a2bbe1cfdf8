"""Ability tags the simulator resolves.

Cards carry free-form ability tags; the generic engine understands only
zone-moving effects written as ``<kind>:<amount>``, e.g. ``mill:4``.
Everything else (combat keywords, card-specific text) is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

EFFECT_PATTERN = re.compile(r"^\s*(mill|surveil|draw|discard)\s*:\s*(\d+)\s*$", re.IGNORECASE)


class EffectKind(str, Enum):
    MILL = "mill"
    SURVEIL = "surveil"
    DRAW = "draw"
    DISCARD = "discard"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    amount: int


def parse_effect(tag: str) -> Effect | None:
    match = EFFECT_PATTERN.match(tag)
    if match is None:
        return None
    return Effect(EffectKind(match.group(1).lower()), int(match.group(2)))


def parse_effects(tags: tuple[str, ...]) -> list[Effect]:
    """Effects among ``tags``, in printed order."""
    return [effect for effect in map(parse_effect, tags) if effect is not None]
