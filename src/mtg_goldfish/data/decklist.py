"""Deck list loading, non-land extraction and deck saving.

Deck lists use the plain text format::

    # comment
    // comment
    4 Superior Spider-Man
    2 Watery Grave
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from mtg_goldfish.exceptions import CardNotFoundError, DeckLoadError, DeckParseError

from .catalog import CardCatalog
from .models.card import Card
from .models.deck import Deck, FixedCards

logger = logging.getLogger(__name__)

DECK_LINE_PATTERN = re.compile(r"^(\d+)\s+(.+?)\s*$")
COMMENT_PREFIXES = ("#", "//")


def parse_deck_list(text: str, catalog: CardCatalog, name: str = "deck") -> Deck:
    """
    Parse a deck list into a Deck.

    Args:
        text: Deck list text, one ``N Card Name`` entry per line
        catalog: Catalog used to resolve card names
        name: Name given to the resulting deck

    Returns:
        Deck with cards in list order

    Raises:
        DeckParseError: On a malformed line, a zero count or an unknown card.
            For unknown cards ``token`` is the offending card name.
    """
    cards: list[Card] = []

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        match = DECK_LINE_PATTERN.match(line)
        if match is None:
            raise DeckParseError(line_no, line, f"expected 'N Card Name', got {line!r}")

        count = int(match.group(1))
        card_name = match.group(2)
        if count < 1:
            raise DeckParseError(line_no, match.group(1), f"count must be positive for {card_name}")

        try:
            card = catalog.get(card_name)
        except CardNotFoundError as e:
            raise DeckParseError(line_no, card_name, f"card not found: {card_name}") from e

        cards.extend([card] * count)

    return Deck(name=name, cards=tuple(cards))


def load_deck(path: Path, catalog: CardCatalog) -> Deck:
    """Load a deck list file; the deck is named after the file stem."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DeckLoadError(str(path), str(e)) from e
    deck = parse_deck_list(text, catalog, name=path.stem)
    logger.info("Loaded deck %s: %d cards (%d lands)", deck.name, deck.size, deck.land_count)
    return deck


def extract_fixed_cards(deck: Deck) -> FixedCards:
    """Split off the non-land portion of a deck, sorted by name."""
    counts = deck.counts()
    lands = {card.name for card in deck.cards if card.is_land}
    entries = sorted((name, count) for name, count in counts.items() if name not in lands)
    return FixedCards(entries=tuple(entries))


# =============================================================================
# Saving
# =============================================================================


@dataclass
class DeckSaveParams:
    """Run metadata written into a saved deck's header."""

    fixed_cards: FixedCards
    strategy: str
    num_simulations: int
    win_rate: float
    avg_win_turn: float
    turn_distribution: dict[int, int] = field(default_factory=dict)


def sorted_by_count(counts: dict[str, int]) -> list[tuple[str, int]]:
    """Order entries by count descending, then name."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def deck_hash(lands: dict[str, int], fixed: FixedCards) -> str:
    """Short content hash of a full deck (order independent)."""
    combined: dict[str, int] = dict(fixed.entries)
    for name, count in lands.items():
        combined[name] = combined.get(name, 0) + count
    key = "\n".join(f"{count} {name}" for name, count in sorted(combined.items()) if count)
    return hashlib.sha256(key.encode()).hexdigest()[:12]


def save_deck(lands: dict[str, int], params: DeckSaveParams, output_dir: Path) -> Path:
    """
    Persist a land configuration merged with the fixed cards.

    Args:
        lands: Land name to copy count
        params: Run metadata for the header
        output_dir: Directory to write into (created if missing)

    Returns:
        Path of the written ``deck_<hash>.txt`` file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    digest = deck_hash(lands, params.fixed_cards)
    path = output_dir / f"deck_{digest}.txt"

    total_wins = sum(params.turn_distribution.values())
    land_total = sum(lands.values())

    lines = [
        "# MTG Reanimator Deck",
        f"# Generated: {datetime.now():%Y-%m-%d %H:%M:%S}",
        f"# Hash: {digest}",
        "#",
        "# Optimization Results",
        f"# Strategy: {params.strategy}",
        f"# Simulations: {params.num_simulations}",
        f"# Win rate: {params.win_rate * 100:.1f}%",
        f"# Average win turn: {params.avg_win_turn:.3f}",
        "#",
        "# Turn Distribution",
    ]
    for turn, count in sorted(params.turn_distribution.items()):
        pct = count / total_wins * 100 if total_wins else 0.0
        lines.append(f"# Turn {turn}: {count} ({pct:.1f}%)")
    lines.append("")

    lines.append(f"# Fixed cards ({params.fixed_cards.total})")
    lines.extend(f"{count} {name}" for name, count in params.fixed_cards.entries)
    lines.append("")

    lines.append(f"# Lands ({land_total})")
    lines.extend(f"{count} {name}" for name, count in sorted_by_count(lands) if count)

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Saved deck to %s", path)
    return path
