"""Catalog/deck loading and error reporting for CLI commands."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from mtg_goldfish.config import get_settings
from mtg_goldfish.data.catalog import CardCatalog
from mtg_goldfish.data.decklist import load_deck
from mtg_goldfish.data.models.deck import Deck
from mtg_goldfish.exceptions import GoldfishError
from mtg_goldfish.simulation.combo import REANIMATOR_COMBO, Combo

err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging from settings; verbose shows game traces."""
    settings = get_settings()
    level = logging.INFO if verbose else getattr(logging, settings.log_level.upper())
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        force=True,
    )


class SimulationContext:
    """Lazy catalog manager for CLI."""

    def __init__(self, cards_path: Path | None = None) -> None:
        self.cards_path = cards_path or get_settings().cards_path
        self._catalog: CardCatalog | None = None

    def get_catalog(self) -> CardCatalog:
        """Get the card catalog, loading it on first use."""
        if self._catalog is None:
            self._catalog = CardCatalog.from_file(self.cards_path)
        return self._catalog

    def load_deck(self, path: Path | None = None) -> Deck:
        """Load a deck list (the configured base deck when None)."""
        return load_deck(path or get_settings().deck_path, self.get_catalog())

    def load_combo(self, path: Path | None = None) -> Combo:
        """Load a combo definition file (the reanimator combo when None)."""
        return Combo.from_file(path) if path is not None else REANIMATOR_COMBO


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print domain errors in red and exit with status 1."""
    try:
        yield
    except GoldfishError as e:
        err_console.print(f"[red]Error:[/] {e.message}")
        raise typer.Exit(1) from e


def _to_jsonable(data: Any) -> Any:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return {k: _to_jsonable(v) for k, v in dataclasses.asdict(data).items()}
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, dict):
        return {str(_to_jsonable(k)): _to_jsonable(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(v) for v in data]
    return data


def output_json(data: Any) -> None:
    """Output data as JSON (plain text, no Rich formatting)."""
    # Use regular print, not rprint, to avoid ANSI codes in JSON output
    print(json.dumps(_to_jsonable(data), indent=2, default=str))
