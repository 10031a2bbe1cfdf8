"""Custom exceptions for MTG Goldfish."""

from __future__ import annotations


class GoldfishError(Exception):
    """Base exception for MTG Goldfish errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Catalog errors
# =============================================================================


class CardNotFoundError(GoldfishError):
    """Raised when a card is not found in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Card not found: {name}")
        self.name = name


class CatalogError(GoldfishError):
    """Raised when the card catalog cannot be read or an entry is malformed."""

    def __init__(self, message: str, entry: str | None = None):
        super().__init__(message)
        self.entry = entry


# =============================================================================
# Deck list errors
# =============================================================================


class ManaCostError(ValueError):
    """Raised for an unknown mana symbol.

    Subclasses ValueError so pydantic validators turn it into a validation
    error on the owning card entry.
    """

    def __init__(self, symbol: str):
        super().__init__(f"Invalid mana symbol: {{{symbol}}}")
        self.symbol = symbol


class DeckParseError(GoldfishError):
    """Raised when a deck list line cannot be parsed or resolved."""

    def __init__(self, line: int, token: str, reason: str):
        super().__init__(f"Invalid deck list at line {line}: {reason}")
        self.line = line
        self.token = token
        self.reason = reason


class DeckLoadError(GoldfishError):
    """Raised when a deck list file cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read deck list {path}: {reason}")
        self.path = path
        self.reason = reason


# =============================================================================
# Configuration build errors
# =============================================================================


class DeckBuildError(GoldfishError):
    """Raised when a candidate deck references a card the catalog lacks."""

    def __init__(self, name: str):
        super().__init__(f"Cannot build deck, unknown card: {name}")
        self.name = name


class LandConfigError(GoldfishError):
    """Raised when land type constraints cannot fill the land slots."""

    pass


class UnknownStrategyError(GoldfishError):
    """Raised when a land generation strategy name is not registered."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(f"Unknown strategy: {name} (available: {', '.join(available)})")
        self.name = name
        self.available = available
