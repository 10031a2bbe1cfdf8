"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_resources_dir() -> Path:
    """Get the bundled resources directory."""
    return Path(__file__).parent / "resources"


def _get_default_cards_path() -> Path:
    """Get default path to the card catalog JSON."""
    return _get_resources_dir() / "cards.json"


def _get_default_deck_path() -> Path:
    """Get default path to the base deck list."""
    return _get_resources_dir() / "deck.txt"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GOLDFISH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data paths
    cards_path: Path = Field(
        default_factory=_get_default_cards_path,
        description="Path to the card catalog JSON file",
    )
    deck_path: Path = Field(
        default_factory=_get_default_deck_path,
        description="Path to the base deck list",
    )
    output_dir: Path = Field(
        default=Path("optimized_decks"),
        description="Directory where optimized decks are written",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    # Simulation defaults
    num_games: int = Field(default=10_000, ge=1, description="Games per batch")
    turn_cap: int = Field(default=20, ge=1, description="Last turn simulated")
    opening_hand_size: int = Field(default=7, ge=0, description="Cards in the opening hand")
    cutoff_turn: int = Field(default=4, ge=1, description="Turn inspected by analyze")

    # Optimizer
    land_slots: int = Field(default=24, ge=0, description="Land slots in an optimized deck")
    max_workers: int | None = Field(
        default=None,
        description="Process pool size for parallel trials (None lets the executor decide)",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
