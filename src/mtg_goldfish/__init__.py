"""MTG Goldfish - opening simulator and land-base optimizer."""

__version__ = "0.1.0"
