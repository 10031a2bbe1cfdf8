"""Game zone state and mana rules."""
