"""Data layer: card models, catalog and deck lists."""
