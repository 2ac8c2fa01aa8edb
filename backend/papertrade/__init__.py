"""Paper-trading order and position accounting service."""
