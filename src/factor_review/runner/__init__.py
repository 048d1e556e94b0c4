"""
CLI runner module.

Provides commands:
- review: Show the review table window for a line item file
- search: Debounced, ranked factor search over a catalog
- tier: Confidence tier of scores
- init-config: Write a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
