"""
Canonical records shared by every module.

No other module defines its own line item or factor model.
"""

from .line_items import (
    EmissionFactor,
    LineItem,
    SchemaError,
    load_factors,
    load_line_items,
    parse_line_items,
)

__all__ = [
    "EmissionFactor",
    "LineItem",
    "SchemaError",
    "load_factors",
    "load_line_items",
    "parse_line_items",
]
