"""
Operator data grooming: review emission factor matches for line items.

An in-memory interaction layer. A windowed review table with selection,
keyboard navigation and batch approve/reject, a debounced factor search
ranked by confidence, and deterministic confidence tiers. Decisions are
emitted to the caller as intents; nothing is persisted here.
"""

__version__ = "0.1.0"
