"""
Review table module.

Provides:
- Windowing math for virtualized rows
- Selection, factor choice and focus state
- Approve/reject intents with outcome tracking
- Plain-text rendering
"""

from .intents import IntentAction, IntentLedger, IntentOutcome, IntentRecord
from .selection import SelectionStateStore
from .table import EMPTY_MESSAGE, EMPTY_TITLE, FactorOption, ReviewRow, ReviewTable
from .windowing import RowWindow, VirtualRow

__all__ = [
    "EMPTY_MESSAGE",
    "EMPTY_TITLE",
    "FactorOption",
    "IntentAction",
    "IntentLedger",
    "IntentOutcome",
    "IntentRecord",
    "ReviewRow",
    "ReviewTable",
    "RowWindow",
    "SelectionStateStore",
    "VirtualRow",
]
