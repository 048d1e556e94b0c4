"""
Outcome tracking for emitted approve/reject intents.

The table emits intents and the caller persists them. Each emitted
intent is recorded here as PENDING; the caller reports back whether it
was committed or failed, so batch state can be reconciled against real
results instead of assumed successful.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class IntentAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class IntentOutcome(str, Enum):
    """Lifecycle of an emitted intent."""

    PENDING = "PENDING"  # Emitted, caller has not reported back
    COMMITTED = "COMMITTED"  # Caller persisted it
    FAILED = "FAILED"  # Callback raised or caller reported a failure


@dataclass
class IntentRecord:
    """Latest intent for one item."""

    item_id: str
    action: IntentAction
    outcome: IntentOutcome = IntentOutcome.PENDING
    factor_id: Optional[str] = None  # Approve only
    batch: bool = False
    error: Optional[str] = None
    updated_at: str = ""  # ISO timestamp

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "action": self.action.value,
            "outcome": self.outcome.value,
            "factor_id": self.factor_id,
            "batch": self.batch,
            "error": self.error,
            "updated_at": self.updated_at,
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class IntentLedger:
    """Latest intent record per item id."""

    def __init__(self) -> None:
        self._records: dict[str, IntentRecord] = {}

    def record(
        self,
        item_id: str,
        action: IntentAction,
        factor_id: Optional[str] = None,
        batch: bool = False,
    ) -> IntentRecord:
        """Record a newly emitted intent as PENDING, replacing any older one."""
        entry = IntentRecord(
            item_id=item_id,
            action=action,
            factor_id=factor_id,
            batch=batch,
            updated_at=_now(),
        )
        self._records[item_id] = entry
        return entry

    def _settle(
        self, item_ids: Iterable[str], outcome: IntentOutcome, error: Optional[str]
    ) -> list[str]:
        settled = []
        for item_id in item_ids:
            entry = self._records.get(item_id)
            if entry is None:
                logger.warning(f"No emitted intent for item {item_id}; outcome ignored")
                continue
            entry.outcome = outcome
            entry.error = error
            entry.updated_at = _now()
            settled.append(item_id)
        return settled

    def commit(self, item_ids: Iterable[str]) -> list[str]:
        """Mark intents as persisted. Returns the ids that were updated."""
        return self._settle(item_ids, IntentOutcome.COMMITTED, None)

    def fail(self, item_ids: Iterable[str], error: Optional[str] = None) -> list[str]:
        """Mark intents as failed. Returns the ids that were updated."""
        return self._settle(item_ids, IntentOutcome.FAILED, error)

    def get(self, item_id: str) -> Optional[IntentRecord]:
        return self._records.get(item_id)

    def outcome(self, item_id: str) -> Optional[IntentOutcome]:
        entry = self._records.get(item_id)
        return entry.outcome if entry else None

    def ids_with(self, outcome: IntentOutcome) -> list[str]:
        return [i for i, r in self._records.items() if r.outcome == outcome]

    def counts(self) -> dict[str, int]:
        """Number of items per outcome."""
        counts = {o.value: 0 for o in IntentOutcome}
        for entry in self._records.values():
            counts[entry.outcome.value] += 1
        return counts

    def retain(self, item_ids: Iterable[str]) -> int:
        """Drop records for ids that are no longer loaded. Returns how many."""
        keep = set(item_ids)
        dropped = [i for i in self._records if i not in keep]
        for item_id in dropped:
            del self._records[item_id]
        return len(dropped)

    def __len__(self) -> int:
        return len(self._records)
