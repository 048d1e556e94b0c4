"""
Virtualized review table for approving emission factor matches.

Only rows intersecting the viewport (plus overscan) are materialized;
the whole list still counts toward the scroll height. Operators select
rows, override factors, and approve or reject one item or a batch. Every
decision leaves as an intent callback and is tracked in an IntentLedger
until the caller reports the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..config import TableConfig
from ..confidence import ConfidenceBadge, ConfidenceScorer
from ..matching import FactorMatcher
from ..schemas import EmissionFactor, LineItem
from .intents import IntentAction, IntentLedger, IntentOutcome
from .selection import SelectionStateStore
from .windowing import RowWindow

if TYPE_CHECKING:
    from ..config import MatcherConfig
    from ..matching.debounce import Scheduler

logger = logging.getLogger(__name__)

EMPTY_TITLE = "All caught up!"
EMPTY_MESSAGE = "No pending line items need review."


@dataclass
class FactorOption:
    """One entry of the inline factor selector."""

    factor: EmissionFactor
    label: str  # "Suggested", "Alternative" or "Matched"
    is_selected: bool


@dataclass
class ReviewRow:
    """A materialized row of the table."""

    index: int
    start: float
    size: float
    item: LineItem
    factor: EmissionFactor  # Resolved: override if set, else suggested
    badge: ConfidenceBadge
    is_selected: bool
    is_focused: bool


class ReviewTable:
    """
    Review table state and operations.

    Keyboard: j next row, k previous row, space toggles the focused row,
    Enter approves it. Focus never wraps around and every key is a no-op
    on an empty list.
    """

    KEY_NEXT = "j"
    KEY_PREV = "k"
    KEY_TOGGLE = " "
    KEY_APPROVE = "Enter"

    def __init__(
        self,
        items: Sequence[LineItem],
        on_approve: Optional[Callable[[str, str], None]] = None,
        on_reject: Optional[Callable[[str], None]] = None,
        on_factor_change: Optional[Callable[[str, str], None]] = None,
        on_batch_approve: Optional[Callable[[list[str]], None]] = None,
        on_batch_reject: Optional[Callable[[list[str]], None]] = None,
        config: Optional[TableConfig] = None,
        scorer: Optional[ConfidenceScorer] = None,
    ) -> None:
        """Initialize the table.

        Args:
            items: Ordered line item snapshot.
            on_approve: Receives (item_id, factor_id).
            on_reject: Receives item_id.
            on_factor_change: Receives (item_id, factor_id) on every override.
            on_batch_approve: Receives the selected ids in selection order.
            on_batch_reject: Receives the selected ids in selection order.
            config: Density, viewport height, overscan and override policy.
            scorer: Confidence scorer for row badges.
        """
        self.config = config or TableConfig()
        self.scorer = scorer or ConfidenceScorer()
        self.on_approve = on_approve
        self.on_reject = on_reject
        self.on_factor_change = on_factor_change
        self.on_batch_approve = on_batch_approve
        self.on_batch_reject = on_batch_reject

        self.is_loading = False
        self.scroll_offset = 0.0
        self.ledger = IntentLedger()

        self._items: Sequence[LineItem] = items
        self._by_id: dict[str, LineItem] = {item.id: item for item in items}
        # Factors picked outside an item's own candidates (e.g. from a matcher)
        self._extra_factors: dict[str, EmissionFactor] = {}

        self.selection = SelectionStateStore(items, self.config.override_policy)
        self.window = RowWindow(
            count=len(items),
            estimate_size=self.config.row_height,
            viewport_height=self.config.container_height,
            overscan=self.config.overscan,
        )

    # -- collection --------------------------------------------------------

    @property
    def items(self) -> Sequence[LineItem]:
        return self._items

    def set_items(self, items: Sequence[LineItem]) -> None:
        """Adopt a refreshed snapshot from the caller.

        The same collection object is a no-op; a new one rebuilds the
        factor choices, prunes selection, ledger and remembered matcher
        picks, and re-clamps scroll.
        """
        if items is self._items:
            return
        self._items = items
        self._by_id = {item.id: item for item in items}
        self.selection.replace_items(items)
        referenced = set(self.selection.chosen_factor.values())
        self._extra_factors = {
            fid: f for fid, f in self._extra_factors.items() if fid in referenced
        }
        self.window.set_count(len(items))
        self.window.reset_measurements()
        self.scroll_offset = self.window.clamp_scroll(self.scroll_offset)
        dropped = self.ledger.retain(self._by_id)
        if dropped:
            logger.debug(f"Dropped {dropped} settled intent(s) for unloaded items")

    @property
    def is_empty(self) -> bool:
        """True when the "all caught up" state applies."""
        return not self.is_loading and len(self._items) == 0

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return self._by_id.get(item_id)

    # -- selection ---------------------------------------------------------

    def toggle_select(self, item_id: str) -> bool:
        return self.selection.toggle(item_id)

    def toggle_select_all(self) -> None:
        self.selection.toggle_all()

    @property
    def selected_ids(self) -> list[str]:
        return self.selection.selected_ids

    @property
    def all_selected(self) -> bool:
        return self.selection.all_selected

    @property
    def select_all_label(self) -> str:
        return "Deselect all" if self.all_selected else "Select all"

    @property
    def selection_label(self) -> Optional[str]:
        """Batch toolbar caption, or None when nothing is selected."""
        count = self.selection.selected_count
        if count == 0:
            return None
        return f"{count} item{'s' if count != 1 else ''} selected"

    # -- factor choice -----------------------------------------------------

    def resolved_factor_id(self, item_id: str) -> Optional[str]:
        return self.selection.factor_for(item_id)

    def resolved_factor(self, item_id: str) -> Optional[EmissionFactor]:
        """Full record of the chosen factor, falling back to the suggested one."""
        item = self._by_id.get(item_id)
        if item is None:
            return None
        factor_id = self.selection.factor_for(item_id)
        return (
            item.find_factor(factor_id)
            or self._extra_factors.get(factor_id)
            or item.suggested_factor
        )

    def factor_options(self, item_id: str) -> list[FactorOption]:
        """Entries of the inline selector: suggested, alternatives, then any matched factor."""
        item = self._by_id.get(item_id)
        if item is None:
            return []
        chosen = self.resolved_factor(item_id)
        suggested = item.suggested_factor
        options = [FactorOption(suggested, "Suggested", chosen.id == suggested.id)]
        options.extend(
            FactorOption(f, "Alternative", chosen.id == f.id) for f in item.alternative_factors
        )
        if item.find_factor(chosen.id) is None:
            options.append(FactorOption(chosen, "Matched", True))
        return options

    def change_factor(self, item_id: str, factor: Union[EmissionFactor, str]) -> bool:
        """Override the factor of one item and emit factor_changed.

        Accepts a factor id or a full record; a record from outside the
        item's candidates is remembered so the row can display it. A bare
        id must name a candidate or an already remembered record.
        """
        item = self._by_id.get(item_id)
        if item is None:
            logger.warning(f"Ignoring factor change for unknown item {item_id}")
            return False

        if isinstance(factor, EmissionFactor):
            factor_id = factor.id
            if item.find_factor(factor_id) is None:
                self._extra_factors[factor_id] = factor
        else:
            factor_id = factor
            if item.find_factor(factor_id) is None and factor_id not in self._extra_factors:
                logger.warning(f"Ignoring unknown factor {factor_id} for item {item_id}")
                return False

        self.selection.set_factor(item_id, factor_id)
        logger.debug(f"Factor for item {item_id} changed to {factor_id}")
        if self.on_factor_change:
            self.on_factor_change(item_id, factor_id)
        return True

    def open_matcher(
        self,
        item_id: str,
        factors: list[EmissionFactor],
        scheduler: Optional[Scheduler] = None,
        config: Optional[MatcherConfig] = None,
    ) -> FactorMatcher:
        """Create a matcher whose selection overrides the factor of ``item_id``."""
        return FactorMatcher(
            factors,
            on_select=lambda factor: self.change_factor(item_id, factor),
            scheduler=scheduler,
            config=config,
            scorer=self.scorer,
        )

    # -- intents -----------------------------------------------------------

    def _emit(
        self,
        callback: Optional[Callable],
        args: tuple,
        item_ids: list[str],
        action: IntentAction,
        batch: bool = False,
    ) -> None:
        if callback is None:
            return
        for item_id in item_ids:
            factor_id = None
            if action == IntentAction.APPROVE:
                factor_id = self.selection.factor_for(item_id)
            self.ledger.record(item_id, action, factor_id=factor_id, batch=batch)
        try:
            callback(*args)
        except Exception as e:
            logger.exception(f"{action.value} intent for {len(item_ids)} item(s) failed")
            self.ledger.fail(item_ids, str(e))

    def approve(self, item_id: str) -> Optional[str]:
        """Approve one item with its resolved factor. Returns the factor id."""
        factor_id = self.selection.factor_for(item_id)
        if factor_id is None:
            logger.warning(f"Ignoring approval of unknown item {item_id}")
            return None
        logger.debug(f"Approve {item_id} with {factor_id}")
        self._emit(self.on_approve, (item_id, factor_id), [item_id], IntentAction.APPROVE)
        return factor_id

    def reject(self, item_id: str) -> bool:
        """Reject one item."""
        if item_id not in self._by_id:
            logger.warning(f"Ignoring rejection of unknown item {item_id}")
            return False
        logger.debug(f"Reject {item_id}")
        self._emit(self.on_reject, (item_id,), [item_id], IntentAction.REJECT)
        return True

    def _batch(self, callback: Optional[Callable], action: IntentAction) -> list[str]:
        item_ids = self.selection.selected_ids
        if not item_ids:
            return []
        logger.debug(f"Batch {action.value} of {len(item_ids)} item(s)")
        try:
            self._emit(callback, (list(item_ids),), item_ids, action, batch=True)
        finally:
            # Optimistic: cleared whatever the caller does with the intent
            self.selection.clear()
        return item_ids

    def batch_approve(self) -> list[str]:
        """Emit the selected ids for approval and clear the selection."""
        return self._batch(self.on_batch_approve, IntentAction.APPROVE)

    def batch_reject(self) -> list[str]:
        """Emit the selected ids for rejection and clear the selection."""
        return self._batch(self.on_batch_reject, IntentAction.REJECT)

    def resolve(
        self, item_ids: Sequence[str], committed: bool = True, error: Optional[str] = None
    ) -> list[str]:
        """Report the caller-side outcome of emitted intents."""
        if committed:
            return self.ledger.commit(item_ids)
        return self.ledger.fail(item_ids, error)

    def reselect_failed(self) -> list[str]:
        """Put failed, still-loaded items back into the selection for a retry."""
        failed = [i for i in self.ledger.ids_with(IntentOutcome.FAILED) if i in self._by_id]
        self.selection.select(failed)
        return failed

    @property
    def pending_count(self) -> int:
        return len(self.ledger.ids_with(IntentOutcome.PENDING))

    # -- keyboard ----------------------------------------------------------

    @property
    def focused_index(self) -> int:
        return self.selection.focused_index

    def focus_next(self) -> None:
        if not self._items:
            return
        self.selection.move_focus(1)
        self._scroll_to_focus()

    def focus_prev(self) -> None:
        if not self._items:
            return
        self.selection.move_focus(-1)
        self._scroll_to_focus()

    def toggle_focused(self) -> None:
        if not self._items:
            return
        self.selection.toggle(self._items[self.selection.focused_index].id)

    def approve_focused(self) -> Optional[str]:
        if not self._items:
            return None
        return self.approve(self._items[self.selection.focused_index].id)

    def handle_key(self, key: str) -> bool:
        """Dispatch a key press. Returns True if the key was handled."""
        if not self._items:
            return False

        if key == self.KEY_NEXT:
            self.focus_next()
        elif key == self.KEY_PREV:
            self.focus_prev()
        elif key == self.KEY_TOGGLE:
            self.toggle_focused()
        elif key == self.KEY_APPROVE:
            self.approve_focused()
        else:
            return False
        return True

    # -- windowing ---------------------------------------------------------

    @property
    def total_size(self) -> float:
        return self.window.total_size

    def scroll_to(self, offset: float) -> float:
        self.scroll_offset = self.window.clamp_scroll(offset)
        return self.scroll_offset

    def scroll_to_index(self, index: int, align: str = "auto") -> float:
        self.scroll_offset = self.window.scroll_offset_for_index(index, self.scroll_offset, align)
        return self.scroll_offset

    def _scroll_to_focus(self) -> None:
        self.scroll_to_index(self.selection.focused_index)

    def measure_row(self, index: int, size: float) -> None:
        self.window.measure(index, size)
        self.scroll_offset = self.window.clamp_scroll(self.scroll_offset)

    def visible_rows(self) -> list[ReviewRow]:
        """Rows to materialize at the current scroll offset."""
        rows = []
        focused = self.selection.focused_index
        for virtual in self.window.window(self.scroll_offset):
            item = self._items[virtual.index]
            factor = self.resolved_factor(item.id)
            rows.append(
                ReviewRow(
                    index=virtual.index,
                    start=virtual.start,
                    size=virtual.size,
                    item=item,
                    factor=factor,
                    badge=self.scorer.badge(factor.confidence),
                    is_selected=self.selection.is_selected(item.id),
                    is_focused=virtual.index == focused,
                )
            )
        return rows
