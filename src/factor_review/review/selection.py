"""
Selection state of the review table.

Owns the selected item ids, the chosen factor per item and the single
focused row. Selected ids keep insertion order so batch intents list
items in the order the operator picked them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..config import OverridePolicy
from ..schemas import LineItem

logger = logging.getLogger(__name__)


class SelectionStateStore:
    """
    In-memory selection state.

    Invariants:
    - chosen_factor has an entry for every loaded item
    - selected_ids is a subset of the loaded ids
    - focused_index is in [0, N-1] when N > 0, else 0
    """

    def __init__(
        self,
        items: Sequence[LineItem] = (),
        override_policy: OverridePolicy = OverridePolicy.RESET,
    ):
        self.override_policy = override_policy
        # dict as an insertion-ordered set
        self._selected: dict[str, None] = {}
        self.chosen_factor: dict[str, str] = {}
        self.focused_index = 0
        self._item_ids: list[str] = []
        self._id_set: set[str] = set()
        self.replace_items(items)

    # -- collection --------------------------------------------------------

    def replace_items(self, items: Sequence[LineItem]) -> None:
        """Adopt a new item snapshot.

        chosen_factor is rebuilt from the suggested factors. Under
        PRESERVE, an override survives for an id present in both
        snapshots. Selection is pruned to loaded ids and focus clamped.
        """
        previous = self.chosen_factor
        self._item_ids = [item.id for item in items]
        self._id_set = set(self._item_ids)

        chosen: dict[str, str] = {}
        preserved = 0
        for item in items:
            suggested_id = item.suggested_factor.id
            prior = previous.get(item.id)
            if (
                self.override_policy == OverridePolicy.PRESERVE
                and prior is not None
                and prior != suggested_id
            ):
                chosen[item.id] = prior
                preserved += 1
            else:
                chosen[item.id] = suggested_id
        self.chosen_factor = chosen

        dropped = [i for i in self._selected if i not in self._id_set]
        for item_id in dropped:
            del self._selected[item_id]

        self.focused_index = self._clamp(self.focused_index)

        logger.debug(
            f"Loaded {len(self._item_ids)} item(s); "
            f"preserved {preserved} override(s), pruned {len(dropped)} selection(s)"
        )

    @property
    def item_ids(self) -> list[str]:
        return list(self._item_ids)

    @property
    def count(self) -> int:
        return len(self._item_ids)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._id_set

    # -- selection ---------------------------------------------------------

    @property
    def selected_ids(self) -> list[str]:
        """Selected ids in the order they were selected."""
        return list(self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._selected

    def toggle(self, item_id: str) -> bool:
        """Add or remove one id. Returns the new selected state."""
        if item_id not in self._id_set:
            logger.warning(f"Ignoring selection of unknown item {item_id}")
            return False
        if item_id in self._selected:
            del self._selected[item_id]
            return False
        self._selected[item_id] = None
        return True

    def select(self, item_ids: Iterable[str]) -> None:
        """Add loaded ids to the selection."""
        for item_id in item_ids:
            if item_id in self._id_set:
                self._selected[item_id] = None

    @property
    def all_selected(self) -> bool:
        """True when every loaded item is selected (False for an empty list)."""
        return bool(self._item_ids) and len(self._selected) == len(self._item_ids)

    def toggle_all(self) -> None:
        """Clear if everything is selected, otherwise select every loaded id."""
        if self._selected.keys() == self._id_set:
            self._selected.clear()
        else:
            self._selected = dict.fromkeys(self._item_ids)

    def clear(self) -> None:
        self._selected.clear()

    # -- factor choice -----------------------------------------------------

    def set_factor(self, item_id: str, factor_id: str) -> bool:
        """Record a factor override. Returns False for an unknown item."""
        if item_id not in self._id_set:
            logger.warning(f"Ignoring factor change for unknown item {item_id}")
            return False
        self.chosen_factor[item_id] = factor_id
        return True

    def factor_for(self, item_id: str) -> str | None:
        return self.chosen_factor.get(item_id)

    # -- focus -------------------------------------------------------------

    def _clamp(self, index: int) -> int:
        if not self._item_ids:
            return 0
        return max(0, min(index, len(self._item_ids) - 1))

    def move_focus(self, step: int) -> int:
        """Move focus without wraparound. Returns the new index."""
        self.focused_index = self._clamp(self.focused_index + step)
        return self.focused_index

    def set_focus(self, index: int) -> int:
        self.focused_index = self._clamp(index)
        return self.focused_index

    @property
    def focused_id(self) -> str | None:
        if not self._item_ids:
            return None
        return self._item_ids[self.focused_index]
