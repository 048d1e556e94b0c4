"""
Windowing math for virtualized row rendering.

Maps a scroll offset to the range of rows that intersect the viewport,
padded by an overscan margin. Rows start at an estimated height; a
measured height can replace the estimate per row. While nothing has been
measured, offsets are plain arithmetic. After the first measurement a
cumulative offset array is kept and searched with ``bisect``.

Nothing here knows about any rendering technology.
"""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VirtualRow:
    """Position of one materialized row."""

    index: int
    start: float
    size: float

    @property
    def end(self) -> float:
        return self.start + self.size


class RowWindow:
    """Computes which rows to materialize for a scroll position."""

    def __init__(
        self,
        count: int,
        estimate_size: float,
        viewport_height: float,
        overscan: int = 5,
    ):
        if estimate_size <= 0:
            raise ValueError(f"estimate_size must be positive, got {estimate_size}")
        self.count = max(0, count)
        self.estimate_size = estimate_size
        self.viewport_height = viewport_height
        self.overscan = overscan
        self._measured: dict[int, float] = {}
        self._starts: Optional[list[float]] = None  # Prefix sums, length count + 1

    # -- sizing ------------------------------------------------------------

    def set_count(self, count: int) -> None:
        """Resize the list; measurements past the new end are dropped."""
        self.count = max(0, count)
        self._measured = {i: s for i, s in self._measured.items() if i < self.count}
        self._starts = None

    def measure(self, index: int, size: float) -> None:
        """Replace the estimate of one row with its measured height."""
        if not 0 <= index < self.count:
            raise IndexError(f"Row {index} out of range for {self.count} rows")
        if size <= 0:
            raise ValueError(f"Row size must be positive, got {size}")
        if self._measured.get(index) != size:
            self._measured[index] = size
            self._starts = None

    def reset_measurements(self) -> None:
        self._measured.clear()
        self._starts = None

    @property
    def is_uniform(self) -> bool:
        return not self._measured

    def size_of(self, index: int) -> float:
        return self._measured.get(index, self.estimate_size)

    def _prefix(self) -> list[float]:
        if self._starts is None:
            starts = [0.0] * (self.count + 1)
            total = 0.0
            for i in range(self.count):
                starts[i] = total
                total += self._measured.get(i, self.estimate_size)
            starts[self.count] = total
            self._starts = starts
        return self._starts

    def start_of(self, index: int) -> float:
        """Offset of the top edge of a row."""
        if self.is_uniform:
            return index * self.estimate_size
        return self._prefix()[index]

    @property
    def total_size(self) -> float:
        """Scrollable height of the full list."""
        if self.is_uniform:
            return self.count * self.estimate_size
        return self._prefix()[self.count]

    # -- lookup ------------------------------------------------------------

    def index_at(self, offset: float) -> int:
        """Row containing ``offset``, clamped to the list. Requires count > 0."""
        if offset <= 0:
            return 0
        if self.is_uniform:
            index = int(offset // self.estimate_size)
        else:
            index = bisect_right(self._prefix(), offset) - 1
        return min(index, self.count - 1)

    def _last_index_before(self, end: float) -> int:
        """Last row whose top edge is above ``end``."""
        if self.is_uniform:
            index = math.ceil(end / self.estimate_size) - 1
        else:
            index = bisect_left(self._prefix(), end) - 1
        return max(0, min(index, self.count - 1))

    def visible_range(self, scroll_offset: float) -> Optional[tuple[int, int]]:
        """Inclusive (first, last) rows intersecting the viewport, no overscan."""
        if self.count == 0:
            return None
        offset = self.clamp_scroll(scroll_offset)
        first = self.index_at(offset)
        last = self._last_index_before(offset + self.viewport_height)
        return first, max(first, last)

    def window(self, scroll_offset: float) -> list[VirtualRow]:
        """Rows to materialize: the visible range padded by overscan."""
        visible = self.visible_range(scroll_offset)
        if visible is None:
            return []
        first, last = visible
        start = max(0, first - self.overscan)
        stop = min(self.count - 1, last + self.overscan)
        return [
            VirtualRow(index=i, start=self.start_of(i), size=self.size_of(i))
            for i in range(start, stop + 1)
        ]

    # -- scrolling ---------------------------------------------------------

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.total_size - self.viewport_height)

    def clamp_scroll(self, offset: float) -> float:
        return min(max(0.0, offset), self.max_scroll)

    def scroll_offset_for_index(self, index: int, current: float, align: str = "auto") -> float:
        """Scroll offset that brings a row into view.

        ``auto`` moves as little as possible and leaves the offset alone if
        the row is already fully visible.
        """
        if self.count == 0:
            return 0.0
        index = max(0, min(index, self.count - 1))
        start = self.start_of(index)
        end = start + self.size_of(index)

        if align == "start":
            target = start
        elif align == "end":
            target = end - self.viewport_height
        elif align == "center":
            target = start - (self.viewport_height - self.size_of(index)) / 2
        elif align == "auto":
            if start < current:
                target = start
            elif end > current + self.viewport_height:
                target = end - self.viewport_height
            else:
                target = current
        else:
            raise ValueError(f"Unknown alignment: {align}")

        return self.clamp_scroll(target)
