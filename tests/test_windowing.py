"""Tests for the row windowing math."""

import pytest

from factor_review.review import RowWindow


class TestUniformRows:
    """Estimated, unmeasured rows."""

    @pytest.fixture
    def window(self):
        return RowWindow(count=1000, estimate_size=64, viewport_height=600, overscan=5)

    def test_visible_range_at_top(self, window):
        assert window.visible_range(0) == (0, 9)

    def test_window_at_top(self, window):
        rows = window.window(0)
        assert [r.index for r in rows] == list(range(0, 15))
        assert rows[3].start == 192
        assert rows[3].end == 256

    def test_window_mid_list(self, window):
        offset = 500 * 64
        assert window.visible_range(offset) == (500, 509)
        rows = window.window(offset)
        assert rows[0].index == 495
        assert rows[-1].index == 514

    def test_window_at_bottom(self, window):
        rows = window.window(window.max_scroll)
        assert rows[-1].index == 999
        assert len(rows) <= 10 + 2 * 5 + 1

    def test_total_size(self, window):
        assert window.total_size == 64000
        assert window.max_scroll == 63400

    def test_scroll_clamped(self, window):
        assert window.clamp_scroll(-50) == 0
        assert window.clamp_scroll(10**9) == 63400

    def test_materialized_rows_bounded(self, window):
        """Materialized rows are bounded by viewport/estimate + 2*overscan + 1."""
        bound = 600 // 64 + 2 * 5 + 1
        for offset in range(0, 64000, 777):
            assert len(window.window(offset)) <= bound + 1

    def test_partial_row_at_edge_is_visible(self):
        window = RowWindow(count=100, estimate_size=64, viewport_height=600, overscan=0)
        assert window.visible_range(32) == (0, 9)


class TestEmptyAndSmall:
    def test_empty_list(self):
        window = RowWindow(count=0, estimate_size=64, viewport_height=600)
        assert window.visible_range(0) is None
        assert window.window(100) == []
        assert window.total_size == 0
        assert window.scroll_offset_for_index(3, 0) == 0.0

    def test_list_shorter_than_viewport(self):
        window = RowWindow(count=3, estimate_size=64, viewport_height=600)
        assert [r.index for r in window.window(0)] == [0, 1, 2]
        assert window.max_scroll == 0

    def test_invalid_estimate(self):
        with pytest.raises(ValueError):
            RowWindow(count=1, estimate_size=0, viewport_height=600)


class TestMeasuredRows:
    """Measured heights replace estimates."""

    @pytest.fixture
    def window(self):
        return RowWindow(count=100, estimate_size=64, viewport_height=600, overscan=0)

    def test_measure_shifts_later_rows(self, window):
        window.measure(0, 200)
        assert not window.is_uniform
        assert window.start_of(1) == 200
        assert window.total_size == 200 + 99 * 64

    def test_lookup_after_measure(self, window):
        window.measure(2, 300)
        # rows 0,1 = 128px, row 2 spans 128..428
        assert window.index_at(400) == 2
        assert window.index_at(428) == 3

    def test_visible_range_after_measure(self, window):
        window.measure(0, 500)
        assert window.visible_range(0) == (0, 2)

    def test_measure_out_of_range(self, window):
        with pytest.raises(IndexError):
            window.measure(100, 64)

    def test_measure_invalid_size(self, window):
        with pytest.raises(ValueError):
            window.measure(0, 0)

    def test_reset_measurements(self, window):
        window.measure(0, 200)
        window.reset_measurements()
        assert window.is_uniform
        assert window.total_size == 6400

    def test_set_count_drops_measurements_past_end(self, window):
        window.measure(90, 200)
        window.set_count(50)
        assert window.is_uniform
        assert window.total_size == 3200


class TestScrollToIndex:
    """Bringing a row into view."""

    @pytest.fixture
    def window(self):
        return RowWindow(count=100, estimate_size=64, viewport_height=600)

    def test_auto_already_visible(self, window):
        assert window.scroll_offset_for_index(3, 0) == 0

    def test_auto_below_viewport(self, window):
        # row 10 ends at 704
        assert window.scroll_offset_for_index(10, 0) == 104

    def test_auto_above_viewport(self, window):
        assert window.scroll_offset_for_index(2, 1000) == 128

    def test_start_and_end(self, window):
        assert window.scroll_offset_for_index(20, 0, align="start") == 1280
        assert window.scroll_offset_for_index(20, 0, align="end") == 1344 - 600

    def test_center(self, window):
        assert window.scroll_offset_for_index(20, 0, align="center") == 1280 - 268

    def test_clamped_at_edges(self, window):
        assert window.scroll_offset_for_index(0, 0, align="center") == 0
        assert window.scroll_offset_for_index(99, 0, align="start") == window.max_scroll

    def test_unknown_alignment(self, window):
        with pytest.raises(ValueError):
            window.scroll_offset_for_index(1, 0, align="middle")
