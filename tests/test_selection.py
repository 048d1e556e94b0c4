"""Tests for SelectionStateStore."""

import pytest

from factor_review.config import OverridePolicy
from factor_review.review import SelectionStateStore


@pytest.fixture
def items(make_item):
    return [make_item("id1"), make_item("id2"), make_item("id3")]


class TestSelection:
    """Toggle and toggle-all semantics."""

    def test_toggle_twice_restores(self, items):
        store = SelectionStateStore(items)

        assert store.toggle("id2") is True
        assert store.is_selected("id2")
        assert store.toggle("id2") is False
        assert store.selected_ids == []

    def test_selection_order_is_insertion_order(self, items):
        store = SelectionStateStore(items)
        for item_id in ("id3", "id1", "id2"):
            store.toggle(item_id)
        assert store.selected_ids == ["id3", "id1", "id2"]

    def test_unknown_id_ignored(self, items, caplog):
        store = SelectionStateStore(items)
        assert store.toggle("nope") is False
        assert store.selected_ids == []
        assert "unknown item nope" in caplog.text

    def test_toggle_all_from_partial(self, items):
        store = SelectionStateStore(items)
        store.toggle("id2")

        store.toggle_all()
        assert set(store.selected_ids) == {"id1", "id2", "id3"}
        assert store.all_selected

    def test_toggle_all_twice_clears(self, items):
        store = SelectionStateStore(items)
        store.toggle_all()
        store.toggle_all()
        assert store.selected_ids == []

    def test_toggle_all_on_empty_list(self):
        store = SelectionStateStore([])
        store.toggle_all()
        assert store.selected_ids == []
        assert not store.all_selected

    def test_select_skips_unknown(self, items):
        store = SelectionStateStore(items)
        store.select(["id1", "ghost"])
        assert store.selected_ids == ["id1"]


class TestFactorChoice:
    """Per-item factor overrides."""

    def test_defaults_to_suggested(self, items):
        store = SelectionStateStore(items)
        assert store.chosen_factor == {"id1": "ef-id1", "id2": "ef-id2", "id3": "ef-id3"}

    def test_override(self, items):
        store = SelectionStateStore(items)
        assert store.set_factor("id1", "ef-other")
        assert store.factor_for("id1") == "ef-other"

    def test_override_unknown_item(self, items):
        store = SelectionStateStore(items)
        assert not store.set_factor("ghost", "ef-x")
        assert "ghost" not in store.chosen_factor

    def test_reset_policy_discards_overrides(self, items):
        store = SelectionStateStore(items)
        store.set_factor("id1", "ef-other")

        store.replace_items(items)
        assert store.factor_for("id1") == "ef-id1"

    def test_preserve_policy_keeps_overrides_for_surviving_ids(self, items, make_item):
        store = SelectionStateStore(items, override_policy=OverridePolicy.PRESERVE)
        store.set_factor("id1", "ef-other")
        store.set_factor("id2", "ef-other")

        store.replace_items([items[0], make_item("id4")])

        assert store.chosen_factor == {"id1": "ef-other", "id4": "ef-id4"}


class TestReplaceItems:
    """Collection replacement."""

    def test_selection_pruned(self, items):
        store = SelectionStateStore(items)
        store.toggle("id1")
        store.toggle("id3")

        store.replace_items(items[:2])
        assert store.selected_ids == ["id1"]

    def test_focus_clamped(self, items):
        store = SelectionStateStore(items)
        store.set_focus(2)

        store.replace_items(items[:1])
        assert store.focused_index == 0

    def test_every_item_has_a_choice(self, items):
        store = SelectionStateStore(items[:1])
        store.replace_items(items)
        assert set(store.chosen_factor) == set(store.item_ids)


class TestFocus:
    """Focus bounds."""

    def test_no_wraparound(self, items):
        store = SelectionStateStore(items)
        assert store.move_focus(-1) == 0
        store.move_focus(10)
        assert store.focused_index == 2
        assert store.focused_id == "id3"

    def test_empty_store(self):
        store = SelectionStateStore([])
        assert store.move_focus(1) == 0
        assert store.focused_id is None
