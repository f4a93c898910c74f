"""Tests for the selection cursor shared by every list pane."""

import pytest

from musictui.core.selection import SelectionCursor


class Item:
    def __init__(self, name):
        self.name = name

    def label(self):
        return self.name.upper()


class TestSelectionCursor:
    def test_empty_cursor_has_no_selection(self):
        cursor = SelectionCursor()
        assert cursor.selected is None
        assert cursor.current() is None
        assert len(cursor) == 0

    def test_replace_selects_first_item(self):
        cursor = SelectionCursor()
        cursor.replace(["a", "b"])
        assert cursor.selected == 0
        assert cursor.current() == "a"

    def test_replace_with_nothing_clears_selection(self):
        cursor = SelectionCursor(["a", "b"])
        cursor.move_down()
        cursor.replace([])
        assert cursor.selected is None

    def test_replace_resets_to_top(self):
        cursor = SelectionCursor(["a", "b", "c"])
        cursor.move_down()
        cursor.move_down()
        cursor.replace(["x", "y", "z"])
        assert cursor.selected == 0

    def test_moves_clamp_at_both_ends(self):
        cursor = SelectionCursor(["a", "b", "c"])
        cursor.move_up()
        assert cursor.selected == 0
        for _ in range(5):
            cursor.move_down()
        assert cursor.selected == 2
        cursor.move_up()
        assert cursor.current() == "b"

    def test_moves_on_empty_cursor_are_no_ops(self):
        cursor = SelectionCursor()
        cursor.move_down()
        cursor.move_up()
        assert cursor.selected is None

    def test_select_clamps(self):
        cursor = SelectionCursor(["a", "b", "c"])
        cursor.select(10)
        assert cursor.selected == 2
        cursor.select(-4)
        assert cursor.selected == 0

    def test_select_on_empty_cursor(self):
        cursor = SelectionCursor()
        cursor.select(3)
        assert cursor.selected is None

    def test_items_are_a_snapshot(self):
        source = ["a", "b"]
        cursor = SelectionCursor(source)
        source.append("c")
        assert cursor.items == ("a", "b")

    def test_labels_use_item_label(self):
        cursor = SelectionCursor([Item("x"), Item("y")])
        assert cursor.labels() == ["X", "Y"]


class TestSplitRotatedAt:
    def test_rotates_around_index(self):
        cursor = SelectionCursor(["A", "B", "C"])
        assert cursor.split_rotated_at(1) == ["B", "C", "A"]

    @pytest.mark.parametrize("size", [1, 2, 5, 8])
    def test_rotation_is_a_permutation_starting_at_index(self, size):
        items = list(range(size))
        cursor = SelectionCursor(items)
        for index in range(size):
            rotated = cursor.split_rotated_at(index)
            assert rotated[0] == items[index]
            assert sorted(rotated) == items
            assert rotated == items[index:] + items[:index]

    def test_rotation_at_zero_is_identity(self):
        cursor = SelectionCursor(["A", "B"])
        assert cursor.split_rotated_at(0) == ["A", "B"]
