"""
Unit tests for SheetStore content operations.

Tests cover:
- Writing values and formulas, reading cells
- Format updates
- Validation attachment, the pure query and the gated write
- The fill gesture
- Selection and dialog state
- Charts, snapshots and reset
"""

import logging

import pytest

from gridsheet import SheetStore
from gridsheet.exceptions import AddressFormatError
from gridsheet.spreadsheet.model import CellFormat, CellValidation


class TestValues:
    """Test Suite for value writes."""

    def test_plain_value(self, store):
        store.set_cell_value("A1", "hello")
        cell = store.get_cell("A1")
        assert cell.value == "hello"
        assert cell.formula == ""
        assert cell.computed is None

    def test_formula_value(self, store):
        store.set_cell_value("A1", "=2+3")
        cell = store.get_cell("A1")
        assert cell.formula == "=2+3"
        assert cell.computed == 5

    def test_formula_replaced_by_plain(self, store):
        store.set_cell_value("A1", "=2+3")
        store.set_cell_value("A1", "7")
        cell = store.get_cell("A1")
        assert cell.formula == ""
        assert cell.computed is None

    def test_sum_over_mixed_range(self, sample_store):
        assert sample_store.get_cell("B4").computed == 6

    def test_dependents_follow_edits(self, sample_store):
        sample_store.set_cell_value("B2", "10")
        assert sample_store.get_cell("B4").computed == 16

    def test_get_cell_does_not_create(self, store):
        assert store.get_cell("E5") is None
        assert len(store.cells) == 0

    def test_lowercase_identifier(self, store):
        store.set_cell_value("c3", "x")
        assert store.get_cell("C3").value == "x"

    def test_invalid_identifier(self, store):
        with pytest.raises(AddressFormatError):
            store.set_cell_value("3C", "x")

    def test_cells_outside_extent(self, store):
        store.set_cell_value("Z99", "far")
        assert store.get_cell("Z99").value == "far"

    def test_new_cell_has_default_format(self, store):
        store.set_cell_value("A1", "x")
        assert store.get_cell("A1").format == CellFormat.default()


class TestFormat:
    """Test Suite for format updates."""

    def test_merge(self, store):
        store.update_cell_format("A1", {"bold": True})
        store.update_cell_format("A1", {"color": "#ff0000"})
        fmt = store.get_cell("A1").format
        assert fmt.bold is True
        assert fmt.color == "#ff0000"
        assert fmt.font_size == 12

    def test_format_creates_cell(self, store):
        store.update_cell_format("B2", {"align": "center"})
        assert store.get_cell("B2").value == ""

    def test_format_does_not_touch_values(self, sample_store):
        sample_store.update_cell_format("B4", {"italic": True})
        cell = sample_store.get_cell("B4")
        assert cell.value == "=SUM(B1:B3)"
        assert cell.computed == 6


class TestValidation:
    """Test Suite for validation on the store."""

    def test_write_is_never_refused(self, store, caplog):
        store.set_cell_validation("A1", {"type": "number"})
        with caplog.at_level(logging.WARNING, logger="gridsheet.store"):
            store.set_cell_value("A1", "abc")
        assert store.get_cell("A1").value == "abc"
        assert "Value must be a number" in caplog.text

    def test_attach_checks_current_value(self, store, caplog):
        store.set_cell_value("A1", "abc")
        with caplog.at_level(logging.WARNING, logger="gridsheet.store"):
            store.set_cell_validation("A1", CellValidation(type="number"))
        assert "doesn't meet validation criteria" in caplog.text
        assert store.get_cell("A1").value == "abc"

    def test_remove_validation(self, store):
        store.set_cell_validation("A1", CellValidation(type="number"))
        store.set_cell_validation("A1", None)
        assert store.get_cell("A1").validation is None

    def test_validation_is_copied(self, store):
        validation = CellValidation(type="list", value=["a"])
        store.set_cell_validation("A1", validation)
        validation.value.append("b")
        assert store.get_cell("A1").validation.value == ["a"]

    def test_validate_cell_is_pure(self, store):
        result = store.validate_cell("5", CellValidation(type="number", criteria="greater", value="10"))
        assert not result.valid
        assert result.message == "Value must be greater than 10"
        assert len(store.cells) == 0

    def test_gated_write(self, store):
        store.set_cell_validation("A1", CellValidation(type="list", value=["yes", "no"]))
        rejected = store.set_cell_value_validated("A1", "maybe")
        assert not rejected
        assert store.get_cell("A1").value == ""

        accepted = store.set_cell_value_validated("A1", "yes")
        assert accepted
        assert store.get_cell("A1").value == "yes"

    def test_gated_write_without_validation(self, store):
        assert store.set_cell_value_validated("B1", "anything")
        assert store.get_cell("B1").value == "anything"


class TestFill:
    """Test Suite for the fill gesture."""

    def test_fill_copies_value_and_format(self, store):
        store.set_cell_value("A1", "hello")
        store.update_cell_format("A1", {"bold": True})
        store.begin_fill("A1")
        assert store.state.is_dragging
        store.commit_fill("A2")

        target = store.get_cell("A2")
        assert target.value == "hello"
        assert target.format.bold is True
        assert not store.state.is_dragging
        assert store.state.drag_start_cell is None

    def test_fill_format_is_not_shared(self, store):
        store.set_cell_value("A1", "x")
        store.begin_fill("A1")
        store.commit_fill("B1")
        store.update_cell_format("B1", {"italic": True})
        assert store.get_cell("A1").format.italic is False

    def test_fill_formula_text_is_copied_verbatim(self, store):
        store.set_cell_value("A1", "3")
        store.set_cell_value("B1", "=A1*2")
        store.begin_fill("B1")
        store.commit_fill("B2")
        target = store.get_cell("B2")
        assert target.formula == "=A1*2"
        assert target.computed == 6

    def test_commit_without_begin(self, store):
        store.commit_fill("A2")
        assert store.get_cell("A2") is None

    def test_cancel(self, store):
        store.set_cell_value("A1", "x")
        store.begin_fill("A1")
        store.cancel_fill()
        store.commit_fill("A2")
        assert store.get_cell("A2") is None
        assert not store.state.is_dragging

    def test_fill_to_invalid_target_ends_gesture(self, store):
        """A malformed target copies nothing but still clears the pending fill."""
        store.set_cell_value("A1", "x")
        store.begin_fill("A1")
        store.commit_fill("not-a-cell")
        assert not store.state.is_dragging
        assert store.state.drag_start_cell is None
        assert store.cells.ids() == ["A1"]

    def test_fill_from_empty_source(self, store):
        store.begin_fill("D4")
        store.commit_fill("D5")
        assert store.get_cell("D5") is None
        assert not store.state.is_dragging


class TestSelection:
    """Test Suite for selection and dialog state."""

    def test_select_cell_loads_formula_bar(self, sample_store):
        sample_store.set_selected_cell("B4")
        assert sample_store.state.selected_cell == "B4"
        assert sample_store.state.selected_range == ["B4"]
        assert sample_store.state.formula_bar_value == "=SUM(B1:B3)"

    def test_select_empty_cell(self, store):
        store.set_formula_bar_value("stale")
        store.set_selected_cell("A1")
        assert store.state.formula_bar_value == ""

    def test_select_range_expression(self, sample_store):
        sample_store.set_selected_range("A1:B2")
        assert sample_store.state.selected_range == ["A1", "B1", "A2", "B2"]
        assert sample_store.state.selected_cell == "A1"
        assert sample_store.state.formula_bar_value == "apples"

    def test_select_list(self, store):
        store.set_selected_range(["C1", "C2"])
        assert store.state.selected_range == ["C1", "C2"]

    def test_toggles(self, store):
        store.toggle_find_replace()
        store.toggle_chart()
        assert store.state.find_replace_open
        assert store.state.chart_open
        store.toggle_find_replace()
        assert not store.state.find_replace_open

    def test_find_replace_options(self, store):
        store.update_find_replace_options({"findText": "a"}, replace_text="b")
        options = store.state.find_replace_options
        assert options.find_text == "a"
        assert options.replace_text == "b"

    def test_chart_options_unknown(self, store):
        with pytest.raises(ValueError):
            store.update_chart_options(legend=True)


class TestChart:
    """Test Suite for chart creation."""

    def test_create_chart(self, sample_store):
        sample_store.toggle_chart()
        sample_store.update_chart_options(dataRange="B1:B3", labelRange="A1:A3", title="Fruit")
        data = sample_store.create_chart()
        assert list(data["label"]) == ["apples", "pears", "plums"]
        assert list(data["value"]) == [2, 0, 4]
        assert data.attrs["title"] == "Fruit"
        assert not sample_store.state.chart_open


class TestSnapshots:
    """Test Suite for snapshot and reset."""

    def test_snapshot_is_independent(self, sample_store):
        snap = sample_store.snapshot()
        sample_store.set_cell_value("B1", "100")
        assert snap.cells["B1"].value == "2"
        assert snap.cells["B4"].computed == 6

    def test_reset(self, sample_store):
        sample_store.set_selected_cell("A1")
        sample_store.reset_state()
        assert len(sample_store.cells) == 0
        assert len(sample_store.state.rows) == 10
        assert len(sample_store.state.columns) == 5
        assert sample_store.state.selected_cell is None

    def test_default_extent(self):
        s = SheetStore()
        assert len(s.state.rows) == 100
        assert len(s.state.columns) == 26
