"""
The sheet store.

``SheetStore`` owns exactly one ``SheetState`` and is the single writer to
it. Every mutation runs to completion, including the recalculation sweep it
triggers, before the method returns:

- Value and format edits, validation attachment
- Structural edits: row/column insert and delete, with cell relocation
- Resizing rows and columns
- Bulk text operations: find/replace and duplicate-row removal
- The two-phase fill gesture: begin, commit, cancel
- Selection and dialog state kept alongside the data
- Loading, saving and resetting the whole sheet

Structural edits move cell storage only. Formula text that names a moved
address is never rewritten, so after an insert or delete such a formula reads
whatever now sits at the coordinate it names.
"""

import copy
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd

from gridsheet import config
from gridsheet.exceptions import AddressFormatError, DocumentFormatError
from gridsheet.formula.evaluator import evaluate_formula
from gridsheet.recalc import recalculate
from gridsheet.spreadsheet.address import (
    CellKey,
    column_to_ordinal,
    expand_range,
    ordinal_to_column,
    parse_key,
)
from gridsheet.spreadsheet.model import (
    Cell,
    CellMap,
    CellValidation,
    Column,
    Row,
    SheetState,
    update_options,
)
from gridsheet.spreadsheet import operations
from gridsheet.utils.export import chart_data
from gridsheet.utils.serialization import deserialize, serialize
from gridsheet.validation import ValidationResult, validate

logger = logging.getLogger(__name__)

_COLUMN, _ROW = 0, 1


def _relocate(cells: CellMap, axis: int, pivot: int, step: int) -> None:
    """Shift cells past *pivot* along *axis* by *step* (+1 insert, -1 delete).

    When deleting, cells on the pivot itself are discarded first.
    """
    def mapper(key: CellKey) -> Optional[CellKey]:
        position = key[axis]
        if step < 0 and position == pivot:
            return None
        if position <= pivot:
            return key
        if axis == _COLUMN:
            return (position + step, key[1])
        return (key[0], position + step)

    cells.remap(mapper)


class SheetStore:
    """Mutable spreadsheet with a whole-sheet recalculation after each edit.

    Usage::

        store = SheetStore()
        store.set_cell_value("A1", "2")
        store.set_cell_value("A2", "4")
        store.set_cell_value("A3", "=SUM(A1:A2)")
        store.get_cell("A3").computed  # 6

    Attributes:
        state: The current sheet. Replaced wholesale by ``load_state`` and
            ``reset_state``; mutated in place by every other method.
    """

    def __init__(self, rows: int = config.DEFAULT_ROWS, cols: int = config.DEFAULT_COLS) -> None:
        self._rows = rows
        self._cols = cols
        self.state = SheetState.initial(rows, cols)

    @property
    def cells(self) -> CellMap:
        return self.state.cells

    def get_cell(self, cell_id: str) -> Optional[Cell]:
        """Return the written cell at *cell_id*, or None. Never creates a cell."""
        return self.state.cells.get(cell_id)

    def snapshot(self) -> SheetState:
        """Deep copy of the current state; later edits do not affect it."""
        return copy.deepcopy(self.state)

    def _recalculate(self) -> None:
        recalculate(self.state.cells)

    # -- values and formats ------------------------------------------------

    def set_cell_value(self, cell_id: str, value: str) -> None:
        """Write a raw value, evaluating it if it is a formula.

        The write is never refused. If the cell carries a validation that the
        value fails, a warning is logged and the value is stored anyway; use
        ``set_cell_value_validated`` to gate the write.

        Raises:
            AddressFormatError: If cell_id is not a cell identifier
        """
        cell = self.state.cells.ensure(cell_id)
        if cell.validation is not None:
            result = validate(value, cell.validation)
            if not result.valid:
                logger.warning("Validation failed for %s: %s", cell_id, result.message)

        cell.value = value
        if cell.is_formula:
            cell.formula = value
            cell.computed = evaluate_formula(value[1:], self.state.cells)
        else:
            cell.formula = ""
            cell.computed = None

        self._recalculate()

    def set_cell_value_validated(self, cell_id: str, value: str) -> ValidationResult:
        """Write *value* only if it passes the cell's validation.

        Returns:
            The validation outcome; the sheet is unchanged when it is invalid
        """
        cell = self.get_cell(cell_id)
        result = validate(value, cell.validation if cell is not None else None)
        if result.valid:
            self.set_cell_value(cell_id, value)
        return result

    def update_cell_format(self, cell_id: str, partial_format: Mapping[str, Any]) -> None:
        """Merge the attributes in *partial_format* over the cell's format.

        Formats never affect computed values, so nothing is recalculated.
        """
        cell = self.state.cells.ensure(cell_id)
        cell.format = cell.format.merged(partial_format)

    def set_cell_validation(
        self,
        cell_id: str,
        validation: Union[CellValidation, Mapping[str, Any], None],
    ) -> None:
        """Attach (or with None, remove) a validation on *cell_id*.

        The current value is checked against the new rule and a warning is
        logged when it fails; the value itself is left alone.
        """
        if isinstance(validation, Mapping):
            validation = CellValidation.from_dict(validation)
        cell = self.state.cells.ensure(cell_id)
        cell.validation = copy.deepcopy(validation)

        if validation is not None:
            result = validate(cell.value, validation)
            if not result.valid:
                logger.warning(
                    "Cell %s value doesn't meet validation criteria: %s", cell_id, result.message
                )

    def validate_cell(self, value: str, validation: Optional[CellValidation]) -> ValidationResult:
        """Check *value* against *validation* without touching the sheet."""
        return validate(value, validation)

    # -- structure ---------------------------------------------------------

    def add_row(self, after_row_id: Union[str, int]) -> None:
        """Insert a row after *after_row_id*, moving later rows down by one."""
        after_row_id = str(after_row_id)
        index = self.state.row_index(after_row_id)
        if index == -1:
            logger.debug("add_row: unknown row %s", after_row_id)
            return

        pivot = int(after_row_id)
        rows = self.state.rows
        for row in rows[index + 1:]:
            row.id = str(row.number + 1)
        rows.insert(index + 1, Row(str(pivot + 1)))
        _relocate(self.state.cells, _ROW, pivot, +1)

        self._recalculate()

    def delete_row(self, row_id: Union[str, int]) -> None:
        """Delete *row_id* and its cells, moving later rows up by one."""
        row_id = str(row_id)
        index = self.state.row_index(row_id)
        if index == -1:
            logger.debug("delete_row: unknown row %s", row_id)
            return

        pivot = int(row_id)
        rows = self.state.rows
        del rows[index]
        for row in rows[index:]:
            row.id = str(row.number - 1)
        _relocate(self.state.cells, _ROW, pivot, -1)

        self._recalculate()

    def add_column(self, after_column_id: str) -> None:
        """Insert a column after *after_column_id*, moving later columns right."""
        after_column_id = after_column_id.upper()
        index = self.state.column_index(after_column_id)
        if index == -1:
            logger.debug("add_column: unknown column %s", after_column_id)
            return

        pivot = column_to_ordinal(after_column_id)
        columns = self.state.columns
        for column in columns[index + 1:]:
            column.id = ordinal_to_column(column.ordinal + 1)
        columns.insert(index + 1, Column(ordinal_to_column(pivot + 1)))
        _relocate(self.state.cells, _COLUMN, pivot, +1)

        self._recalculate()

    def delete_column(self, column_id: str) -> None:
        """Delete *column_id* and its cells, moving later columns left."""
        column_id = column_id.upper()
        index = self.state.column_index(column_id)
        if index == -1:
            logger.debug("delete_column: unknown column %s", column_id)
            return

        pivot = column_to_ordinal(column_id)
        columns = self.state.columns
        del columns[index]
        for column in columns[index:]:
            column.id = ordinal_to_column(column.ordinal - 1)
        _relocate(self.state.cells, _COLUMN, pivot, -1)

        self._recalculate()

    def resize_row(self, row_id: Union[str, int], height: int) -> None:
        """Set a row's height, clamped to the minimum row height."""
        index = self.state.row_index(str(row_id))
        if index != -1:
            self.state.rows[index].height = max(config.MIN_ROW_HEIGHT, height)

    def resize_column(self, column_id: str, width: int) -> None:
        """Set a column's width, clamped to the minimum column width."""
        index = self.state.column_index(column_id.upper())
        if index != -1:
            self.state.columns[index].width = max(config.MIN_COLUMN_WIDTH, width)

    # -- bulk text operations ----------------------------------------------

    def find_and_replace(
        self,
        find_text: str,
        replace_text: str,
        match_case: bool = False,
        match_entire_cell: bool = False,
        cell_ids: Optional[Iterable[str]] = None,
    ) -> None:
        """Replace text in raw values across *cell_ids* (default: every cell).

        See ``gridsheet.spreadsheet.operations.find_and_replace``. Empty
        *find_text* is a no-op.
        """
        if not find_text:
            return
        self.state.cells = operations.find_and_replace(
            self.state.cells, find_text, replace_text, match_case, match_entire_cell, cell_ids
        )
        self._recalculate()

    def find_and_replace_text(self) -> None:
        """Run find/replace with the stored dialog options over the selection."""
        options = self.state.find_replace_options
        self.find_and_replace(
            options.find_text,
            options.replace_text,
            options.match_case,
            options.match_entire_cell,
            self.state.selected_range,
        )

    def remove_duplicate_rows(self, selected_range: Optional[List[str]] = None) -> None:
        """Blank repeated rows within *selected_range* (default: the selection).

        Needs at least two selected cells; otherwise nothing happens.
        """
        cell_ids = self.state.selected_range if selected_range is None else selected_range
        if not cell_ids or len(cell_ids) < 2:
            return
        self.state.cells = operations.remove_duplicates(self.state.cells, list(cell_ids))
        self._recalculate()

    # -- fill gesture ------------------------------------------------------

    def begin_fill(self, source_id: str) -> None:
        """Record *source_id* as the pending fill source."""
        self.state.is_dragging = True
        self.state.drag_start_cell = source_id

    def commit_fill(self, target_id: str) -> None:
        """Copy the pending source into *target_id* and end the gesture.

        Value, formula text and format are copied (the format by value); the
        target's formula is evaluated. Without a pending source this does
        nothing.
        """
        source_id = self.state.drag_start_cell
        if not self.state.is_dragging or source_id is None:
            return

        source = self.get_cell(source_id)
        try:
            parse_key(target_id)
        except AddressFormatError:
            logger.debug("commit_fill: invalid target %r", target_id)
            source = None

        if source is not None and target_id != source_id:
            target = self.state.cells.ensure(target_id)
            target.value = source.value
            target.formula = source.formula
            target.format = copy.deepcopy(source.format)
            if source.is_formula:
                target.computed = evaluate_formula(source.value[1:], self.state.cells)
            else:
                target.computed = source.computed

        self.cancel_fill()
        self._recalculate()

    def cancel_fill(self) -> None:
        """Forget the pending fill source without touching any cell."""
        self.state.is_dragging = False
        self.state.drag_start_cell = None

    # -- selection and dialog state ----------------------------------------

    def set_selected_cell(self, cell_id: Optional[str]) -> None:
        self.state.selected_cell = cell_id
        self.state.selected_range = [cell_id] if cell_id else None
        cell = self.get_cell(cell_id) if cell_id else None
        self.state.formula_bar_value = cell.value if cell is not None else ""

    def set_selected_range(self, selection: Union[str, List[str], None]) -> None:
        """Select a list of cell ids, or a range expression such as ``"A1:B3"``."""
        if isinstance(selection, str):
            selection = expand_range(selection)
        self.state.selected_range = list(selection) if selection is not None else None
        if selection:
            self.state.selected_cell = selection[0]
            cell = self.get_cell(selection[0])
            self.state.formula_bar_value = cell.value if cell is not None else ""

    def set_formula_bar_value(self, value: str) -> None:
        self.state.formula_bar_value = value

    def toggle_find_replace(self) -> None:
        self.state.find_replace_open = not self.state.find_replace_open

    def update_find_replace_options(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """Update dialog options, e.g. ``update_find_replace_options(find_text="x")``."""
        update_options(self.state.find_replace_options, {**(options or {}), **kwargs})

    def toggle_chart(self) -> None:
        self.state.chart_open = not self.state.chart_open

    def update_chart_options(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        update_options(self.state.chart_options, {**(options or {}), **kwargs})

    def create_chart(self) -> pd.DataFrame:
        """Extract the chart series for the current options and close the dialog."""
        data = chart_data(self.state)
        self.state.chart_open = False
        return data

    # -- documents ---------------------------------------------------------

    def load_state(self, document: Any) -> None:
        """Replace the whole sheet with a recalculated copy of *document*.

        Raises:
            DocumentFormatError: If the document is invalid; the current
                sheet is left untouched
        """
        try:
            state = deserialize(document)
        except DocumentFormatError as e:
            logger.warning("Failed to load spreadsheet: %s", e)
            raise
        self.state = state

    def to_document(self) -> dict:
        """The persisted document form of the current sheet."""
        return serialize(self.state)

    def reset_state(self) -> None:
        """Discard everything and start from an empty default sheet."""
        self.state = SheetState.initial(self._rows, self._cols)
