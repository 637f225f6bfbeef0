"""
Bulk text operations on a cell map.

This module defines the operations that rewrite many cells at once:
- find_and_replace: Whole-cell or substring replacement over raw values
- remove_duplicates: Blank every selected row whose values repeat an earlier row

Both are pure: they return a new ``CellMap`` and leave their input untouched.
Recalculating formulas afterwards is the caller's job.
"""

import re
from typing import Dict, Iterable, List, Optional

from gridsheet import config
from gridsheet.exceptions import AddressFormatError
from gridsheet.spreadsheet.address import parse_key
from gridsheet.spreadsheet.model import Cell, CellMap


def _rewrite(cell: Cell, value: str) -> None:
    cell.value = value
    cell.formula = value if cell.is_formula else ""
    cell.computed = None


def find_and_replace(
    cells: CellMap,
    find_text: str,
    replace_text: str,
    match_case: bool = False,
    match_entire_cell: bool = False,
    cell_ids: Optional[Iterable[str]] = None,
) -> CellMap:
    """Replace *find_text* with *replace_text* in raw cell values.

    Args:
        cells: Cell map to search
        find_text: Text to look for (a literal, not a pattern)
        replace_text: Replacement text (inserted literally)
        match_case: Compare case-sensitively
        match_entire_cell: Replace the whole value, and only on an exact match;
            otherwise replace every occurrence inside the value
        cell_ids: Restrict the search to these cells; defaults to every
            written cell

    Returns:
        A new CellMap. Changed cells lose their computed value until the
        next recalculation. With no match the result equals *cells*.
    """
    result = cells.copy()
    if not find_text:
        return result

    flags = 0 if match_case else re.IGNORECASE
    pattern = re.compile(re.escape(find_text), flags)
    targets = result.ids() if cell_ids is None else list(dict.fromkeys(cell_ids))

    for cell_id in targets:
        cell = result.get(cell_id)
        if cell is None or not cell.value:
            continue

        if match_entire_cell:
            if match_case:
                matched = cell.value == find_text
            else:
                matched = cell.value.lower() == find_text.lower()
            new_value = replace_text if matched else cell.value
        else:
            new_value = pattern.sub(lambda _: replace_text, cell.value)

        if new_value != cell.value:
            _rewrite(cell, new_value)

    return result


def remove_duplicates(cells: CellMap, cell_ids: List[str]) -> CellMap:
    """Blank the selected cells of every row that repeats an earlier row.

    The selection is grouped by row in first-seen order. Each row's canonical
    key joins its written cells' raw values in ascending column order. A row
    whose key was already seen has every selected cell's value and computed
    value cleared; format and validation stay.

    Fewer than two selected cells is a no-op.
    """
    result = cells.copy()
    if len(cell_ids) < 2:
        return result

    rows: Dict[int, Dict[int, Cell]] = {}
    for cell_id in cell_ids:
        try:
            col, row = parse_key(cell_id)
        except AddressFormatError:
            continue
        cell = result.get_key((col, row))
        if cell is not None:
            rows.setdefault(row, {})[col] = cell

    seen = set()
    for columns in rows.values():
        key = config.ROW_KEY_SEPARATOR.join(columns[col].value for col in sorted(columns))
        if key in seen:
            for cell in columns.values():
                _rewrite(cell, "")
        else:
            seen.add(key)

    return result
