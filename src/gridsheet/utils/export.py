"""
pandas views of a sheet.

- to_dataframe: The grid as a DataFrame (rows x columns, in sheet order)
- chart_data: The label/value series described by the sheet's chart options

Drawing the chart is left to the caller; this module only extracts the data.
"""

from __future__ import annotations

from typing import Any, List

import pandas as pd

from gridsheet.formula.functions import normalize_number, to_number
from gridsheet.spreadsheet.address import expand_range
from gridsheet.spreadsheet.model import SheetState
from gridsheet.utils.serialization import as_state

_VALUE_KINDS = ("display", "raw", "computed")


def to_dataframe(source: Any, values: str = "display") -> pd.DataFrame:
    """Build a DataFrame of the sheet's cells.

    Args:
        source: A SheetStore or a SheetState
        values: Which value to show per cell:
            'display': computed value when present, else the raw value
            'raw': the raw value as typed
            'computed': the computed value (None for non-formula cells)

    Returns:
        DataFrame indexed by row id with one column per column id. Unset
        cells are '' for 'display'/'raw' and None for 'computed'.

    Raises:
        ValueError: If values is not one of the kinds above
    """
    if values not in _VALUE_KINDS:
        raise ValueError(f"values must be one of {_VALUE_KINDS}, got {values!r}")

    state = as_state(source)
    empty = None if values == "computed" else ""
    data: List[List[Any]] = []
    for row in state.rows:
        line = []
        for column in state.columns:
            cell = state.cells.get_key((column.ordinal, row.number))
            if cell is None:
                line.append(empty)
            elif values == "raw":
                line.append(cell.value)
            elif values == "computed":
                line.append(cell.computed)
            else:
                line.append(cell.display)
        data.append(line)

    return pd.DataFrame(
        data,
        index=pd.Index([row.id for row in state.rows], name="row"),
        columns=pd.Index([column.id for column in state.columns], name="column"),
        dtype=object,
    )


def chart_data(source: Any) -> pd.DataFrame:
    """Extract the series for the sheet's chart options.

    Values come from ``chart_options.data_range`` (computed value when
    present, else the raw value; anything non-numeric counts as 0). Labels
    come from the raw values in ``chart_options.label_range``, or default to
    ``Label 1``, ``Label 2``, ... when no label range is set or it is shorter
    than the data.

    Returns:
        DataFrame with 'label' and 'value' columns indexed by data cell id;
        the chart type and title are kept in ``DataFrame.attrs``
    """
    state: SheetState = as_state(source)
    options = state.chart_options
    data_ids = expand_range(options.data_range.strip()) if options.data_range.strip() else []

    values = []
    for cell_id in data_ids:
        cell = state.cells.get(cell_id)
        number = to_number(cell.display) if cell is not None else None
        values.append(normalize_number(number) if number is not None else 0)

    labels = []
    if options.label_range.strip():
        for cell_id in expand_range(options.label_range.strip()):
            cell = state.cells.get(cell_id)
            labels.append(cell.value if cell is not None else "")
    labels = labels[:len(data_ids)]
    labels += [f"Label {n}" for n in range(len(labels) + 1, len(data_ids) + 1)]

    frame = pd.DataFrame(
        {"label": labels, "value": values},
        index=pd.Index(data_ids, name="cell"),
        columns=["label", "value"],
    )
    frame.attrs["type"] = options.type
    frame.attrs["title"] = options.title
    return frame
