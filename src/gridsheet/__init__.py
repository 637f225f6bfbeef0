"""
gridsheet - A spreadsheet cell model and computation engine.

This package provides a sparse grid of addressable cells holding raw text,
optional formulas, and cached computed values, together with the edits a
spreadsheet needs: structural row/column changes, resizing, find/replace,
duplicate-row removal, a fill gesture, and per-cell validation. Every
content edit is followed by a whole-sheet recalculation.

Usage:
    >>> from gridsheet import SheetStore
    >>> store = SheetStore()
    >>> store.set_cell_value("A1", "2")
    >>> store.set_cell_value("A2", "x")
    >>> store.set_cell_value("A3", "4")
    >>> store.set_cell_value("B1", "=SUM(A1:A3)")
    >>> store.get_cell("B1").computed
    6

Key components:
- SheetStore: The mutable sheet and all of its operations
- evaluate_formula: Formula evaluation against a cell map
- recalculate: The whole-sheet recalculation sweep
- validate: Pure validation query
- serialize / deserialize: Persisted document conversion
"""

import logging

from .exceptions import *
from .formula import evaluate_formula
from .recalc import recalculate
from .spreadsheet import (
    Cell,
    CellFormat,
    CellMap,
    CellValidation,
    Column,
    Range,
    Row,
    SheetState,
    column_to_ordinal,
    expand_range,
    ordinal_to_column,
    parse_address,
)
from .store import SheetStore
from .utils import chart_data, deserialize, from_json, serialize, to_dataframe, to_json
from .validation import ValidationResult, validate

# Version
__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'SheetStore',
    'SheetState',
    'Cell',
    'CellFormat',
    'CellMap',
    'CellValidation',
    'Column',
    'Row',
    'Range',
    'column_to_ordinal',
    'ordinal_to_column',
    'parse_address',
    'expand_range',
    'evaluate_formula',
    'recalculate',
    'validate',
    'ValidationResult',
    'serialize',
    'deserialize',
    'to_json',
    'from_json',
    'to_dataframe',
    'chart_data',
    'AddressFormatError',
    'DocumentFormatError',
    'FormulaError',
]
