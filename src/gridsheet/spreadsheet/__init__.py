"""
Spreadsheet data model module.

This module provides the sheet's data structures and the arithmetic and bulk
operations that work on them without evaluating formulas.
"""

from gridsheet.spreadsheet.address import (
    Range,
    column_to_ordinal,
    expand_range,
    format_address,
    format_key,
    ordinal_to_column,
    parse_address,
    parse_key,
)
from gridsheet.spreadsheet.model import (
    Cell,
    CellFormat,
    CellMap,
    CellValidation,
    ChartOptions,
    Column,
    FindReplaceOptions,
    Row,
    SheetState,
)
from gridsheet.spreadsheet.operations import (
    find_and_replace,
    remove_duplicates,
)

__all__ = [
    "Range",
    "column_to_ordinal",
    "ordinal_to_column",
    "parse_address",
    "format_address",
    "parse_key",
    "format_key",
    "expand_range",
    "Cell",
    "CellFormat",
    "CellMap",
    "CellValidation",
    "ChartOptions",
    "Column",
    "FindReplaceOptions",
    "Row",
    "SheetState",
    "find_and_replace",
    "remove_duplicates",
]
