"""
Default settings for new sheets.

Every tunable default lives here so the store, the model and the formula
engine agree on the same values. ``SheetStore`` accepts overrides for the
initial extent; the remaining values are fixed for the package.
"""

from typing import Any, Dict

# Initial extent of a freshly created sheet
DEFAULT_ROWS = 100
DEFAULT_COLS = 26

# Geometry, in pixels
DEFAULT_ROW_HEIGHT = 25
DEFAULT_COLUMN_WIDTH = 100
MIN_ROW_HEIGHT = 15
MIN_COLUMN_WIDTH = 50

# Computed value written to a cell whose formula fails to evaluate
ERROR_SENTINEL = "#ERROR"

# Joins a row's raw values into its canonical key for duplicate detection
ROW_KEY_SEPARATOR = "|"

DEFAULT_FORMAT: Dict[str, Any] = {
    "bold": False,
    "italic": False,
    "fontSize": 12,
    "color": "#000000",
    "align": "left",
}
