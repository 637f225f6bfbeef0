"""
Utility functions for gridsheet.

This module provides utilities for moving sheets in and out of the package:
- serialization: Document and JSON conversion for save/load transports
- export: pandas views of the grid and of the chart series
"""

from .serialization import (
    DOCUMENT_KEYS,
    as_state,
    deserialize,
    from_json,
    serialize,
    to_json,
)
from .export import chart_data, to_dataframe

__all__ = [
    'serialize',
    'deserialize',
    'to_json',
    'from_json',
    'as_state',
    'DOCUMENT_KEYS',
    'to_dataframe',
    'chart_data',
]
