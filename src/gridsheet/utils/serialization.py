"""
Sheet document serialization utilities.

Provides conversion between a sheet and its persisted document form, the
object an external transport saves to and loads from disk. The document
carries ``cells``, ``columns`` and ``rows`` plus the UI-state fields of the
sheet, so a save/load round trip is lossless.

Loading is all-or-nothing: the document is validated and converted in full,
and its formulas are recalculated, before anything is handed back.
"""

import json
from typing import Any, Dict

from gridsheet.exceptions import DocumentFormatError
from gridsheet.recalc import recalculate
from gridsheet.spreadsheet.model import REQUIRED_DOCUMENT_KEYS, SheetState

DOCUMENT_KEYS = REQUIRED_DOCUMENT_KEYS


def as_state(source: Any) -> SheetState:
    """Return the SheetState behind a SheetStore, or *source* itself."""
    state = getattr(source, "state", source)
    if not isinstance(state, SheetState):
        raise TypeError(f"Expected SheetStore or SheetState, got {type(source)}")
    return state


def serialize(source: Any) -> Dict[str, Any]:
    """Serialize a sheet to a JSON-serializable document.

    Args:
        source: A SheetStore or a SheetState

    Returns:
        Dictionary that can be serialized to JSON

    Raises:
        TypeError: If source is neither a SheetStore nor a SheetState

    Example:
        >>> store = SheetStore()
        >>> store.set_cell_value("A1", "42")
        >>> data = serialize(store)
        >>> assert data["cells"]["A1"]["value"] == "42"
    """
    return as_state(source).to_dict()


def deserialize(data: Any) -> SheetState:
    """Build a recalculated sheet state from a document.

    Args:
        data: Dictionary containing a serialized sheet

    Returns:
        A new SheetState with every formula re-evaluated

    Raises:
        DocumentFormatError: If data is not a mapping, misses ``cells``,
            ``columns`` or ``rows``, or holds a malformed entry
    """
    state = SheetState.from_dict(data)
    recalculate(state.cells)
    return state


def to_json(source: Any, **kwargs) -> str:
    """Serialize a sheet to a JSON string.

    Args:
        source: A SheetStore or a SheetState
        **kwargs: Additional arguments to pass to json.dumps (e.g., indent=2)

    Returns:
        JSON string representation of the sheet
    """
    return json.dumps(serialize(source), **kwargs)


def from_json(json_str: str) -> SheetState:
    """Deserialize a sheet from a JSON string.

    Raises:
        TypeError: If json_str is not a string
        DocumentFormatError: If the JSON is malformed or the document invalid
    """
    if not isinstance(json_str, str):
        raise TypeError(f"Expected str, got {type(json_str)}")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise DocumentFormatError(f"Invalid JSON: {e}") from e

    return deserialize(data)
