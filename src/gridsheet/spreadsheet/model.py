"""
Spreadsheet data model classes.

This module provides the entities a sheet is made of:
- CellFormat: Presentation attributes carried by a cell
- CellValidation: Optional constraint on a cell's raw value
- Cell: Raw text, formula text, cached computed value, format and validation
- Column / Row: Sheet extent entries with their geometry
- CellMap: The sparse cell map, keyed by (column ordinal, row) pairs
- SheetState: The whole sheet, including UI state kept for round-tripping

Every class converts to and from the persisted document form via
``to_dict()``/``from_dict()``. Persisted keys are camelCase; attributes are
snake_case.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from gridsheet import config
from gridsheet.exceptions import AddressFormatError, DocumentFormatError
from gridsheet.spreadsheet.address import (
    CellKey,
    column_to_ordinal,
    format_key,
    ordinal_to_column,
    parse_key,
)

Computed = Union[int, float, str, None]

REQUIRED_DOCUMENT_KEYS = ("cells", "columns", "rows")


@dataclass
class CellFormat:
    """Presentation attributes of a cell.

    Rendering is out of scope for the package; the format is stored so it
    survives edits, fills and save/load.

    Attributes:
        bold: Bold text
        italic: Italic text
        font_size: Font size in points
        color: Text colour as a CSS colour string
        align: Horizontal alignment ('left', 'center' or 'right')
        number_format: Number format kind ('general', 'currency', 'percent',
            'date'), or None when unset
    """
    bold: bool = False
    italic: bool = False
    font_size: int = 12
    color: str = "#000000"
    align: Optional[str] = "left"
    number_format: Optional[str] = None

    _KEYS = {
        "bold": "bold",
        "italic": "italic",
        "fontSize": "font_size",
        "color": "color",
        "align": "align",
        "numberFormat": "number_format",
    }

    def merged(self, partial: Mapping[str, Any]) -> "CellFormat":
        """Return a copy with the attributes in *partial* applied on top.

        Keys may be given in persisted (``fontSize``) or attribute
        (``font_size``) form.

        Raises:
            ValueError: If *partial* names an unknown attribute
        """
        updates = {}
        for key, value in partial.items():
            attr = self._KEYS.get(key, key)
            if attr not in self._KEYS.values():
                raise ValueError(f"Unknown format attribute: {key!r}")
            updates[attr] = value
        result = copy.copy(self)
        for attr, value in updates.items():
            setattr(result, attr, value)
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = {key: getattr(self, attr) for key, attr in self._KEYS.items()}
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellFormat":
        """Create from dictionary representation; missing keys take defaults."""
        return cls().merged({key: value for key, value in data.items() if key in cls._KEYS})

    @classmethod
    def default(cls) -> "CellFormat":
        return cls.from_dict(config.DEFAULT_FORMAT)


@dataclass
class CellValidation:
    """Constraint descriptor attached to a cell.

    Attributes:
        type: Constraint kind ('text', 'number', 'date' or 'list')
        criteria: Kind-specific criterion ('greater'/'less' for numbers,
            'length' for text)
        value: Threshold, maximum length, or list of allowed strings
        allow_blank: Accept empty or whitespace-only values
        show_dropdown: Offer the allowed values as a dropdown (list kind)
        error_message: Custom message replacing the generated one
    """
    type: str
    criteria: Optional[str] = None
    value: Union[str, List[str], None] = None
    allow_blank: bool = False
    show_dropdown: bool = False
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = {
            "type": self.type,
            "criteria": self.criteria,
            "value": list(self.value) if isinstance(self.value, list) else self.value,
            "allowBlank": self.allow_blank,
            "showDropdown": self.show_dropdown,
            "errorMessage": self.error_message,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellValidation":
        """Create from dictionary representation."""
        value = data.get("value")
        return cls(
            type=data["type"],
            criteria=data.get("criteria"),
            value=list(value) if isinstance(value, (list, tuple)) else value,
            allow_blank=bool(data.get("allowBlank", False)),
            show_dropdown=bool(data.get("showDropdown", False)),
            error_message=data.get("errorMessage"),
        )


@dataclass
class Cell:
    """A written cell.

    A cell does not know its own identifier; the owning ``CellMap`` derives it
    from the storage key, so relocating a cell is a pure key change.

    Attributes:
        value: Raw text as typed; a leading '=' marks a formula
        formula: The raw value when it is a formula, empty otherwise
        format: Presentation attributes
        computed: Cached evaluation result (formula cells only), None when absent
        validation: Optional constraint on the raw value
        needs_recalculation: Dirty flag owned by the recalculation sweep
    """
    value: str = ""
    formula: str = ""
    format: CellFormat = field(default_factory=CellFormat.default)
    computed: Computed = None
    validation: Optional[CellValidation] = None
    needs_recalculation: bool = field(default=False, compare=False, repr=False)

    @property
    def is_formula(self) -> bool:
        return self.value.startswith("=")

    @property
    def display(self) -> Computed:
        """Computed value when there is one, otherwise the raw value."""
        return self.computed if self.computed is not None else self.value

    def copy(self) -> "Cell":
        """Deep copy; format and validation are never shared between cells."""
        return copy.deepcopy(self)

    def to_dict(self, cell_id: str) -> Dict[str, Any]:
        """Convert to dictionary representation under identifier *cell_id*."""
        data: Dict[str, Any] = {
            "id": cell_id,
            "value": self.value,
            "formula": self.formula,
            "format": self.format.to_dict(),
        }
        if self.computed is not None:
            data["computed"] = self.computed
        if self.validation is not None:
            data["validation"] = self.validation.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Cell":
        """Create from dictionary representation."""
        value = data.get("value", "")
        if not isinstance(value, str):
            raise TypeError(f"Cell value must be a string, got {type(value).__name__}")
        validation = data.get("validation")
        return cls(
            value=value,
            formula=data.get("formula") or "",
            format=CellFormat.from_dict(data.get("format") or {}),
            computed=data.get("computed"),
            validation=CellValidation.from_dict(validation) if validation else None,
        )


@dataclass
class Column:
    """A sheet column: letter id and width in pixels."""
    id: str
    width: int = config.DEFAULT_COLUMN_WIDTH

    @property
    def ordinal(self) -> int:
        return column_to_ordinal(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "width": self.width}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Column":
        column = cls(id=str(data["id"]).upper(), width=int(data.get("width", config.DEFAULT_COLUMN_WIDTH)))
        column_to_ordinal(column.id)
        return column


@dataclass
class Row:
    """A sheet row: decimal id and height in pixels."""
    id: str
    height: int = config.DEFAULT_ROW_HEIGHT

    @property
    def number(self) -> int:
        return int(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Row":
        row = cls(id=str(data["id"]), height=int(data.get("height", config.DEFAULT_ROW_HEIGHT)))
        if not row.id.isdigit() or row.number < 1:
            raise ValueError(f"Row id must be a positive integer, got {row.id!r}")
        return row


class CellMap:
    """Sparse map of written cells.

    Storage is keyed by ``(column ordinal, row)`` so structural edits are a
    pure key remap. String identifiers (``"C12"``) are accepted and produced
    only at this class's boundary. Iteration follows insertion order, which is
    also the order the recalculation sweep visits cells in.
    """

    def __init__(self, cells: Optional[Dict[CellKey, Cell]] = None) -> None:
        self._cells: Dict[CellKey, Cell] = dict(cells) if cells else {}

    def get(self, cell_id: str) -> Optional[Cell]:
        """Return the cell at *cell_id*, or None if unset or not an address.

        Reading never materialises an entry.
        """
        try:
            return self._cells.get(parse_key(cell_id))
        except AddressFormatError:
            return None

    def get_key(self, key: CellKey) -> Optional[Cell]:
        return self._cells.get(key)

    def set(self, cell_id: str, cell: Cell) -> None:
        self._cells[parse_key(cell_id)] = cell

    def ensure(self, cell_id: str) -> Cell:
        """Return the cell at *cell_id*, creating it with the default format."""
        key = parse_key(cell_id)
        if key not in self._cells:
            self._cells[key] = Cell()
        return self._cells[key]

    def pop(self, cell_id: str) -> Optional[Cell]:
        return self._cells.pop(parse_key(cell_id), None)

    def remap(self, mapper: Callable[[CellKey], Optional[CellKey]]) -> None:
        """Move every cell to ``mapper(key)``, dropping it when that is None.

        Relative iteration order is preserved.
        """
        remapped: Dict[CellKey, Cell] = {}
        for key, cell in self._cells.items():
            new_key = mapper(key)
            if new_key is not None:
                remapped[new_key] = cell
        self._cells = remapped

    def ids(self) -> List[str]:
        return [format_key(key) for key in self._cells]

    def items(self) -> Iterator[Tuple[str, Cell]]:
        for key, cell in self._cells.items():
            yield format_key(key), cell

    def key_items(self) -> Iterator[Tuple[CellKey, Cell]]:
        return iter(list(self._cells.items()))

    def values(self) -> List[Cell]:
        return list(self._cells.values())

    def copy(self) -> "CellMap":
        """Deep copy of the map and every cell in it."""
        return CellMap({key: cell.copy() for key, cell in self._cells.items()})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted ``{id: cell}`` mapping."""
        return {cell_id: cell.to_dict(cell_id) for cell_id, cell in self.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellMap":
        """Create from the persisted ``{id: cell}`` mapping."""
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping of cells, got {type(data).__name__}")
        return cls({parse_key(cell_id): Cell.from_dict(cell) for cell_id, cell in data.items()})

    def __contains__(self, cell_id: object) -> bool:
        return isinstance(cell_id, str) and self.get(cell_id) is not None

    def __getitem__(self, cell_id: str) -> Cell:
        cell = self.get(cell_id)
        if cell is None:
            raise KeyError(cell_id)
        return cell

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"CellMap({self.ids()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CellMap):
            return NotImplemented
        return self._cells == other._cells


@dataclass
class FindReplaceOptions:
    """Pending find/replace dialog input."""
    find_text: str = ""
    replace_text: str = ""
    match_case: bool = False
    match_entire_cell: bool = False

    _KEYS = {
        "findText": "find_text",
        "replaceText": "replace_text",
        "matchCase": "match_case",
        "matchEntireCell": "match_entire_cell",
    }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FindReplaceOptions":
        return cls(**{attr: data[key] for key, attr in cls._KEYS.items() if key in data})


@dataclass
class ChartOptions:
    """Pending chart dialog input."""
    type: str = "bar"
    title: str = ""
    data_range: str = ""
    label_range: str = ""

    _KEYS = {
        "type": "type",
        "title": "title",
        "dataRange": "data_range",
        "labelRange": "label_range",
    }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChartOptions":
        return cls(**{attr: data[key] for key, attr in cls._KEYS.items() if key in data})


def update_options(options: Any, partial: Mapping[str, Any]) -> None:
    """Apply *partial* (persisted or attribute key names) to an options object."""
    for key, value in partial.items():
        attr = options._KEYS.get(key, key)
        if attr not in options._KEYS.values():
            raise ValueError(f"Unknown option: {key!r}")
        setattr(options, attr, value)


@dataclass
class SheetState:
    """The whole sheet: cell map, extent, and UI state.

    Only ``cells``, ``columns`` and ``rows`` are data-model state. The other
    fields belong to the interactive surface but are carried so a saved
    document round-trips unchanged.
    """
    cells: CellMap
    columns: List[Column]
    rows: List[Row]
    selected_cell: Optional[str] = None
    selected_range: Optional[List[str]] = None
    formula_bar_value: str = ""
    find_replace_open: bool = False
    find_replace_options: FindReplaceOptions = field(default_factory=FindReplaceOptions)
    is_dragging: bool = False
    drag_start_cell: Optional[str] = None
    chart_open: bool = False
    chart_options: ChartOptions = field(default_factory=ChartOptions)

    @classmethod
    def initial(cls, rows: int = config.DEFAULT_ROWS, cols: int = config.DEFAULT_COLS) -> "SheetState":
        """Create an empty sheet with *cols* columns (A...) and *rows* rows (1...)."""
        if rows <= 0 or cols <= 0:
            raise ValueError("Sheet dimensions must be positive integers")
        return cls(
            cells=CellMap(),
            columns=[Column(ordinal_to_column(i)) for i in range(1, cols + 1)],
            rows=[Row(str(i)) for i in range(1, rows + 1)],
        )

    def column_index(self, column_id: str) -> int:
        """Position of *column_id* in the column list, or -1."""
        return next((i for i, column in enumerate(self.columns) if column.id == column_id), -1)

    def row_index(self, row_id: str) -> int:
        """Position of *row_id* in the row list, or -1."""
        return next((i for i, row in enumerate(self.rows) if row.id == row_id), -1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted document form."""
        return {
            "cells": self.cells.to_dict(),
            "columns": [column.to_dict() for column in self.columns],
            "rows": [row.to_dict() for row in self.rows],
            "selectedCell": self.selected_cell,
            "selectedRange": list(self.selected_range) if self.selected_range is not None else None,
            "formulaBarValue": self.formula_bar_value,
            "findReplaceOpen": self.find_replace_open,
            "findReplaceOptions": self.find_replace_options.to_dict(),
            "isDragging": self.is_dragging,
            "dragStartCell": self.drag_start_cell,
            "chartOpen": self.chart_open,
            "chartOptions": self.chart_options.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SheetState":
        """Create from the persisted document form.

        Raises:
            DocumentFormatError: If *data* is not a mapping, lacks ``cells``,
                ``columns`` or ``rows``, or holds a malformed entry
        """
        if not isinstance(data, Mapping):
            raise DocumentFormatError(f"Expected a document mapping, got {type(data).__name__}")

        missing = [key for key in REQUIRED_DOCUMENT_KEYS if data.get(key) is None]
        if missing:
            raise DocumentFormatError(f"Invalid spreadsheet document: missing {', '.join(missing)}")

        try:
            selected_range = data.get("selectedRange")
            return cls(
                cells=CellMap.from_dict(data["cells"]),
                columns=[Column.from_dict(column) for column in data["columns"]],
                rows=[Row.from_dict(row) for row in data["rows"]],
                selected_cell=data.get("selectedCell"),
                selected_range=list(selected_range) if selected_range is not None else None,
                formula_bar_value=data.get("formulaBarValue") or "",
                find_replace_open=bool(data.get("findReplaceOpen", False)),
                find_replace_options=FindReplaceOptions.from_dict(data.get("findReplaceOptions") or {}),
                is_dragging=bool(data.get("isDragging", False)),
                drag_start_cell=data.get("dragStartCell"),
                chart_open=bool(data.get("chartOpen", False)),
                chart_options=ChartOptions.from_dict(data.get("chartOptions") or {}),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DocumentFormatError(f"Invalid spreadsheet document: {e}") from e
