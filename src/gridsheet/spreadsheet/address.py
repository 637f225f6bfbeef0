"""
Cell addressing arithmetic.

This module converts between the textual cell identifiers users see and the
integer coordinates the cell map is keyed by:
- Column letters <-> 1-based ordinals (bijective base 26: A=1, Z=26, AA=27)
- Cell identifiers (``C12``) <-> ``(letters, row)`` and ``(ordinal, row)`` keys
- Range expressions (``A1:B3``) -> row-major lists of cell identifiers
"""

import re
from typing import List, Optional, Tuple, Union

from gridsheet.exceptions import AddressFormatError

CellKey = Tuple[int, int]

ADDRESS_RE = re.compile(r"^([A-Z]*)(\d*)$")
RANGE_RE = re.compile(r"^([A-Z]+)(\d+):([A-Z]+)(\d+)$")


def column_to_ordinal(letters: str) -> int:
    """Convert column letter(s) to a 1-based ordinal.

    Args:
        letters: Column letter(s) (A, Z, AA, etc.), case-insensitive

    Returns:
        Column ordinal (A = 1, Z = 26, AA = 27, etc.)

    Raises:
        AddressFormatError: If letters is empty or contains non A-Z characters
    """
    if not isinstance(letters, str) or not letters:
        raise AddressFormatError(f"Invalid column letters: {letters!r}")

    ordinal = 0
    for char in letters.upper():
        if not "A" <= char <= "Z":
            raise AddressFormatError(f"Invalid column letters: {letters!r}")
        ordinal = ordinal * 26 + (ord(char) - 64)
    return ordinal


def ordinal_to_column(ordinal: int) -> str:
    """Convert a 1-based column ordinal to letter(s).

    Each digit is taken after subtracting one, so there is no zero digit and
    the mapping stays a bijection (26 -> Z, 27 -> AA, 702 -> ZZ, 703 -> AAA).

    Raises:
        AddressFormatError: If ordinal is not a positive integer
    """
    if isinstance(ordinal, bool) or not isinstance(ordinal, int) or ordinal < 1:
        raise AddressFormatError(f"Column ordinal must be a positive integer, got {ordinal!r}")

    result = ""
    while ordinal > 0:
        ordinal, remainder = divmod(ordinal - 1, 26)
        result = chr(65 + remainder) + result
    return result


def parse_address(cell_id: str) -> Tuple[str, int]:
    """Split a cell identifier into its column letters and row number.

    Args:
        cell_id: Identifier such as ``"C12"`` (case-insensitive, surrounding
            whitespace ignored)

    Returns:
        Tuple of (column letters, row number), e.g. ``("C", 12)``

    Raises:
        AddressFormatError: If the letter run or the digit run is empty, or
            the row number is zero
    """
    if not isinstance(cell_id, str):
        raise AddressFormatError(f"Cell identifier must be a string, got {type(cell_id).__name__}")

    match = ADDRESS_RE.match(cell_id.strip().upper())
    if not match:
        raise AddressFormatError(f"Invalid cell identifier: {cell_id!r}")

    letters, digits = match.groups()
    if not letters or not digits:
        raise AddressFormatError(f"Invalid cell identifier: {cell_id!r}")

    row = int(digits)
    if row < 1:
        raise AddressFormatError(f"Row numbers start at 1: {cell_id!r}")
    return letters, row


def format_address(column: Union[str, int], row: int) -> str:
    """Build a cell identifier from column letters (or ordinal) and a row."""
    letters = ordinal_to_column(column) if isinstance(column, int) else column.upper()
    return f"{letters}{row}"


def parse_key(cell_id: str) -> CellKey:
    """Parse a cell identifier into its ``(column ordinal, row)`` storage key."""
    letters, row = parse_address(cell_id)
    return column_to_ordinal(letters), row


def format_key(key: CellKey) -> str:
    """Format a ``(column ordinal, row)`` storage key as a cell identifier."""
    ordinal, row = key
    return f"{ordinal_to_column(ordinal)}{row}"


def expand_range(expression: str) -> List[str]:
    """Expand a range expression into individual cell identifiers.

    Endpoints may be given in any order; each axis is normalised on its own so
    ``B3:A1`` and ``A1:B3`` expand identically. Cells are listed row-major
    (rows outer, columns inner).

    An expression that is not shaped ``<col><row>:<col><row>`` is treated as a
    bare reference and returned unchanged in a one-element list.

    Example:
        >>> expand_range("A1:B2")
        ['A1', 'B1', 'A2', 'B2']
        >>> expand_range("C7")
        ['C7']
    """
    match = RANGE_RE.match(expression)
    if not match:
        return [expression]

    start_letters, start_row, end_letters, end_row = match.groups()
    cell_range = Range(
        column_to_ordinal(start_letters),
        int(start_row),
        column_to_ordinal(end_letters),
        int(end_row),
    )
    return cell_range.cells()


class Range:
    """Represents a rectangular cell region in A1 notation.

    Coordinates are 1-based (column ordinal A = 1, row 1 = first row), the same
    convention the cell map keys use. Endpoints are normalised on construction
    so that ``col <= col_end`` and ``row <= row_end``.

    Attributes:
        col: First column ordinal
        row: First row number
        col_end: Last column ordinal (inclusive)
        row_end: Last row number (inclusive)
    """

    def __init__(
        self,
        col: int,
        row: int,
        col_end: Optional[int] = None,
        row_end: Optional[int] = None
    ) -> None:
        col_end = col if col_end is None else col_end
        row_end = row if row_end is None else row_end
        if min(col, row, col_end, row_end) < 1:
            raise AddressFormatError("Range coordinates must be positive (1-indexed)")

        self.col = min(col, col_end)
        self.col_end = max(col, col_end)
        self.row = min(row, row_end)
        self.row_end = max(row, row_end)

    @classmethod
    def from_a1(cls, notation: str) -> "Range":
        """Parse ``A1`` or ``A1:B10`` notation (case-insensitive).

        Raises:
            AddressFormatError: If notation is empty or malformed
        """
        notation = notation.strip()
        if not notation:
            raise AddressFormatError("Empty range notation")

        parts = notation.split(":")
        if len(parts) > 2:
            raise AddressFormatError(f"Invalid range notation: {notation}")

        start_col, start_row = parse_key(parts[0])
        if len(parts) == 1:
            return cls(start_col, start_row)
        end_col, end_row = parse_key(parts[1])
        return cls(start_col, start_row, end_col, end_row)

    def to_a1(self) -> str:
        """Convert to A1 notation (``"A1"`` or ``"A1:B10"``)."""
        start = format_key((self.col, self.row))
        if self.col == self.col_end and self.row == self.row_end:
            return start
        return f"{start}:{format_key((self.col_end, self.row_end))}"

    def keys(self) -> List[CellKey]:
        """Storage keys covered by the range, row-major."""
        return [
            (col, row)
            for row in range(self.row, self.row_end + 1)
            for col in range(self.col, self.col_end + 1)
        ]

    def cells(self) -> List[str]:
        """Cell identifiers covered by the range, row-major."""
        return [format_key(key) for key in self.keys()]

    def contains(self, key: CellKey) -> bool:
        col, row = key
        return self.col <= col <= self.col_end and self.row <= row <= self.row_end

    def __repr__(self) -> str:
        return f"Range({self.to_a1()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return (
            self.col == other.col
            and self.row == other.row
            and self.col_end == other.col_end
            and self.row_end == other.row_end
        )
