"""
Formula evaluation against a cell map.

A formula body (the text after the leading ``=``) is evaluated in one of two
ways:

1. If it is shaped ``NAME(args)`` it is a function call. The arguments are
   split on commas outside quotes, range arguments are expanded to their
   cells, every reference is resolved to a value, and the values are handed
   to the function registered as NAME.
2. Otherwise it is an arithmetic expression over numbers and cell references,
   evaluated by the restricted parser in ``gridsheet.formula.arithmetic``.

Evaluation never raises. Any failure becomes the ``#ERROR`` sentinel so a
single bad formula cannot abort a recalculation sweep.
"""

from __future__ import annotations

import logging
import re
from typing import List

from gridsheet import config
from gridsheet.formula.arithmetic import evaluate_arithmetic
from gridsheet.formula.functions import FUNCTIONS, Value, call_function, normalize_number, to_number
from gridsheet.spreadsheet.address import expand_range
from gridsheet.spreadsheet.model import CellMap

logger = logging.getLogger(__name__)

FUNCTION_CALL_RE = re.compile(r"^(\w+)\((.*)\)$", re.DOTALL)
NUMERIC_LITERAL_RE = re.compile(r"^-?\d+(\.\d+)?$")
CELL_REFERENCE_RE = re.compile(r"^[A-Z]+\d+$")

_QUOTES = ('"', "'")


def split_arguments(args_text: str) -> List[str]:
    """Split a function's argument text on commas outside quoted runs.

    Either quote character toggles the inside-quote state, and quote
    characters are kept in the segment. Segments are stripped; a trailing
    empty segment is dropped.

    Example:
        >>> split_arguments('A1:A3, "a,b", 2')
        ['A1:A3', '"a,b"', '2']
    """
    parts: List[str] = []
    current = ""
    in_quotes = False
    for char in args_text:
        if char in _QUOTES:
            in_quotes = not in_quotes
            current += char
        elif char == "," and not in_quotes:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    if current:
        parts.append(current.strip())
    return parts


def resolve_reference(ref: str, cells: CellMap) -> Value:
    """Resolve one function argument to a value.

    Precedence:
        1. A numeric literal (``-?digits(.digits)?``) is a number
        2. A quoted literal (``"..."`` or ``'...'``) is its unquoted text
        3. A written cell yields its computed value when it has one (numeric
           text becomes a number), otherwise its raw value parsed as a number,
           falling back to the raw text
        4. Anything else, including an unset cell, is None
    """
    if NUMERIC_LITERAL_RE.match(ref):
        return normalize_number(float(ref))
    if ref.startswith(_QUOTES) and ref.endswith(ref[0]):
        return ref[1:-1]
    if not CELL_REFERENCE_RE.match(ref):
        return None

    cell = cells.get(ref)
    if cell is None:
        return None
    if cell.computed is not None:
        number = to_number(cell.computed)
        return cell.computed if number is None else normalize_number(number)
    number = to_number(cell.value)
    return cell.value if number is None else normalize_number(number)


def reference_number(ref: str, cells: CellMap) -> float:
    """Numeric value of a cell for arithmetic; unset or non-numeric is 0."""
    cell = cells.get(ref)
    if cell is None:
        return 0
    source = cell.computed if cell.computed is not None else cell.value
    number = to_number(source)
    return 0 if number is None else number


def evaluate_formula(body: str, cells: CellMap) -> Value:
    """Evaluate a formula body against *cells*.

    Args:
        body: Formula text without the leading '=' (e.g. ``"SUM(A1:A3)"``)
        cells: The cell map references are resolved against

    Returns:
        A number, a string, None (an aggregate over nothing, or an unknown
        function), or ``"#ERROR"`` if evaluation failed
    """
    try:
        match = FUNCTION_CALL_RE.match(body)
        if match:
            name, args_text = match.groups()
            if name not in FUNCTIONS:
                return None
            refs: List[str] = []
            for segment in split_arguments(args_text):
                refs.extend(expand_range(segment) if ":" in segment else [segment])
            return call_function(name, [resolve_reference(ref, cells) for ref in refs])

        result = evaluate_arithmetic(body, lambda ref: reference_number(ref, cells))
        return normalize_number(result)
    except Exception as e:
        logger.debug("Formula evaluation error: %s for formula: =%s", e, body)
        return config.ERROR_SENTINEL
