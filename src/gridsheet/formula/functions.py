"""
Spreadsheet function implementations for the formula evaluator.

Each function receives its arguments as already-resolved Python values: a
range argument arrives flattened into one value per cell, literals arrive as
numbers or strings, and references to unset cells arrive as ``None``.

Functions registered here:

  SUM: total of the numeric arguments
  AVERAGE: arithmetic mean of the numeric arguments
  MAX: largest numeric argument
  MIN: smallest numeric argument
  COUNT: number of numeric arguments (0 when there are none)
  TRIM: first argument as text, surrounding whitespace removed
  UPPER: first argument as text, upper-cased
  LOWER: first argument as text, lower-cased

Numeric aggregates skip arguments that are not numbers and do not parse as
numbers. Over zero usable numbers they return ``None``, except COUNT.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, List, Optional, Union

Value = Union[int, float, str, None]
SheetFunction = Callable[[List[Value]], Value]

_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?\s*$")

FUNCTIONS: Dict[str, SheetFunction] = {}


def to_number(value: Any) -> Optional[float]:
    """Interpret *value* as a number, or return None.

    Numbers pass through; strings are accepted when they are a decimal literal
    (optionally signed, with an optional exponent) surrounded by optional
    whitespace. ``nan``/``inf`` spellings and booleans are not numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    if isinstance(value, str) and _NUMBER_RE.match(value):
        return float(value)
    return None


def normalize_number(value: Value) -> Value:
    """Collapse integral floats to ``int`` (``6.0`` -> ``6``); other values pass."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def display_text(value: Value) -> str:
    """String form of a cell value; None is empty and integral floats drop '.0'."""
    if value is None:
        return ""
    return str(normalize_number(value))


def _numbers(args: List[Value]) -> List[float]:
    numbers = []
    for arg in args:
        number = to_number(arg)
        if number is not None:
            numbers.append(number)
    return numbers


def _sheet_sum(args: List[Value]) -> Value:
    """SUM(values...)"""
    numbers = _numbers(args)
    return normalize_number(sum(numbers)) if numbers else None


def _sheet_average(args: List[Value]) -> Value:
    """AVERAGE(values...)"""
    numbers = _numbers(args)
    return normalize_number(sum(numbers) / len(numbers)) if numbers else None


def _sheet_max(args: List[Value]) -> Value:
    """MAX(values...)"""
    numbers = _numbers(args)
    return normalize_number(max(numbers)) if numbers else None


def _sheet_min(args: List[Value]) -> Value:
    """MIN(values...)"""
    numbers = _numbers(args)
    return normalize_number(min(numbers)) if numbers else None


def _sheet_count(args: List[Value]) -> Value:
    """COUNT(values...)

    Unlike the other aggregates, counting nothing is 0 rather than empty.
    """
    return len(_numbers(args))


def _sheet_trim(args: List[Value]) -> Value:
    """TRIM(text)"""
    if not args:
        return None
    return display_text(args[0]).strip()


def _sheet_upper(args: List[Value]) -> Value:
    """UPPER(text)"""
    if not args:
        return None
    return display_text(args[0]).upper()


def _sheet_lower(args: List[Value]) -> Value:
    """LOWER(text)"""
    if not args:
        return None
    return display_text(args[0]).lower()


def register_function(name: str, func: SheetFunction, registry: Optional[Dict[str, SheetFunction]] = None) -> None:
    """Register *func* under *name* (case-sensitive) in *registry*.

    Defaults to the module-wide ``FUNCTIONS`` table the evaluator dispatches to.
    """
    if not name or not isinstance(name, str):
        raise ValueError("Function name must be a non-empty string")
    (FUNCTIONS if registry is None else registry)[name] = func


def call_function(name: str, args: List[Value]) -> Value:
    """Dispatch *args* to the function registered as *name*.

    An unregistered name is inert: it yields None rather than an error.
    """
    func = FUNCTIONS.get(name)
    if func is None:
        return None
    return func(args)


def register_builtin_functions(registry: Optional[Dict[str, SheetFunction]] = None) -> None:
    """Register the built-in function set on *registry* (``FUNCTIONS`` by default)."""
    register_function("SUM", _sheet_sum, registry)
    register_function("AVERAGE", _sheet_average, registry)
    register_function("MAX", _sheet_max, registry)
    register_function("MIN", _sheet_min, registry)
    register_function("COUNT", _sheet_count, registry)
    register_function("TRIM", _sheet_trim, registry)
    register_function("UPPER", _sheet_upper, registry)
    register_function("LOWER", _sheet_lower, registry)


register_builtin_functions()
