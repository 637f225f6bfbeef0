"""
Cell value validation.

``validate`` is a pure query: it checks a candidate raw value against a
``CellValidation`` and reports the outcome. Storage never calls it as a
precondition. ``SheetStore.set_cell_value`` accepts invalid input (and logs a
warning), while ``SheetStore.set_cell_value_validated`` is the opt-in path
that refuses to commit a value that fails.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from gridsheet.formula.functions import to_number
from gridsheet.spreadsheet.model import CellValidation


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation check.

    Attributes:
        valid: Whether the candidate satisfies the constraint
        message: Custom or generated explanation when invalid, else None
    """
    valid: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationResult(True)

_RELATIVE_DATE_WORDS = ("now", "today", "tomorrow", "yesterday")
_TIME_ONLY_RE = re.compile(r"^\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?(\s*[ap]\.?m\.?)?$")


def _fail(validation: CellValidation, default: str) -> ValidationResult:
    return ValidationResult(False, validation.error_message or default)


def _allowed_values(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    return [str(item) for item in value]


def _is_date(candidate: str) -> bool:
    # pandas resolves these against the current date; they name no calendar date
    text = candidate.strip().lower()
    if text in _RELATIVE_DATE_WORDS or _TIME_ONLY_RE.match(text):
        return False
    try:
        parsed = pd.to_datetime(candidate)
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def validate(candidate: str, validation: Optional[CellValidation]) -> ValidationResult:
    """Check *candidate* against *validation*.

    Rules by kind:
        number: must parse as a number; criteria 'greater'/'less' compare it
            with the threshold in ``validation.value``
        text: criteria 'length' caps the length at ``validation.value``
        date: must parse as a calendar date
        list: must be one of ``validation.value`` (a list of strings, or a
            comma-separated string)

    No validation means valid. With ``allow_blank``, an empty or
    whitespace-only candidate is valid. Unknown kinds are valid.
    """
    if validation is None:
        return VALID
    if validation.allow_blank and not candidate.strip():
        return VALID

    kind = validation.type
    if kind == "number":
        number = to_number(candidate)
        if number is None:
            return _fail(validation, "Value must be a number")
        threshold = to_number(validation.value)
        if validation.criteria == "greater":
            if threshold is None or not number > threshold:
                return _fail(validation, f"Value must be greater than {validation.value}")
        elif validation.criteria == "less":
            if threshold is None or not number < threshold:
                return _fail(validation, f"Value must be less than {validation.value}")
        return VALID

    if kind == "text":
        if validation.criteria == "length":
            try:
                max_length = int(str(validation.value).strip())
            except ValueError:
                return _fail(validation, f"Text length limit is not a number: {validation.value}")
            if len(candidate) > max_length:
                return _fail(validation, f"Text must be {max_length} characters or less")
        return VALID

    if kind == "date":
        if not _is_date(candidate):
            return _fail(validation, "Value must be a valid date")
        return VALID

    if kind == "list":
        allowed = _allowed_values(validation.value)
        if candidate not in allowed:
            return _fail(validation, f"Value must be one of: {', '.join(allowed)}")
        return VALID

    return VALID
