"""
Exception classes for gridsheet.

These exceptions are used throughout the gridsheet package to signal malformed
input at its boundaries: cell addresses handed to the address codec, and
persisted documents handed to the loader. Formula evaluation and validation
never raise; they report failures through the ``#ERROR`` sentinel and
``ValidationResult`` respectively.
"""

__all__ = ["AddressFormatError", "DocumentFormatError", "FormulaError"]


class AddressFormatError(ValueError):
    """Raised when a cell identifier or column label cannot be parsed.

    A cell identifier is a run of column letters followed by a run of digits
    (``C12``). This error is raised when either run is empty, when the letters
    are not A-Z, or when an ordinal is not a positive integer. Examples:
        - ``"12"`` (no column letters)
        - ``"AB"`` (no row number)
        - ``"A0"`` (row numbers start at 1)
    """
    pass


class FormulaError(Exception):
    """Raised inside the formula engine when an expression cannot be evaluated.

    This error never escapes ``evaluate_formula``: the evaluator turns it into
    the ``#ERROR`` sentinel so one bad formula cannot abort a recalculation
    sweep. Examples:
        - Unbalanced parentheses or a dangling operator
        - A character outside ``+ - * / ( )``, digits and cell references
        - Division by zero
    """
    pass


class DocumentFormatError(ValueError):
    """Raised when a persisted sheet document has an invalid shape.

    A document must be a mapping carrying ``cells``, ``columns`` and ``rows``.
    Loading never mutates the current sheet when this error is raised. Common
    causes include:
        - A required top-level key is missing
        - The payload is not valid JSON
        - A cell, column or row entry has the wrong type
    """
    pass
