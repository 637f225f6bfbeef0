"""
Formula engine.

This module evaluates formula bodies against a cell map:
- evaluator: Function-call and arithmetic dispatch, reference resolution
- functions: The built-in function table and value coercion helpers
- arithmetic: Tokenizer and restricted recursive-descent arithmetic parser
"""

from gridsheet.formula.arithmetic import evaluate_arithmetic, tokenize
from gridsheet.formula.evaluator import (
    evaluate_formula,
    resolve_reference,
    split_arguments,
)
from gridsheet.formula.functions import (
    FUNCTIONS,
    call_function,
    display_text,
    normalize_number,
    register_function,
    to_number,
)

__all__ = [
    "evaluate_formula",
    "resolve_reference",
    "split_arguments",
    "evaluate_arithmetic",
    "tokenize",
    "FUNCTIONS",
    "call_function",
    "register_function",
    "display_text",
    "normalize_number",
    "to_number",
]
