"""
Unit tests for formula evaluation.

These tests verify:
1. Argument splitting respects quotes
2. Reference resolution precedence (literal, quoted text, cell)
3. Built-in functions and their behaviour over empty or mixed input
4. The restricted arithmetic parser (precedence, sign, parentheses)
5. Failures become the #ERROR sentinel instead of raising
"""

import pytest

from gridsheet.exceptions import FormulaError
from gridsheet.formula import (
    FUNCTIONS,
    call_function,
    evaluate_arithmetic,
    evaluate_formula,
    register_function,
    resolve_reference,
    split_arguments,
    to_number,
    tokenize,
)
from gridsheet.formula.arithmetic import TokenType
from gridsheet.spreadsheet.model import Cell, CellMap


def make_cells(**values) -> CellMap:
    """Build a CellMap from raw values, e.g. make_cells(A1="2", A2="x")."""
    cells = CellMap()
    for cell_id, value in values.items():
        cells.set(cell_id, Cell(value=value, formula=value if value.startswith("=") else ""))
    return cells


class TestSplitArguments:

    def test_simple(self):
        assert split_arguments("A1, B2,3") == ["A1", "B2", "3"]

    def test_commas_inside_quotes(self):
        assert split_arguments('"a,b", \'c,d\'') == ['"a,b"', "'c,d'"]

    def test_empty(self):
        assert split_arguments("") == []

    def test_trailing_empty_dropped(self):
        assert split_arguments("A1,") == ["A1"]


class TestToNumber:

    @pytest.mark.parametrize("text,expected", [
        ("2", 2.0),
        (" -3.5 ", -3.5),
        ("+.5", 0.5),
        ("1e3", 1000.0),
        (7, 7),
    ])
    def test_numbers(self, text, expected):
        assert to_number(text) == expected

    @pytest.mark.parametrize("text", ["x", "", "12abc", "nan", "inf", None, True, float("nan")])
    def test_not_numbers(self, text):
        assert to_number(text) is None


class TestResolveReference:

    def test_numeric_literal(self):
        assert resolve_reference("42", CellMap()) == 42
        assert resolve_reference("-1.5", CellMap()) == -1.5

    def test_quoted_literal(self):
        assert resolve_reference('"hi there"', CellMap()) == "hi there"
        assert resolve_reference("'x'", CellMap()) == "x"

    def test_unset_cell(self):
        assert resolve_reference("Z9", CellMap()) is None

    def test_not_reference_shaped(self):
        assert resolve_reference("hello", make_cells(A1="1")) is None

    def test_numeric_text(self):
        assert resolve_reference("A1", make_cells(A1="3")) == 3

    def test_raw_text(self):
        assert resolve_reference("A1", make_cells(A1="abc")) == "abc"

    def test_computed_wins(self):
        cells = make_cells(A1="=1+1")
        cells["A1"].computed = 2
        assert resolve_reference("A1", cells) == 2


class TestFunctions:

    def test_sum_skips_text(self):
        cells = make_cells(A1="2", A2="x", A3="4")
        assert evaluate_formula("SUM(A1:A3)", cells) == 6

    def test_sum_literals_and_refs(self):
        cells = make_cells(A1="1.5")
        assert evaluate_formula("SUM(A1, 2, 3)", cells) == 6.5

    def test_average(self):
        cells = make_cells(A1="1", A2="2", A3="6")
        assert evaluate_formula("AVERAGE(A1:A3)", cells) == 3

    def test_max_min(self):
        cells = make_cells(A1="5", B1="-2", C1="9")
        assert evaluate_formula("MAX(A1:C1)", cells) == 9
        assert evaluate_formula("MIN(A1:C1)", cells) == -2

    def test_count(self):
        cells = make_cells(A1="5", A2="five", A3="")
        assert evaluate_formula("COUNT(A1:A4)", cells) == 1

    @pytest.mark.parametrize("name", ["SUM", "AVERAGE", "MAX", "MIN"])
    def test_aggregates_over_nothing(self, name):
        assert evaluate_formula(f"{name}(A1:A3)", CellMap()) is None

    def test_count_over_nothing(self):
        assert evaluate_formula("COUNT(A1:A3)", CellMap()) == 0

    def test_text_functions(self):
        cells = make_cells(A1="  Mixed Case  ")
        assert evaluate_formula("TRIM(A1)", cells) == "Mixed Case"
        assert evaluate_formula("UPPER(A1)", cells) == "  MIXED CASE  "
        assert evaluate_formula('LOWER("ABC")', cells) == "abc"

    def test_text_function_on_number(self):
        assert evaluate_formula("UPPER(A1)", make_cells(A1="2")) == "2"

    def test_text_function_on_unset_cell(self):
        assert evaluate_formula("TRIM(A1)", CellMap()) == ""

    def test_unknown_function(self):
        assert evaluate_formula("NOPE(A1)", make_cells(A1="1")) is None
        assert call_function("NOPE", [1]) is None

    def test_function_names_are_case_sensitive(self):
        assert evaluate_formula("sum(A1)", make_cells(A1="1")) is None

    def test_register_function(self):
        registry = {}
        register_function("DOUBLE", lambda args: args[0] * 2, registry)
        assert "DOUBLE" in registry
        assert "DOUBLE" not in FUNCTIONS

    def test_register_function_rejects_empty_name(self):
        with pytest.raises(ValueError):
            register_function("", lambda args: None, {})


class TestArithmetic:

    def test_tokenize(self):
        types = [token.type for token in tokenize("(A1 + 2.5)*3")]
        assert types == [
            TokenType.LPAREN,
            TokenType.REFERENCE,
            TokenType.OPERATOR,
            TokenType.NUMBER,
            TokenType.RPAREN,
            TokenType.OPERATOR,
            TokenType.NUMBER,
            TokenType.END,
        ]

    def test_tokenize_rejects_unknown(self):
        with pytest.raises(FormulaError, match="Unexpected character"):
            tokenize("1 ^ 2")

    @pytest.mark.parametrize("expression,expected", [
        ("1+2*3", 7),
        ("(1+2)*3", 9),
        ("10/4", 2.5),
        ("8-3-2", 3),
        ("-2*-3", 6),
        ("+4", 4),
        ("2*(3+(4-1))", 12),
    ])
    def test_evaluate(self, expression, expected):
        assert evaluate_arithmetic(expression, lambda ref: 0) == expected

    def test_references_resolved_by_callback(self):
        values = {"A1": 4, "B2": -1}
        assert evaluate_arithmetic("A1*B2 - A1", values.__getitem__) == -8

    @pytest.mark.parametrize("expression", ["1/0", "1+", "(1+2", "1 2", ""])
    def test_malformed(self, expression):
        with pytest.raises(FormulaError):
            evaluate_arithmetic(expression, lambda ref: 0)


class TestEvaluateFormula:

    def test_arithmetic_with_references(self):
        cells = make_cells(A1="3", B1="4")
        assert evaluate_formula("A1*B1+1", cells) == 13

    def test_negative_reference(self):
        """A negative referenced value is substituted as a number, not text."""
        cells = make_cells(A1="-2")
        assert evaluate_formula("3-A1", cells) == 5

    def test_text_and_unset_references_are_zero(self):
        cells = make_cells(A1="abc")
        assert evaluate_formula("A1+Z99+1", cells) == 1

    def test_integral_results_are_ints(self):
        result = evaluate_formula("4/2", CellMap())
        assert result == 2
        assert isinstance(result, int)

    @pytest.mark.parametrize("body", ["1/0", "A1 +", "import os", "1; 2", "a1+1", ""])
    def test_errors_become_sentinel(self, body):
        assert evaluate_formula(body, make_cells(A1="1")) == "#ERROR"
