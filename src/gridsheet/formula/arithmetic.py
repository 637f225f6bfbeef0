"""
Restricted arithmetic evaluator.

Formulas that are not a single function call are evaluated here. The grammar
is deliberately small: decimal literals, cell references, unary sign, the
four binary operators ``+ - * /`` with the usual precedence, and parentheses.
Anything else is a ``FormulaError``; nothing is ever handed to ``eval``.

Grammar::

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('+' | '-') unary | primary
    primary    := NUMBER | REFERENCE | '(' expression ')'
"""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Callable, List, NamedTuple

from gridsheet.exceptions import FormulaError


class TokenType(Enum):
    NUMBER = auto()
    REFERENCE = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    END = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    start: int


# Order matters: whitespace is skipped, the rest become tokens
_PATTERNS = [
    (None, re.compile(r"\s+")),
    (TokenType.NUMBER, re.compile(r"\d+(?:\.\d*)?|\.\d+")),
    (TokenType.REFERENCE, re.compile(r"[A-Z]+\d+")),
    (TokenType.OPERATOR, re.compile(r"[-+*/]")),
    (TokenType.LPAREN, re.compile(r"\(")),
    (TokenType.RPAREN, re.compile(r"\)")),
]


def tokenize(expression: str) -> List[Token]:
    """Split *expression* into tokens, ending with an END token.

    Raises:
        FormulaError: On any character the grammar does not know
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(expression):
        for token_type, pattern in _PATTERNS:
            match = pattern.match(expression, pos)
            if match:
                if token_type is not None:
                    tokens.append(Token(token_type, match.group(0), pos))
                pos = match.end()
                break
        else:
            raise FormulaError(f"Unexpected character {expression[pos]!r} at position {pos}")
    tokens.append(Token(TokenType.END, "", pos))
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, tokens: List[Token], resolve: Callable[[str], float]) -> None:
        self.tokens = tokens
        self.resolve = resolve
        self.pos = 0

    def parse(self) -> float:
        value = self._expression()
        token = self._peek()
        if token.type is not TokenType.END:
            raise FormulaError(f"Unexpected {token.value!r} at position {token.start}")
        return value

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _expression(self) -> float:
        value = self._term()
        while self._peek().type is TokenType.OPERATOR and self._peek().value in "+-":
            op = self._advance().value
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._peek().type is TokenType.OPERATOR and self._peek().value in "*/":
            op = self._advance().value
            right = self._unary()
            if op == "*":
                value = value * right
            elif right == 0:
                raise FormulaError("Division by zero")
            else:
                value = value / right
        return value

    def _unary(self) -> float:
        token = self._peek()
        if token.type is TokenType.OPERATOR and token.value in "+-":
            self._advance()
            operand = self._unary()
            return -operand if token.value == "-" else operand
        return self._primary()

    def _primary(self) -> float:
        token = self._advance()
        if token.type is TokenType.NUMBER:
            return float(token.value)
        if token.type is TokenType.REFERENCE:
            return float(self.resolve(token.value))
        if token.type is TokenType.LPAREN:
            value = self._expression()
            closing = self._advance()
            if closing.type is not TokenType.RPAREN:
                raise FormulaError(f"Expected ')' at position {closing.start}")
            return value
        if token.type is TokenType.END:
            raise FormulaError("Unexpected end of expression")
        raise FormulaError(f"Unexpected {token.value!r} at position {token.start}")


def evaluate_arithmetic(expression: str, resolve: Callable[[str], float]) -> float:
    """Evaluate *expression*, substituting each cell reference via *resolve*.

    Args:
        expression: Arithmetic text such as ``"(A1 + 2) * B3"``
        resolve: Maps a reference (``"A1"``) to the number it stands for

    Returns:
        The numeric result as a float

    Raises:
        FormulaError: If the expression is malformed or divides by zero
    """
    return _Parser(tokenize(expression), resolve).parse()
