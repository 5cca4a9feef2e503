"""
domain.arithmetic - Restricted arithmetic expression evaluator.

Tokenizer + recursive-descent parser over numeric literals, the binary
operators + - * /, unary minus/plus and parentheses. Nothing else is
accepted, so no user text is ever executed as code.

Grammar:
    expr   := term (("+" | "-") term)*
    term   := factor (("*" | "/") factor)*
    factor := ("+" | "-") factor | NUMBER | "(" expr ")"
"""

from __future__ import annotations

import math
import re

from domain.exceptions import ToolValidationError

_TOKEN_RE = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(.))")


def tokenize(expression: str) -> list[str]:
    """Split an expression into number and operator tokens."""
    tokens: list[str] = []
    for number, other in _TOKEN_RE.findall(expression):
        if number:
            tokens.append(number)
        elif other.strip():
            if other not in "+-*/()":
                raise ToolValidationError(
                    f"Invalid mathematical expression: unexpected character {other!r}"
                )
            tokens.append(other)
    return tokens


class _Parser:
    def __init__(self, tokens: list[str]):
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ToolValidationError("Invalid mathematical expression: unexpected end")
        self._pos += 1
        return token

    def parse(self) -> float:
        value = self._expr()
        if self._peek() is not None:
            raise ToolValidationError(
                f"Invalid mathematical expression: unexpected token {self._peek()!r}"
            )
        return value

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._next() == "+":
                value += self._term()
            else:
                value -= self._term()
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in ("*", "/"):
            op = self._next()
            rhs = self._factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise ToolValidationError("Invalid mathematical expression: division by zero")
            else:
                value /= rhs
        return value

    def _factor(self) -> float:
        token = self._next()
        if token == "-":
            return -self._factor()
        if token == "+":
            return self._factor()
        if token == "(":
            value = self._expr()
            if self._next() != ")":
                raise ToolValidationError("Invalid mathematical expression: missing ')'")
            return value
        if token in "*/)":
            raise ToolValidationError(
                f"Invalid mathematical expression: unexpected token {token!r}"
            )
        return float(token)


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression.

    Raises:
        ToolValidationError: empty input, illegal characters, bad syntax,
            division by zero or a result outside the float range.
    """
    tokens = tokenize(expression)
    if not tokens:
        raise ToolValidationError("Invalid mathematical expression: empty input")
    value = _Parser(tokens).parse()
    if not math.isfinite(value):
        raise ToolValidationError("Invalid mathematical expression: result is too large")
    return value


def format_number(value: float, places: int = 2) -> int | float:
    """Round to `places` decimals; whole numbers come back as int (345.0 -> 345)."""
    rounded = round(value, places)
    if rounded == int(rounded):
        return int(rounded)
    return rounded
