"""Recursive-descent evaluator for arithmetic expressions.

Grammar, highest to lowest binding:

    primary    := NUMBER | "(" expression ")"
    term       := primary (("*" | "/") primary)*
    expression := term (("+" | "-") term)*

Operators are applied while parsing, left to right; no tree is built.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from calc_service.errors import (
    CalcError,
    DivisionByZeroError,
    EmptyExpressionError,
    MissingOperandError,
    NestingTooDeepError,
    NumericOverflowError,
    UnexpectedTokenError,
    UnmatchedParenthesisError,
)
from calc_service.tokenizer import Token, TokenKind, tokenize


class Parser:
    """Single-use parser over one token stream."""

    def __init__(self, tokens: Iterator[Token]) -> None:
        self._tokens = tokens
        self._current = next(self._tokens)

    def _advance(self) -> Token:
        token = self._current
        if token.kind is not TokenKind.END:
            self._current = next(self._tokens)
        return token

    def parse(self) -> float:
        value = self.expression()
        token = self._current
        if token.kind is TokenKind.RIGHT_PAREN:
            raise UnmatchedParenthesisError(
                f"unmatched ')' at position {token.position}", token.position
            )
        if token.kind is not TokenKind.END:
            raise UnexpectedTokenError(
                f"unexpected {token.describe()} at position {token.position}", token.position
            )
        return value

    def expression(self) -> float:
        value = self.term()
        while self._current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            operator = self._advance()
            right = self.term()
            if operator.kind is TokenKind.PLUS:
                value += right
            else:
                value -= right
        return value

    def term(self) -> float:
        value = self.primary()
        while self._current.kind in (TokenKind.STAR, TokenKind.SLASH):
            operator = self._advance()
            right = self.primary()
            if operator.kind is TokenKind.STAR:
                value *= right
                continue
            if right == 0:
                raise DivisionByZeroError(
                    f"division by zero at position {operator.position}", operator.position
                )
            value /= right
        return value

    def primary(self) -> float:
        token = self._current
        if token.kind is TokenKind.NUMBER:
            self._advance()
            return float(token.value)
        if token.kind is TokenKind.LEFT_PAREN:
            self._advance()
            value = self.expression()
            if self._current.kind is not TokenKind.RIGHT_PAREN:
                raise UnmatchedParenthesisError(
                    f"unmatched '(' at position {token.position}", token.position
                )
            self._advance()
            return value
        raise MissingOperandError(
            f"expected operand, found {token.describe()} at position {token.position}",
            token.position,
        )


def evaluate(expression: str) -> float:
    """Evaluate ``expression`` and return its value as a float.

    Raises a CalcError subclass; ``kind`` tells syntax failures apart from
    runtime ones such as division by zero.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise EmptyExpressionError("expression is empty")
    try:
        value = Parser(tokenize(expression)).parse()
    except RecursionError as exc:
        raise NestingTooDeepError("parentheses nested too deeply") from exc
    if not math.isfinite(value):
        raise NumericOverflowError("result is out of range")
    return value


@dataclass(frozen=True)
class EvaluationResult:
    value: Optional[float] = None
    error: Optional[CalcError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is None:
            return {"status": "ok", "result": self.value}
        return {
            "status": "error",
            "error": self.error.code,
            "kind": self.error.kind,
            "message": self.error.message,
        }


def evaluate_result(expression: str) -> EvaluationResult:
    try:
        return EvaluationResult(value=evaluate(expression))
    except CalcError as exc:
        return EvaluationResult(error=exc)
