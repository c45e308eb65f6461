"""Error taxonomy for the expression evaluator."""
from __future__ import annotations

from typing import Optional

SYNTAX = "syntax"
RUNTIME = "runtime"


class CalcError(ValueError):
    """Base class for every evaluation failure."""

    kind = SYNTAX
    code = "calc_error"

    def __init__(self, message: Optional[str] = None, position: Optional[int] = None) -> None:
        super().__init__(message or self.code)
        self.position = position

    @property
    def message(self) -> str:
        return str(self)


class ExpressionSyntaxError(CalcError):
    kind = SYNTAX
    code = "invalid_expression"


class EmptyExpressionError(ExpressionSyntaxError):
    code = "missing_expression"


class InvalidCharacterError(ExpressionSyntaxError):
    code = "invalid_character"

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"invalid character {char!r} at position {position}", position)
        self.char = char


class InvalidNumberError(ExpressionSyntaxError):
    code = "invalid_number"

    def __init__(self, literal: str, position: int) -> None:
        super().__init__(f"malformed number {literal!r} at position {position}", position)
        self.literal = literal


class UnmatchedParenthesisError(ExpressionSyntaxError):
    code = "unmatched_parenthesis"


class UnexpectedTokenError(ExpressionSyntaxError):
    code = "unexpected_token"


class MissingOperandError(ExpressionSyntaxError):
    code = "missing_operand"


class NestingTooDeepError(ExpressionSyntaxError):
    code = "nesting_too_deep"


class CalcRuntimeError(CalcError):
    kind = RUNTIME
    code = "runtime_error"


class DivisionByZeroError(CalcRuntimeError):
    code = "division_by_zero"


class NumericOverflowError(CalcRuntimeError):
    code = "numeric_overflow"
