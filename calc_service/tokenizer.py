"""Lexer for four-operator arithmetic expressions."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from calc_service.errors import InvalidCharacterError, InvalidNumberError


class TokenKind(str, Enum):
    NUMBER = "number"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    END = "end"


SINGLE_CHAR_TOKENS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    position: int
    value: Optional[float] = None

    def describe(self) -> str:
        if self.kind is TokenKind.NUMBER:
            return f"number {self.value:g}"
        if self.kind is TokenKind.END:
            return "end of expression"
        return repr(self.kind.value)


def _is_number_char(char: str) -> bool:
    return char == "." or ("0" <= char <= "9")


def _read_number(expression: str, start: int) -> tuple[Token, int]:
    end = start
    while end < len(expression) and _is_number_char(expression[end]):
        end += 1
    literal = expression[start:end]
    if literal.count(".") > 1 or literal == ".":
        raise InvalidNumberError(literal, start)
    return Token(TokenKind.NUMBER, start, float(literal)), end


def tokenize(expression: str) -> Iterator[Token]:
    """Yield tokens for ``expression`` followed by a single END token.

    Raises InvalidCharacterError on the first character that is not a digit,
    a decimal point, an operator, a parenthesis or whitespace.
    """
    index = 0
    length = len(expression)
    while index < length:
        char = expression[index]
        if char.isspace():
            index += 1
            continue
        if _is_number_char(char):
            token, index = _read_number(expression, index)
            yield token
            continue
        kind = SINGLE_CHAR_TOKENS.get(char)
        if kind is None:
            raise InvalidCharacterError(char, index)
        yield Token(kind, index)
        index += 1
    yield Token(TokenKind.END, length)
