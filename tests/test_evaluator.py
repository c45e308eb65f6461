import pytest

from calc_service.errors import (
    CalcError,
    DivisionByZeroError,
    EmptyExpressionError,
    ExpressionSyntaxError,
    InvalidCharacterError,
    MissingOperandError,
    NestingTooDeepError,
    NumericOverflowError,
    UnexpectedTokenError,
    UnmatchedParenthesisError,
)
from calc_service.evaluator import Parser, evaluate, evaluate_result
from calc_service.tokenizer import tokenize


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("1 + 1", 2),
        ("(1 + 1) * 2", 4),
        ("1 + 2 * 3 - 4 / 2", 5),
        ("10 - 4 - 3", 3),
        ("100 / 10 / 5", 2),
        ("2 * (3 + 4) * 5", 70),
        ("((2))", 2),
        ("0.1 * 3", 0.30000000000000004),
        ("7 / 2", 3.5),
        ("42", 42),
    ],
)
def test_evaluate_valid_expressions(expression, expected):
    assert evaluate(expression) == expected


def test_evaluate_returns_float():
    assert isinstance(evaluate("1 + 1"), float)


def test_invalid_character_is_syntax_error():
    with pytest.raises(InvalidCharacterError) as excinfo:
        evaluate("1 + a")
    assert excinfo.value.kind == "syntax"


@pytest.mark.parametrize("expression", ["(1 + 2", "((1)", "1 + 1)", "(1 + 2))"])
def test_unmatched_parentheses(expression):
    with pytest.raises(UnmatchedParenthesisError):
        evaluate(expression)


@pytest.mark.parametrize("expression", ["1 +", "* 2", "1 * * 2", "()", ")", "-1", "2 * (+3)"])
def test_missing_operand(expression):
    with pytest.raises(MissingOperandError) as excinfo:
        evaluate(expression)
    assert excinfo.value.kind == "syntax"


def test_trailing_token_is_unexpected():
    with pytest.raises(UnexpectedTokenError):
        evaluate("1 2")
    with pytest.raises(UnexpectedTokenError):
        evaluate("(1) (2)")


@pytest.mark.parametrize("expression", ["1 / 0", "5 / (2 - 2)", "1 / 0.0"])
def test_division_by_zero_is_runtime_error(expression):
    with pytest.raises(DivisionByZeroError) as excinfo:
        evaluate(expression)
    assert excinfo.value.kind == "runtime"
    assert excinfo.value.code == "division_by_zero"


@pytest.mark.parametrize("expression", ["", "   ", None])
def test_empty_expression(expression):
    with pytest.raises(EmptyExpressionError):
        evaluate(expression)


def test_error_kinds_stay_distinct():
    assert issubclass(MissingOperandError, ExpressionSyntaxError)
    assert not issubclass(DivisionByZeroError, ExpressionSyntaxError)
    assert issubclass(DivisionByZeroError, CalcError)
    assert issubclass(CalcError, ValueError)


def test_deep_nesting_is_reported_as_syntax_error():
    depth = 5000
    with pytest.raises(NestingTooDeepError) as excinfo:
        evaluate("(" * depth + "1" + ")" * depth)
    assert excinfo.value.kind == "syntax"


def test_overflow_is_runtime_error():
    with pytest.raises(NumericOverflowError) as excinfo:
        evaluate("9" * 400 + " * 10")
    assert excinfo.value.kind == "runtime"


def test_evaluate_is_idempotent():
    assert evaluate("3 * (2 + 1)") == evaluate("3 * (2 + 1)")
    with pytest.raises(DivisionByZeroError):
        evaluate("1 / 0")
    with pytest.raises(DivisionByZeroError):
        evaluate("1 / 0")


def test_whitespace_insensitive():
    assert evaluate("1+1") == evaluate(" 1 + 1 ")


def test_parser_consumes_token_stream():
    assert Parser(tokenize("2 * 3 + 1")).parse() == 7


def test_evaluate_result_wraps_success():
    outcome = evaluate_result("2 * 3")
    assert outcome.ok
    assert outcome.to_dict() == {"status": "ok", "result": 6.0}


def test_evaluate_result_wraps_error():
    outcome = evaluate_result("1 / 0")
    assert not outcome.ok
    data = outcome.to_dict()
    assert data["status"] == "error"
    assert data["error"] == "division_by_zero"
    assert data["kind"] == "runtime"
    assert "division by zero" in data["message"]
