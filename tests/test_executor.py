import pytest

from calc_tool.core.errors import CalcArithmeticError, CalcError
from calc_tool.core.executor import (
    INT_MAX, INT_MIN, checked_div, checked_factorial, checked_pow, checked_rem, evaluate
)
from calc_tool.core.expr import BinaryOp, Binary, Literal, Prefix, PrefixOp
from calc_tool.core.lexer import tokenize
from calc_tool.core.parser import parse


def calc(line):
    return evaluate(parse(tokenize(line)))


class ListRecorder:
    def __init__(self):
        self.steps = []

    def log(self, msg):
        self.steps.append(msg)


@pytest.mark.parametrize("line,expected", [
    ("5 + 3 * 6 - 3", 20),
    ("-(3 * 2)! / (11 % 3)", -360),
    ("1! + 0!", 2),
    ("2^3 + 10", 18),
    ("(3 - 1) * (-(3 + 3) / -2)", 6),
    ("3! - 2!", 4),
    ("+5", 5),
    ("--5", 5),
    ("-2^2", -4),
    ("(0 - 2)^2", 4),
    ("10 - 2 - 3", 5),
    ("100 / 10 / 5", 2),
])
def test_scenarios(line, expected):
    assert calc(line) == expected


@pytest.mark.parametrize("line,expected", [
    ("7 / 2", 3),
    ("-7 / 2", -3),
    ("7 / -2", -3),
    ("-7 / -2", 3),
    ("7 % 2", 1),
    ("-7 % 2", -1),
    ("7 % -2", 1),
    ("-7 % -2", -1),
    ("6 % 3", 0),
])
def test_division_truncates_toward_zero(line, expected):
    assert calc(line) == expected


@pytest.mark.parametrize("line", [
    "1 % 0",
    "1 / 0",
    "0 / 0",
    "9223372036854775807 / 0",
    "-9223372036854775807 % 0",
    "1 / (2 - 2)",
])
def test_division_by_zero_fails(line):
    with pytest.raises(CalcArithmeticError, match="by zero"):
        calc(line)


def test_overflow_boundary():
    assert calc("9223372036854775807") == INT_MAX
    assert calc("9223372036854775807 + 0") == INT_MAX
    assert calc("-9223372036854775807 - 1") == INT_MIN
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc("9223372036854775807 + 1")
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc("-9223372036854775807 - 2")
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc("4611686018427387904 * 2")


@pytest.mark.parametrize("line", [
    "-(-9223372036854775807 - 1)",
    "(-9223372036854775807 - 1) / -1",
    "(-9223372036854775807 - 1) % -1",
])
def test_min_value_edge_cases_overflow(line):
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc(line)


def test_negating_min_literal_node():
    with pytest.raises(CalcArithmeticError):
        evaluate(Prefix(PrefixOp.MINUS, Literal(INT_MIN)))
    assert evaluate(Prefix(PrefixOp.PLUS, Literal(INT_MIN))) == INT_MIN


@pytest.mark.parametrize("line,expected", [
    ("0!", 1),
    ("1!", 1),
    ("5!", 120),
    ("20!", 2432902008176640000),
])
def test_factorial(line, expected):
    assert calc(line) == expected


def test_factorial_overflow():
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc("21!")
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc("9223372036854775807!")


def test_factorial_of_negative_fails():
    with pytest.raises(CalcArithmeticError, match="negative"):
        calc("(0 - 3)!")
    # -3! is -(3!), not (-3)!
    assert calc("-3!") == -6


@pytest.mark.parametrize("line,expected", [
    ("3^0", 1),
    ("0^0", 1),
    ("0^5", 0),
    ("2^62", 2 ** 62),
    ("(0 - 2)^63", INT_MIN),
    ("1^4294967295", 1),
    ("(0 - 1)^4294967295", -1),
    ("(0 - 1)^4294967294", 1),
    ("2^4294967296", 1),  # exponent wraps to 0
])
def test_power(line, expected):
    assert calc(line) == expected


@pytest.mark.parametrize("line", ["2^63", "2^64", "(0 - 2)^65", "3^4294967295", "10^19"])
def test_power_overflow(line):
    with pytest.raises(CalcArithmeticError, match="overflow"):
        calc(line)


def test_checked_helpers_directly():
    assert checked_div(INT_MIN, 1) == INT_MIN
    assert checked_rem(INT_MIN, 2) == 0
    assert checked_pow(-2, 63) == INT_MIN
    assert checked_factorial(2) == 2
    with pytest.raises(CalcArithmeticError):
        checked_pow(2, 10 ** 9)


def test_evaluation_is_idempotent():
    tree = parse(tokenize("-(3 * 2)! / (11 % 3) + 2^10"))
    assert evaluate(tree) == evaluate(tree) == -360 + 1024


def test_first_failure_wins():
    # left operand fails before the right one is looked at
    rec = ListRecorder()
    with pytest.raises(CalcArithmeticError, match="by zero"):
        evaluate(parse(tokenize("(1 / 0) + 21!")), rec)
    assert rec.steps == ["CONST 1", "CONST 0"]


def test_recorder_sees_every_operation():
    rec = ListRecorder()
    assert evaluate(parse(tokenize("-(2 + 3)! / 2^2")), rec) == -30
    assert rec.steps == [
        "CONST 2",
        "CONST 3",
        "ADD  2 + 3 = 5",
        "FACT 5! = 120",
        "NEG  -(120) = -120",
        "CONST 2",
        "POW  2^2 = 4",
        "DIV  -120 / 4 = -30",
    ]


def test_unknown_node_type():
    with pytest.raises(TypeError):
        evaluate(Binary(BinaryOp.ADD, Literal(1), object()))


def test_arithmetic_error_hierarchy():
    assert issubclass(CalcArithmeticError, ArithmeticError)
    assert issubclass(CalcArithmeticError, CalcError)
    assert issubclass(CalcArithmeticError, ValueError)
    assert CalcArithmeticError.stage == "eval"
