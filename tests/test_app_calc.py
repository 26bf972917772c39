import pytest

from calc_tool.core.errors import CalcArithmeticError, CalcError, LexError, ParseError
from calc_tool.targets import app_calc


def test_evaluate_with_trace_success():
    result, steps = app_calc.evaluate_with_trace("2^3 + 10")
    assert result == 18
    assert steps[0] == "TOKENS 2 ^ 3 + 10"
    assert steps[1] == "PARSE ((2^3) + 10)"
    assert "POW  2^3 = 8" in steps
    assert "ADD  8 + 10 = 18" in steps
    assert steps[-1] == "RESULT = 18"


def test_blank_line_trace():
    with pytest.raises(ParseError) as excinfo:
        app_calc.evaluate_with_trace("   ")
    steps = excinfo.value._trace_steps
    assert steps[0] == "TOKENS (none)"
    assert steps[-1] == "ERROR ParseError: unexpected end of input"


@pytest.mark.parametrize("line,exc,last_ok_step", [
    ("1 % 0", CalcArithmeticError, "CONST 0"),
    ("1 + x", LexError, None),
    ("(1 + 2", ParseError, "TOKENS ( 1 + 2"),
])
def test_failures_carry_trace(line, exc, last_ok_step):
    with pytest.raises(exc) as excinfo:
        app_calc.evaluate_with_trace(line)
    steps = excinfo.value._trace_steps
    assert steps[-1].startswith(f"ERROR {exc.__name__}: ")
    if last_ok_step is None:
        assert len(steps) == 1
    else:
        assert steps[-2] == last_ok_step


def test_evaluate_fast_path():
    assert app_calc.evaluate("5 + 3 * 6 - 3") == 20
    assert app_calc.evaluate("1! + 0!") == 2


@pytest.mark.parametrize("line,exc", [
    ("1 % 0", CalcArithmeticError),
    ("9223372036854775807 + 1", CalcArithmeticError),
    ("9223372036854775808", LexError),
    ("1 2", ParseError),
])
def test_evaluate_rejections(line, exc):
    with pytest.raises(exc):
        app_calc.evaluate(line)


def test_trailing_tokens_can_be_allowed():
    assert app_calc.evaluate("1 2", allow_trailing=True) == 1
    result, steps = app_calc.evaluate_with_trace("2^3!", allow_trailing=True)
    assert result == 8


def test_line_length_limit():
    line = "1" + " " * app_calc.MAX_LEN
    with pytest.raises(LexError, match="too long"):
        app_calc.evaluate(line)
    with pytest.raises(LexError, match="too long") as excinfo:
        app_calc.evaluate_with_trace(line)
    assert excinfo.value._trace_steps[0].startswith("ERROR LexError")


def test_non_string_input():
    with pytest.raises(TypeError):
        app_calc.evaluate_with_trace(b"1 + 1")


def test_all_rejections_are_value_errors():
    for line in ["1 / 0", "?", "("]:
        with pytest.raises(ValueError):
            app_calc.evaluate(line)
        with pytest.raises(CalcError):
            app_calc.evaluate(line)
