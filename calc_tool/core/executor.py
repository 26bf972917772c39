"""
core/executor.py - evaluate an expression tree to a signed 64-bit integer.

All arithmetic is checked: any intermediate value outside the 64-bit range,
division or remainder by zero and factorial of a negative number raise
``CalcArithmeticError``. Division truncates toward zero and the remainder
takes the sign of the dividend.
"""
import logging

from calc_tool.config import CALC_CONFIG
from calc_tool.core.errors import CalcArithmeticError
from calc_tool.core.expr import (
    Binary, BinaryOp, Exponential, Factorial, Literal, Postfix, Prefix, PrefixOp
)

logger = logging.getLogger(__name__)

INT_MIN = CALC_CONFIG["int_min"]
INT_MAX = CALC_CONFIG["int_max"]


def _checked(value: int, what: str) -> int:
    if value < INT_MIN or value > INT_MAX:
        raise CalcArithmeticError(f"integer overflow in {what}")
    return value


def checked_add(a: int, b: int) -> int:
    return _checked(a + b, "addition")


def checked_sub(a: int, b: int) -> int:
    return _checked(a - b, "subtraction")


def checked_mul(a: int, b: int) -> int:
    return _checked(a * b, "multiplication")


def _truncated_quotient(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


def checked_div(a: int, b: int) -> int:
    if b == 0:
        raise CalcArithmeticError("division by zero")
    return _checked(_truncated_quotient(a, b), "division")


def checked_rem(a: int, b: int) -> int:
    if b == 0:
        raise CalcArithmeticError("remainder by zero")
    # MIN % -1 overflows like MIN / -1 does
    q = _checked(_truncated_quotient(a, b), "remainder")
    return a - b * q


def checked_neg(a: int) -> int:
    return _checked(-a, "negation")


def checked_pow(base: int, exp: int) -> int:
    if exp == 0:
        return 1
    # |base| >= 2 overflows long before 2**64; avoid building huge ints
    if abs(base) >= 2 and exp >= 64:
        raise CalcArithmeticError("integer overflow in exponentiation")
    return _checked(base ** exp, "exponentiation")


def checked_factorial(n: int) -> int:
    if n < 0:
        raise CalcArithmeticError(f"factorial of negative number {n}")
    result = 1
    for i in range(2, n + 1):
        result = _checked(result * i, "factorial")
    return result


BINARY_FUNCS = {
    BinaryOp.ADD: checked_add,
    BinaryOp.SUB: checked_sub,
    BinaryOp.MUL: checked_mul,
    BinaryOp.DIV: checked_div,
    BinaryOp.REM: checked_rem,
}

BINARY_NAMES = {
    BinaryOp.ADD: "ADD",
    BinaryOp.SUB: "SUB",
    BinaryOp.MUL: "MUL",
    BinaryOp.DIV: "DIV",
    BinaryOp.REM: "REM",
}


class _NullRecorder:
    def log(self, msg: str):
        pass


def _eval(node, rec):
    if isinstance(node, Literal):
        rec.log(f"CONST {node.value}")
        return node.value

    if isinstance(node, Prefix):
        val = _eval(node.operand, rec)
        if node.op is PrefixOp.MINUS:
            res = checked_neg(val); rec.log(f"NEG  -({val}) = {res}"); return res
        rec.log(f"POS  +({val}) = {val}")
        return val

    if isinstance(node, Postfix):
        val = _eval(node.operand, rec)
        if isinstance(node.op, Factorial):
            res = checked_factorial(val); rec.log(f"FACT {val}! = {res}"); return res
        if isinstance(node.op, Exponential):
            res = checked_pow(val, node.op.exp); rec.log(f"POW  {val}^{node.op.exp} = {res}"); return res

    if isinstance(node, Binary):
        left = _eval(node.left, rec)
        right = _eval(node.right, rec)
        res = BINARY_FUNCS[node.op](left, right)
        rec.log(f"{BINARY_NAMES[node.op]:<4} {left} {node.op.value} {right} = {res}")
        return res

    raise TypeError(f"Unsupported expression node: {type(node).__name__}")


def evaluate(expr, rec=None) -> int:
    """
    Reduce ``expr`` to an integer.

    ``rec`` is an optional object with a ``log(msg)`` method that receives one
    line per evaluated operation, in evaluation order.
    """
    result = _eval(expr, rec or _NullRecorder())
    logger.debug(f"Evaluated {expr} = {result}")
    return result
