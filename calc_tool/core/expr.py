"""core/expr.py - immutable expression tree built by the parser."""
from dataclasses import dataclass
from enum import Enum


class PrefixOp(Enum):
    PLUS = "+"
    MINUS = "-"


class BinaryOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"


@dataclass(frozen=True)
class Factorial:
    def render(self, operand) -> str:
        return f"({operand}!)"


@dataclass(frozen=True)
class Exponential:
    exp: int  # unsigned 32-bit

    def render(self, operand) -> str:
        return f"({operand}^{self.exp})"


class Expr:
    """Base class of all tree nodes; ``str(node)`` is fully parenthesised."""


@dataclass(frozen=True)
class Literal(Expr):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Prefix(Expr):
    op: PrefixOp
    operand: Expr

    def __str__(self) -> str:
        return f"({self.op.value}{self.operand})"


@dataclass(frozen=True)
class Postfix(Expr):
    op: object  # Factorial | Exponential
    operand: Expr

    def __str__(self) -> str:
        return self.op.render(self.operand)


@dataclass(frozen=True)
class Binary(Expr):
    op: BinaryOp
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"
