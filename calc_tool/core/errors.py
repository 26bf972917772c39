"""
Error taxonomy shared by the three calculator stages.

Every calculator rejection is a ``CalcError``, which is a ``ValueError`` so
callers that already treat bad input as ``ValueError`` keep working. The
``stage`` attribute says which stage rejected the line.
"""


class CalcError(ValueError):
    stage = "calc"

    def __init__(self, message: str, position=None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        if self.position is None:
            return self.message
        return f"{self.message} (at {self.position})"


class LexError(CalcError):
    """Unrecognized character, or a literal outside the signed 64-bit range."""
    stage = "lex"


class ParseError(CalcError):
    """Token stream does not match the grammar."""
    stage = "parse"


class CalcArithmeticError(CalcError, ArithmeticError):
    """Overflow, division by zero, or an operand outside an operator's domain."""
    stage = "eval"
