"""Calculator core - tokenizer, parser and evaluator."""
from .errors import CalcError, LexError, ParseError, CalcArithmeticError
from .lexer import TokenKind, Token, tokenize
from .expr import Expr, Literal, Prefix, Postfix, Binary, PrefixOp, BinaryOp, Factorial, Exponential
from .parser import Precedence, Parser, parse
from .executor import evaluate

__all__ = [
    'CalcError', 'LexError', 'ParseError', 'CalcArithmeticError',
    'TokenKind', 'Token', 'tokenize',
    'Expr', 'Literal', 'Prefix', 'Postfix', 'Binary', 'PrefixOp', 'BinaryOp',
    'Factorial', 'Exponential',
    'Precedence', 'Parser', 'parse', 'evaluate',
]
