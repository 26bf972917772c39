"""
core/parser.py - precedence-climbing parser.

The parser keeps a cursor on the token consumed most recently; prefix and
infix dispatch on that "current" token while postfix operators and the infix
loop look one token ahead ("peek").
"""
import logging
from enum import IntEnum

from calc_tool.config import CALC_CONFIG
from calc_tool.core.errors import ParseError
from calc_tool.core.expr import (
    Binary, BinaryOp, Exponential, Factorial, Literal, Postfix, Prefix, PrefixOp
)
from calc_tool.core.lexer import TokenKind

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    LOWEST = 0
    SUM = 1
    PRODUCT = 2
    PREFIX = 3


PREFIX_OPS = {
    TokenKind.PLUS: PrefixOp.PLUS,
    TokenKind.MINUS: PrefixOp.MINUS,
}

# token -> (operator, precedence of the operator and of its right-hand side)
INFIX_OPS = {
    TokenKind.PLUS: (BinaryOp.ADD, Precedence.SUM),
    TokenKind.MINUS: (BinaryOp.SUB, Precedence.SUM),
    TokenKind.ASTERISK: (BinaryOp.MUL, Precedence.PRODUCT),
    TokenKind.SLASH: (BinaryOp.DIV, Precedence.PRODUCT),
    TokenKind.PERCENT: (BinaryOp.REM, Precedence.PRODUCT),
}


def _describe(token) -> str:
    return "end of input" if token is None else repr(str(token))


class Parser:
    """One parsing session over one token list; not reusable across lines."""

    def __init__(self, tokens, max_depth=None, max_height=None):
        self.tokens = list(tokens)
        self.index = 0
        self.max_depth = CALC_CONFIG["max_depth"] if max_depth is None else max_depth
        self.max_height = CALC_CONFIG["max_height"] if max_height is None else max_height
        self.depth = 0
        self.heights = {}  # id(node) -> height of the subtree rooted there

    def parse(self, allow_trailing=False):
        expr = self.parse_expr(Precedence.LOWEST)

        trailing = self.peek_token()
        if trailing is not None:
            if not allow_trailing:
                raise ParseError(f"unexpected trailing token {_describe(trailing)}", trailing.position)
            logger.debug(f"Ignoring {len(self.tokens) - self.index - 1} trailing tokens")
        return expr

    def parse_expr(self, precedence):
        self.depth += 1
        if self.depth > self.max_depth:
            raise ParseError(f"expression nested deeper than {self.max_depth} levels")
        try:
            lhs = self.parse_prefix_expr()
            lhs = self.parse_postfix_expr(lhs)

            while self.peek_token() is not None and precedence < self.peek_precedence():
                self.next()
                lhs = self.parse_infix_expr(lhs)

            return lhs
        finally:
            self.depth -= 1

    def parse_prefix_expr(self):
        token = self.current_token()
        if token is None:
            raise ParseError("unexpected end of input")

        if token.kind in PREFIX_OPS:
            self.next()
            operand = self.parse_expr(Precedence.PREFIX)
            return self._node(Prefix(PREFIX_OPS[token.kind], operand), operand)
        if token.kind is TokenKind.NUM:
            return self._node(Literal(token.value))
        if token.kind is TokenKind.LPAREN:
            return self.parse_grouped_expr()

        raise ParseError(f"unexpected token {_describe(token)}", token.position)

    def parse_infix_expr(self, lhs):
        token = self.current_token()
        entry = INFIX_OPS.get(token.kind) if token is not None else None
        if entry is None:
            raise ParseError(f"expected an infix operator, got {_describe(token)}",
                             getattr(token, "position", None))

        op, precedence = entry
        self.next()
        rhs = self.parse_expr(precedence)
        return self._node(Binary(op, lhs, rhs), lhs, rhs)

    def parse_postfix_expr(self, lhs):
        token = self.peek_token()
        if token is None:
            return lhs

        if token.kind is TokenKind.EXCLAMATION:
            self.next()
            return self._node(Postfix(Factorial(), lhs), lhs)

        if token.kind is TokenKind.CIRCUMFLEX:
            self.next()
            self.next()
            exponent = self.current_token()
            if exponent is None or exponent.kind is not TokenKind.NUM:
                raise ParseError(f"expected an integer exponent after '^', got {_describe(exponent)}",
                                 getattr(exponent, "position", None))
            exp = exponent.value % CALC_CONFIG["exponent_modulus"]
            return self._node(Postfix(Exponential(exp), lhs), lhs)

        return lhs

    def parse_grouped_expr(self):
        opening = self.current_token()
        self.next()
        inner = self.parse_expr(Precedence.LOWEST)

        closing = self.peek_token()
        if closing is None or closing.kind is not TokenKind.RPAREN:
            raise ParseError(f"expected ')' to close '(' at {opening.position}, got {_describe(closing)}",
                             getattr(closing, "position", None))
        self.next()
        return inner

    # ------------------- cursor -------------------
    def next(self):
        self.index += 1

    def current_token(self):
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def peek_token(self):
        i = self.index + 1
        return self.tokens[i] if i < len(self.tokens) else None

    def peek_precedence(self):
        token = self.peek_token()
        if token is None or token.kind not in INFIX_OPS:
            return Precedence.LOWEST
        return INFIX_OPS[token.kind][1]

    def _node(self, node, *children):
        # the evaluator recurses once per tree level
        height = 1 + max((self.heights[id(child)] for child in children), default=0)
        if height > self.max_height:
            raise ParseError(f"expression tree deeper than {self.max_height} levels")
        self.heights[id(node)] = height
        return node


def parse(tokens, allow_trailing=False):
    """
    Parse a token list into one expression tree.

    Unconsumed tokens after the expression raise ``ParseError`` unless
    ``allow_trailing`` is set, in which case they are ignored.
    """
    expr = Parser(tokens).parse(allow_trailing=allow_trailing)
    logger.debug(f"Parsed tree: {expr}")
    return expr
