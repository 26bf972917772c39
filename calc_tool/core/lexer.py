"""core/lexer.py - turn one text line into a list of tokens."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from calc_tool.config import CALC_CONFIG
from calc_tool.core.errors import LexError

logger = logging.getLogger(__name__)

INT_MAX = CALC_CONFIG["int_max"]


class TokenKind(Enum):
    NUM = "num"
    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    PERCENT = "%"
    LPAREN = "("
    RPAREN = ")"
    EXCLAMATION = "!"
    CIRCUMFLEX = "^"


SYMBOLS = {kind.value: kind for kind in TokenKind if kind is not TokenKind.NUM}
DIGITS = "0123456789"
# str.isspace() also accepts the ASCII separators FS, GS, RS and US
NOT_WHITESPACE = "\x1c\x1d\x1e\x1f"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: Optional[int] = None  # only for NUM
    position: Optional[int] = field(default=None, compare=False)

    def __repr__(self) -> str:
        if self.kind is TokenKind.NUM:
            return f"Token(NUM, {self.value})"
        return f"Token({self.kind.name})"

    def __str__(self) -> str:
        return str(self.value) if self.kind is TokenKind.NUM else self.kind.value


def num(value: int, position=None) -> Token:
    return Token(TokenKind.NUM, value, position)


def _consume_num(line: str, start: int):
    """Accumulate a digit run starting at ``start``; return (token, next index)."""
    value = 0
    i = start
    while i < len(line) and line[i] in DIGITS:
        value = value * 10 + DIGITS.index(line[i])
        if value > INT_MAX:
            raise LexError(f"integer literal out of range: {line[start:i + 1]}...", start)
        i += 1
    return num(value, start), i


def tokenize(line: str):
    """
    Tokenize ``line``.

    Returns the complete token list (empty for a blank line) or raises
    ``LexError``; a partial list is never returned.
    """
    tokens = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch.isspace() and ch not in NOT_WHITESPACE:
            i += 1
            continue
        if ch in DIGITS:
            token, i = _consume_num(line, i)
            tokens.append(token)
            continue
        kind = SYMBOLS.get(ch)
        if kind is None:
            raise LexError(f"unexpected character {ch!r}", i)
        tokens.append(Token(kind, position=i))
        i += 1

    logger.debug(f"Tokenized {len(line)} chars into {len(tokens)} tokens")
    return tokens
