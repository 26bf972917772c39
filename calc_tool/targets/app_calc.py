"""
Calculator "service" - tokenize, parse and evaluate one line with a trace.

Public API:
- evaluate(line: str) -> int
- evaluate_with_trace(line: str) -> (int, [steps...])

On ANY exception, we attach `e._trace_steps = steps` so the fuzzer can print
the attempted operations instead of "(no steps recorded)".
"""
import logging

from calc_tool.config import CALC_CONFIG
from calc_tool.core import evaluate as evaluate_tree
from calc_tool.core import parse, tokenize
from calc_tool.core.errors import LexError

logger = logging.getLogger(__name__)

MAX_LEN = CALC_CONFIG["max_line_length"]


class _Recorder:
    def __init__(self):
        self.steps = []

    def log(self, msg: str):
        self.steps.append(msg)


def _raise_with_trace(exc: Exception, rec: _Recorder):
    exc._trace_steps = list(rec.steps)
    raise exc


def evaluate_with_trace(line: str, allow_trailing: bool = False):
    """Return (result, steps). On exception, attach `_trace_steps` and re-raise."""
    if not isinstance(line, str):
        raise TypeError("Expression must be a string")
    rec = _Recorder()

    try:
        if len(line) > MAX_LEN:
            raise LexError(f"line too long: {len(line)} > {MAX_LEN}")
        tokens = tokenize(line)
        rec.log(f"TOKENS {' '.join(str(t) for t in tokens) or '(none)'}")
        tree = parse(tokens, allow_trailing=allow_trailing)
        rec.log(f"PARSE {tree}")
        result = evaluate_tree(tree, rec)
    except Exception as e:
        rec.log(f"ERROR {type(e).__name__}: {e}")
        logger.debug(f"Rejected {line!r}: {type(e).__name__}: {e}")
        return _raise_with_trace(e, rec)

    rec.log(f"RESULT = {result}")
    return result, rec.steps


def evaluate(line: str, allow_trailing: bool = False) -> int:
    """Non-tracing path used by the REPL and the fuzzer's fast path."""
    if len(line) > MAX_LEN:
        raise LexError(f"line too long: {len(line)} > {MAX_LEN}")
    return evaluate_tree(parse(tokenize(line), allow_trailing=allow_trailing))
