"""
Line-oriented driver: read expressions, print one integer per line.

Lines that fail to tokenize, parse or evaluate produce no output. Reading
stops at end of input or at a line starting with ``q``.
"""
import argparse
import fileinput
import logging
import sys

from rich.console import Console
from rich.table import Table
from rich.text import Text
from tabulate import tabulate

from calc_tool.config import CALC_CONFIG, validate_config
from calc_tool.core.errors import CalcError
from calc_tool.targets import app_calc

logger = logging.getLogger(__name__)


def _print_trace(console: Console, line: str, steps, plain: bool):
    rows = [[i, s] for i, s in enumerate(steps or [], 1)] or [["-", "(no steps recorded)"]]
    if plain:
        console.print(f"EXPR: {line.strip()!r}", markup=False, highlight=False)
        console.print(tabulate(rows, headers=["#", "Operation / Result"], tablefmt="grid"),
                      markup=False, highlight=False)
        return
    table = Table(title=Text(line.strip()))
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Operation / Result", style="magenta")
    for i, s in rows:
        table.add_row(str(i), Text(str(s)))
    console.print(table)


def run(lines, out=None, trace=False, plain=False, allow_trailing=False, console=None):
    """Evaluate each line in ``lines``; return how many results were printed."""
    out = out or sys.stdout
    console = console or Console(stderr=True)
    printed = 0

    for line in lines:
        if line.startswith("q"):
            break
        try:
            if trace:
                result, steps = app_calc.evaluate_with_trace(line, allow_trailing=allow_trailing)
                _print_trace(console, line, steps, plain)
            else:
                result = app_calc.evaluate(line, allow_trailing=allow_trailing)
        except CalcError as e:
            logger.info(f"Rejected {line.strip()!r}: {e.stage} error: {e}")
            if trace:
                _print_trace(console, line, getattr(e, "_trace_steps", []), plain)
            continue

        print(result, file=out, flush=True)
        printed += 1

    return printed


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Evaluate integer arithmetic expressions, one per line.",
        epilog=f"Lines longer than {CALC_CONFIG['max_line_length']} characters are rejected like any other bad line.",
    )
    parser.add_argument("files", nargs="*", help="Files to read (default: stdin).")
    parser.add_argument("--trace", action="store_true", help="Show the evaluation steps of every line.")
    parser.add_argument("--plain", action="store_true", help="Plain grid tables instead of rich tables.")
    parser.add_argument("--lenient", action="store_true", help="Ignore tokens left over after the expression.")
    parser.add_argument("--verbose", action="store_true", help="Log rejected lines.")
    parser.add_argument("--debug", action="store_true", help="Log every stage.")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    validate_config()

    with fileinput.input(files=args.files or ("-",)) as lines:
        run(lines, trace=args.trace, plain=args.plain, allow_trailing=args.lenient)
    return 0


if __name__ == "__main__":
    raise SystemExit(main() or 0)
