"""
Fuzz run bookkeeping for the calculator service.

Everything the fuzzer does besides talking to libFuzzer lives here: deciding
whether an exception is an expected rejection or a crash, writing crash
artifacts, printing calculator traces and the run summary. Keeping atheris
out of this module lets it be driven directly from tests.
"""
import base64
import hashlib
import json as _json
import logging
import os
import random
import time
import traceback

from rich.console import Console
from rich.table import Table
from rich.text import Text
from tabulate import tabulate

from calc_tool.config import CALC_EXPR_SEEDS, FUZZ_CONFIG
from calc_tool.core.errors import CalcError
from calc_tool.targets import app_calc

logger = logging.getLogger(__name__)

# Expected (non-crash) exceptions: every calculator rejection. Anything else,
# e.g. RecursionError or an IndexError in the parser, is a crash.
EXPECTED_EXCEPTIONS = (CalcError,)


def _b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def _write_json(path: str, obj: dict):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        _json.dump(obj, f, indent=2, sort_keys=True)


class FuzzRun:
    """State of one fuzzing run: options, counters and recorded crashes."""

    def __init__(self, artifacts_dir=None, seed=None, continue_on_crash=False,
                 trace_calc=0, trace_errors=False, demo_ops=False, no_fail=False,
                 summary_interval=None, plain=False, console=None):
        self.artifacts_dir = artifacts_dir or FUZZ_CONFIG["artifacts_dir"]
        self.seed = seed
        self.continue_on_crash = continue_on_crash
        self.trace_calc = trace_calc
        self.trace_errors = trace_errors
        self.demo_ops = demo_ops
        self.no_fail = no_fail
        self.summary_interval = max(0.5, summary_interval or FUZZ_CONFIG["summary_interval"])
        self.plain = plain
        self.console = console or Console()
        self.last_summary_ts = 0.0
        self.stats = {
            "target": "calc",
            "start_time": time.time(),
            "duration_sec": None,
            "total_inputs": 0,
            "handled_exceptions": 0,
            "unexpected_exceptions": 0,
            "artifacts_dir": self.artifacts_dir,
            "crashes": [],
            "seed": seed,
            "mode": "no-fail" if no_fail else "default",
        }

    # ------------------- pretty helpers -------------------
    def _print_table(self, title, headers, rows):
        if self.plain:
            self.console.print(tabulate(rows, headers=headers, tablefmt="grid"), markup=False, highlight=False)
            return
        table = Table(title=title)
        table.add_column(headers[0], style="cyan", no_wrap=True)
        table.add_column(headers[1], style="magenta")
        for k, v in rows:
            table.add_row(str(k), Text(str(v)))
        self.console.print(table)

    def print_calc_trace(self, line: str, steps: list, outcome: str):
        self.console.print(f"\n[Calculator Trace] {outcome}\n  EXPR: {line!r}\n", markup=False, highlight=False)
        rows = [[i, s] for i, s in enumerate(steps or [], 1)] or [["-", "(no steps recorded)"]]
        self._print_table("Steps", ["#", "Operation / Result"], rows)

    # ------------------- artifact & summary -------------------
    def write_artifact(self, prefix: str, data_bytes: bytes, meta: dict) -> str:
        base = os.path.join(self.artifacts_dir, f"{prefix}_{hashlib.sha1(data_bytes).hexdigest()}")
        os.makedirs(self.artifacts_dir, exist_ok=True)
        with open(base + ".input", "wb") as f:
            f.write(data_bytes)
        _write_json(base + ".json", meta)
        return base

    def render_summary(self):
        rows = [
            ["Target", self.stats["target"]],
            ["Total Inputs", self.stats["total_inputs"]],
            ["Handled Exceptions", self.stats["handled_exceptions"]],
            ["Unexpected (Crashes)", self.stats["unexpected_exceptions"]],
            ["Duration (s)", self.stats["duration_sec"]],
            ["Artifacts dir", self.stats["artifacts_dir"]],
        ]
        self._print_table("Fuzzing Run Summary", ["Metric", "Value"], rows)

    def write_summary(self):
        self.stats["duration_sec"] = round(time.time() - self.stats["start_time"], 3)
        _write_json(os.path.join(self.artifacts_dir, "run_summary.json"), self.stats)

    def periodic_summary(self, force: bool = False):
        """Write JSON + print table periodically so we don't rely on finally."""
        now = time.time()
        if not force and (now - self.last_summary_ts) < self.summary_interval:
            return
        self.last_summary_ts = now
        self.write_summary()
        self.render_summary()

    # ------------------- fuzz logic -------------------
    def classify_and_handle_exception(self, e: Exception, line: str, data_bytes: bytes, steps_if_any=None):
        """
        Count ``e`` as handled or record it as a crash.

        Must be called from inside the ``except`` block that caught ``e``:
        crashes are re-raised (for libFuzzer minimization) unless
        ``continue_on_crash`` is set.
        """
        if self.no_fail:
            return

        if isinstance(e, EXPECTED_EXCEPTIONS):
            self.stats["handled_exceptions"] += 1
            if self.trace_errors and self.trace_calc > 0:
                self.print_calc_trace(line, steps_if_any, f"EXPECTED FAILURE: {type(e).__name__}")
                self.trace_calc -= 1
            return

        self.stats["unexpected_exceptions"] += 1
        crash_meta = {
            "target": self.stats["target"],
            "exception_type": type(e).__name__,
            "exception_message": str(e),
            "traceback": traceback.format_exc(),
            "input_b64": _b64(data_bytes),
            "input_preview": line[:FUZZ_CONFIG["preview_len"]],
            "seed": self.seed,
            "ts": time.time(),
            "trace_steps": steps_if_any or [],
        }
        path = self.write_artifact("crash", data_bytes, crash_meta)
        self.stats["crashes"].append(path)
        logger.warning(f"Crash recorded: {type(e).__name__}: {e} -> {path}")

        if self.continue_on_crash:
            if self.trace_calc > 0:
                self.print_calc_trace(line, steps_if_any, f"UNEXPECTED CRASH: {type(e).__name__}")
                self.trace_calc -= 1
            return
        raise

    def maybe_demo_calc_ops(self):
        """Print a demo evaluation so you always see actual operations."""
        line = random.choice(CALC_EXPR_SEEDS)
        try:
            result, steps = app_calc.evaluate_with_trace(line)
            self.print_calc_trace(line, steps, f"DEMO OK (result {result})")
        except CalcError as e:
            self.print_calc_trace(line, getattr(e, "_trace_steps", []), f"DEMO ERROR: {type(e).__name__}")

    def test_one_input(self, data: bytes):
        self.stats["total_inputs"] += 1
        line = data.decode("utf-8", errors="ignore")

        # Calculator path with tracing enabled
        if self.trace_calc > 0:
            try:
                result, steps = app_calc.evaluate_with_trace(line)
                self.print_calc_trace(line, steps, f"OK (result {result})")
                self.trace_calc -= 1
            except Exception as e:
                self.classify_and_handle_exception(e, line, data, steps_if_any=getattr(e, "_trace_steps", []))
                if self.demo_ops and self.trace_calc > 0:
                    self.maybe_demo_calc_ops()
                    self.trace_calc -= 1
            finally:
                self.periodic_summary()
            return

        # Tracing disabled
        try:
            app_calc.evaluate(line)
        except Exception as e:
            self.classify_and_handle_exception(e, line, data)
        finally:
            self.periodic_summary()
