import argparse
import logging
import os
import sys

import atheris

from calc_tool.config import FUZZ_CONFIG, validate_config

# Instrument imports for coverage
with atheris.instrument_imports():
    import calc_tool.core  # noqa: F401
    import calc_tool.targets.app_calc  # noqa: F401

from calc_tool.harness import FuzzRun

logger = logging.getLogger(__name__)


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Fuzz the integer calculator with atheris/libFuzzer.")
    parser.add_argument("--artifacts-dir", default=FUZZ_CONFIG["artifacts_dir"])
    parser.add_argument("--time_budget", type=int, default=FUZZ_CONFIG["time_budget"])  # seconds
    parser.add_argument("--max_len", type=int, default=FUZZ_CONFIG["max_len"])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--continue_on_crash", action="store_true",
                        help="Record crashes but continue (better console summary).")
    parser.add_argument("--trace_calc", type=int, default=0,
                        help="Print up to N traced calculator evaluations.")
    parser.add_argument("--trace_errors", action="store_true",
                        help="Also print traces for expected failures.")
    parser.add_argument("--demo_ops", action="store_true",
                        help="After an error trace, also print a demo expression so real operations are visible.")
    parser.add_argument("--summary_interval", type=float, default=FUZZ_CONFIG["summary_interval"],
                        help="How often to write/print summary during fuzzing (seconds).")
    parser.add_argument("--no_fail", action="store_true",
                        help="Swallow all exceptions (expected or not) so the run is smooth/quiet.")
    parser.add_argument("--plain", action="store_true",
                        help="Print plain grid tables instead of rich tables.")
    parser.add_argument("corpus", nargs="*")
    return parser


def main(argv=None):
    args, _ = build_arg_parser().parse_known_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    validate_config()

    os.makedirs(args.artifacts_dir, exist_ok=True)
    run = FuzzRun(
        artifacts_dir=args.artifacts_dir,
        seed=args.seed,
        continue_on_crash=args.continue_on_crash,
        trace_calc=args.trace_calc,
        trace_errors=args.trace_errors,
        demo_ops=args.demo_ops,
        no_fail=args.no_fail,
        summary_interval=args.summary_interval,
        plain=args.plain,
    )
    logger.info(f"Fuzzing calculator for {args.time_budget}s, artifacts in {args.artifacts_dir}")

    flags = [sys.argv[0], f"-max_total_time={args.time_budget}", f"-max_len={args.max_len}"]
    if args.seed is not None:
        flags.append(f"-seed={args.seed}")
    flags.extend(args.corpus or [])

    # Emit an initial summary so artifacts dir exists immediately
    run.periodic_summary(force=True)

    atheris.Setup(flags, run.test_one_input)
    try:
        atheris.Fuzz()
    finally:
        # Some environments never return here; the periodic summaries keep things visible.
        run.write_summary()
        run.render_summary()
    return 0


if __name__ == "__main__":
    raise SystemExit(main() or 0)
