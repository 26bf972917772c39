"""Configuration for the calculator core, the service and the fuzz harness."""

# Calculator limits
CALC_CONFIG = {
    "int_min": -(2 ** 63),
    "int_max": 2 ** 63 - 1,
    "exponent_modulus": 2 ** 32,  # '^N' exponents are cast to u32
    "max_depth": 128,  # nested parentheses / unary operators
    "max_height": 512,  # tree levels, bounds evaluator recursion
    "max_line_length": 4096,  # applied by the service, not the core
}

# Fuzz harness defaults (overridable from the command line)
FUZZ_CONFIG = {
    "artifacts_dir": "reports",
    "time_budget": 60,  # seconds
    "max_len": 4096,
    "summary_interval": 5.0,  # seconds
    "preview_len": 200,
}

# Demo expressions to guarantee visible operations when requested
CALC_EXPR_SEEDS = [
    "(1+2)*3-2",
    "-4 + 10 / 3",
    "7 % 5 + 8 * 2",
    "(100 - 25) / 5",
    "((3+3)*(2+1)) - 4",
    "-(3 * 2)! / (11 % 3)",
    "2^10 - 1!",
]


def validate_config():
    """Check that the limits above are consistent with each other."""
    assert CALC_CONFIG["int_min"] == -CALC_CONFIG["int_max"] - 1, "bounds must be two's complement"
    assert CALC_CONFIG["max_depth"] > 0, "max_depth must be positive"
    assert CALC_CONFIG["max_height"] >= CALC_CONFIG["max_depth"], "max_height must cover max_depth"
    # each tree level costs one interpreter frame while evaluating
    assert CALC_CONFIG["max_height"] < 900, "max_height too close to the default recursion limit"
    assert FUZZ_CONFIG["summary_interval"] >= 0.5, "summary_interval below 0.5s"
    return True
