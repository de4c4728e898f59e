from __future__ import annotations

import argparse


def _non_negative_int(raw: str) -> int:
    try:
        n = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}")
    if n < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return n


def add_base_args(parser: argparse.ArgumentParser) -> None:
    """Register flags that control *how* the run executes.

    This includes:
    - project root and config file
    - execution knobs (dry-run, quiet, timeout)
    - outputs (metadata, log level)
    """

    parser.add_argument(
        "--root",
        default=".",
        help="Project root; both steps run with this as the working directory (default: cwd).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        help="YAML config file (default: <root>/analyze.yaml when present).",
    )

    parser.add_argument("--dry-run", action="store_true", help="Print commands but do not execute")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help=(
            "Suppress tool stdout/stderr. The tools print their own diagnostics; with "
            "--quiet a failing step reports only its exit code."
        ),
    )
    parser.add_argument(
        "--timeout-seconds",
        type=_non_negative_int,
        default=None,
        help="Per-step timeout. 0 = no timeout (default).",
    )
    parser.add_argument(
        "--skip-typedefs",
        action="store_true",
        default=None,
        help="Skip the typedef-copy pre-step and run only the analyzer.",
    )

    parser.add_argument(
        "--metadata-out",
        help="Write a JSON record of the run (commands, exit codes, timings, tool versions).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    parser.add_argument(
        "--list-steps",
        action="store_true",
        help="List the steps in execution order and exit.",
    )
