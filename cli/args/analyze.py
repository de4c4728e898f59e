from __future__ import annotations

import argparse

from pipeline.config import DEFAULT_PLATFORM, DEFAULT_SCRIPT, DEFAULT_SETTINGS


def add_analyze_args(parser: argparse.ArgumentParser) -> None:
    """Register overrides for the two tool invocations.

    Every flag defaults to None so the YAML config (or the built-in default)
    applies unless the flag is given.
    """

    parser.add_argument(
        "--script",
        default=None,
        help=f"Lune script run as the pre-step (default: {DEFAULT_SCRIPT}).",
    )
    parser.add_argument(
        "--platform",
        default=None,
        help=f"luau-lsp --platform value (default: {DEFAULT_PLATFORM}).",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help=f"luau-lsp --settings file (default: {DEFAULT_SETTINGS}).",
    )
    parser.add_argument(
        "--ignore",
        dest="ignores",
        action="append",
        default=None,
        metavar="GLOB",
        help="Ignore glob; repeatable. Replaces the default ignore list.",
    )
    parser.add_argument(
        "--extra-ignore",
        dest="extra_ignores",
        action="append",
        default=None,
        metavar="GLOB",
        help="Ignore glob appended to the configured list; repeatable.",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        help="Directories/files to analyze (default: .lune crates scripts tests).",
    )
