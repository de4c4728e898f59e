#!/usr/bin/env python3
"""
CLI wrapper that runs the typedef-copy pre-step and then ``luau-lsp analyze``.

Steps (strictly sequential, first failure aborts):
  1) lune run scripts/analyze_copy_typedefs
  2) luau-lsp analyze --platform=standard --settings=.vscode/settings.json
         --ignore=... .lune crates scripts tests

Usage:
  python analyze_cli.py
  python analyze_cli.py --dry-run
  python analyze_cli.py --root ../lune --skip-typedefs
  python analyze_cli.py --extra-ignore "tests/scratch/**" crates
  python analyze_cli.py --metadata-out runs/analyze.json

The process exits with the exit code of the first failing step (0 if both
succeed).
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from cli.args.analyze import add_analyze_args
from cli.args.base import add_base_args
from cli.dispatch import dispatch


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Copy Lune type definitions, then run luau-lsp analyze over the project.",
    )
    add_base_args(parser)
    add_analyze_args(parser)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    return dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
