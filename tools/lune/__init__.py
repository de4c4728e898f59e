"""tools/lune

Lune script-runner adapter.
"""

from __future__ import annotations

from .runner import LUNE_BIN_ENV, LUNE_FALLBACKS, build_run_command, lune_version, run_script

__all__ = [
    "LUNE_BIN_ENV",
    "LUNE_FALLBACKS",
    "build_run_command",
    "lune_version",
    "run_script",
]
