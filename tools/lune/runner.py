"""tools/lune/runner.py

Tool-specific execution plumbing for Lune, the Luau script runner.
Keeps Lune CLI quirks close to the tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from tools.core_cmd import CmdResult, run_cmd

LUNE_BIN_ENV = "LUNE_BIN"
LUNE_FALLBACKS = [
    "~/.rokit/bin/lune",
    "~/.aftman/bin/lune",
    "~/.cargo/bin/lune",
    "/opt/homebrew/bin/lune",
    "/usr/local/bin/lune",
]


def lune_version(lune_bin: str) -> str:
    try:
        res = run_cmd([lune_bin, "--version"], capture=True, timeout_seconds=20)
    except OSError:
        return "unknown"
    return (res.stdout or res.stderr).strip() or "unknown"


def build_run_command(lune_bin: str, script: str) -> List[str]:
    """``lune run <script>``; the script name is passed through untouched."""
    return [lune_bin, "run", script]


def run_script(
    cmd: List[str],
    *,
    cwd: Path,
    timeout_seconds: int = 0,
    quiet: bool = False,
) -> CmdResult:
    return run_cmd(cmd, cwd=cwd, timeout_seconds=timeout_seconds, quiet=quiet)
