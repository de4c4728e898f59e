"""tools/luau_lsp/runner.py

Tool-specific execution plumbing for ``luau-lsp analyze``.

The analyzer is opaque: we build its argv, run it in the project root and
report its exit code. Its diagnostics go straight to the terminal.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from tools.core_cmd import CmdResult, run_cmd

LUAU_LSP_BIN_ENV = "LUAU_LSP_BIN"
LUAU_LSP_FALLBACKS = [
    "~/.rokit/bin/luau-lsp",
    "~/.aftman/bin/luau-lsp",
    "/opt/homebrew/bin/luau-lsp",
    "/usr/local/bin/luau-lsp",
]


def luau_lsp_version(luau_lsp_bin: str) -> str:
    try:
        res = run_cmd([luau_lsp_bin, "--version"], capture=True, timeout_seconds=20)
    except OSError:
        return "unknown"
    return (res.stdout or res.stderr).strip() or "unknown"


def build_analyze_command(
    luau_lsp_bin: str,
    *,
    platform: str,
    settings: str,
    ignores: Sequence[str],
    targets: Sequence[str],
) -> List[str]:
    """Assemble ``luau-lsp analyze`` argv.

    Order is fixed: subcommand, platform, settings, one ``--ignore`` per glob
    (declaration order), then the positional targets.
    """
    cmd: List[str] = [
        luau_lsp_bin,
        "analyze",
        f"--platform={platform}",
        f"--settings={settings}",
    ]
    cmd += [f"--ignore={glob}" for glob in ignores]
    cmd += list(targets)
    return cmd


def run_analyze(
    cmd: List[str],
    *,
    cwd: Path,
    timeout_seconds: int = 0,
    quiet: bool = False,
) -> CmdResult:
    return run_cmd(cmd, cwd=cwd, timeout_seconds=timeout_seconds, quiet=quiet)
