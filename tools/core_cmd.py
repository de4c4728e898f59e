"""tools/core_cmd.py

Command-execution helpers shared across tool adapters.

This module deliberately avoids tool-specific knowledge. It provides:

* :func:`which_or_raise` - resolve executables reliably across environments.
* :func:`run_cmd` - run subprocesses (no shell=True), blocking until exit.
* :func:`normalize_exit_code` - map raw return codes to shell-style statuses.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Shell conventions for statuses that are not a plain child exit code.
EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127
EXIT_SIGNAL_BASE = 128


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str
    stderr: str
    timed_out: bool = False


def which_or_raise(
    bin_name: str,
    fallbacks: Optional[List[str]] = None,
    *,
    env_var: Optional[str] = None,
) -> str:
    """Locate an executable and return its absolute path.

    Lookup order: the ``env_var`` override (if set), ``PATH``, then each
    fallback location. Raises :class:`FileNotFoundError` when nothing
    executable is found.

    Relative overrides and fallbacks resolve against the current working
    directory, never the project root the tools later run in. The returned
    path is always absolute.
    """
    if env_var:
        override = os.environ.get(env_var, "").strip()
        if override:
            found = shutil.which(override)
            if found:
                return os.path.abspath(found)
            raise FileNotFoundError(
                f"{env_var}={override!r} does not point to an executable."
            )

    found = shutil.which(bin_name)
    if found:
        return os.path.abspath(found)

    for candidate in fallbacks or []:
        p = Path(candidate).expanduser()
        if p.exists() and os.access(str(p), os.X_OK):
            return os.path.abspath(str(p))

    hint = f" or set {env_var}" if env_var else ""
    raise FileNotFoundError(
        f"Executable '{bin_name}' not found on PATH.\n"
        f"Install it and ensure it's available to this Python process{hint}.\n"
        f"Tried fallbacks: {fallbacks or []}"
    )


def normalize_exit_code(returncode: int) -> int:
    """Translate a Popen return code into what a POSIX shell would report.

    A child killed by signal N has ``returncode == -N``; shells report
    ``128 + N`` for that case.
    """
    if returncode < 0:
        return EXIT_SIGNAL_BASE + (-returncode)
    return returncode


def run_cmd(
    cmd: List[str],
    *,
    cwd: Optional[Path] = None,
    timeout_seconds: int = 0,
    env: Optional[Dict[str, str]] = None,
    capture: bool = False,
    quiet: bool = False,
) -> CmdResult:
    """Run a subprocess and wait for it to exit (no ``shell=True``).

    With ``capture=False`` (the default) the child's stdout/stderr stream
    straight to ours. ``quiet`` discards them instead.

    Never raises on non-zero exit codes or timeouts; only raises on execution
    errors (e.g. binary not found).
    """
    t0 = time.time()

    # If env is provided, merge it onto the current process environment.
    env2 = None
    if env is not None:
        env2 = os.environ.copy()
        env2.update(env)

    kwargs: Dict[str, object] = {}
    if capture:
        kwargs["capture_output"] = True
    elif quiet:
        kwargs["stdout"] = subprocess.DEVNULL
        kwargs["stderr"] = subprocess.DEVNULL

    command_str = " ".join(cmd)
    logger.debug("exec: %s (cwd=%s)", command_str, cwd)

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            text=True,
            timeout=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
            env=env2,
            check=False,
            **kwargs,
        )
    except subprocess.TimeoutExpired as e:
        elapsed = time.time() - t0
        print(f"Command timed out after {timeout_seconds}s: {command_str}", file=sys.stderr)
        return CmdResult(
            exit_code=EXIT_TIMEOUT,
            elapsed_seconds=elapsed,
            command_str=command_str,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
        )

    elapsed = time.time() - t0
    return CmdResult(
        exit_code=normalize_exit_code(proc.returncode),
        elapsed_seconds=elapsed,
        command_str=command_str,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def _as_text(data: object) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data)
