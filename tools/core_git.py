"""tools/core_git.py

Git metadata helpers for the analyzed project.

Used only for best-effort provenance in run metadata; every helper returns
None when the project is not a git checkout or git is unavailable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .core_cmd import run_cmd


def _git(repo_path: Path, *args: str) -> Optional[str]:
    try:
        res = run_cmd(["git", "-C", str(repo_path), *args], timeout_seconds=20, capture=True)
    except OSError:
        return None
    out = (res.stdout or "").strip()
    return out if res.exit_code == 0 and out else None


def get_git_commit(repo_path: Path) -> Optional[str]:
    """Return the current commit SHA for the repo at repo_path."""
    return _git(repo_path, "rev-parse", "HEAD")


def get_git_branch(repo_path: Path) -> Optional[str]:
    """Return the current branch name, or None when detached."""
    b = _git(repo_path, "rev-parse", "--abbrev-ref", "HEAD")
    if not b or b == "HEAD":
        return None
    return b
