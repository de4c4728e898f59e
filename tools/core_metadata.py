"""tools/core_metadata.py

Standard run metadata creation.

``--metadata-out`` writes one JSON record per run. This module owns its shape
so every field is produced in one place.
"""

from __future__ import annotations

import hashlib
import json
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core_git import get_git_branch, get_git_commit


def config_hash(config: Dict[str, Any]) -> str:
    """Hash stable, config-like fields for provenance.

    Callers pass only configuration (no timings or paths of outputs).
    """
    raw = json.dumps(config, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def build_run_metadata(
    *,
    root: Path,
    config: Dict[str, Any],
    steps: List[Dict[str, Any]],
    exit_code: int,
    tool_versions: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Standard metadata dict written after a run."""
    return {
        "root": str(root),
        "repo_branch": get_git_branch(root),
        "repo_commit": get_git_commit(root),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": config,
        "config_hash": config_hash(config),
        "tool_versions": dict(tool_versions or {}),
        "steps": steps,
        "exit_code": exit_code,
        "python_version": platform.python_version(),
        "platform": platform.platform(),
    }
