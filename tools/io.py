"""tools/io.py

Tiny filesystem helpers used across the runner.

Keep the actual implementations here and have other modules import them, so
JSON formatting options never drift between writers.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json(path: Path, data: Any) -> None:
    """Write pretty JSON to disk (UTF-8), atomically.

    The payload goes to a sibling ``*.tmp`` file first and is then renamed over
    ``path``, so readers never observe a half-written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def read_json(path: Path) -> Any:
    """Read JSON from disk (UTF-8)."""
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)
