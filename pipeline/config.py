"""pipeline.config

Run configuration for the typedef pre-step and ``luau-lsp analyze``.

Layers (later wins)
-------------------
1. Built-in defaults (:data:`DEFAULT_IGNORES`, :data:`DEFAULT_TARGETS`, ...).
2. Optional YAML file: ``analyze.yaml`` in the project root, or an explicit
   ``--config PATH``.
3. CLI flags (applied by the caller via :func:`apply_overrides`).

``.env`` in the project root is loaded with python-dotenv before any of this,
without overriding variables already exported in the shell.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "analyze.yaml"
ENV_FILENAME = ".env"

DEFAULT_SCRIPT = "scripts/analyze_copy_typedefs"
DEFAULT_PLATFORM = "standard"
DEFAULT_SETTINGS = ".vscode/settings.json"

# Test fixtures and generated/reference files that must not be analyzed.
DEFAULT_IGNORES: List[str] = [
    "tests/roblox/rbx-test-files/**",
    "tests/wally_test/**",
    "tests/require/project_test/**",
    "tests/require/script_ref.luau",
    "tests/require/script_ref_module.luau",
    "tests/globals/script.luau",
]

DEFAULT_TARGETS: List[str] = [".lune", "crates", "scripts", "tests"]


class ConfigError(ValueError):
    """Invalid configuration, or a reference to an unset variable."""


@dataclass(frozen=True)
class AnalyzeConfig:
    """Everything needed to build and run both steps."""

    root: Path = field(default_factory=Path.cwd)
    script: str = DEFAULT_SCRIPT
    platform: str = DEFAULT_PLATFORM
    settings: str = DEFAULT_SETTINGS
    ignores: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORES))
    targets: List[str] = field(default_factory=lambda: list(DEFAULT_TARGETS))
    skip_typedefs: bool = False
    timeout_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["root"] = str(self.root)
        return d


# Keys accepted in analyze.yaml, with the type each must have.
_YAML_KEYS: Dict[str, type] = {
    "script": str,
    "platform": str,
    "settings": str,
    "ignores": list,
    "extra_ignores": list,
    "targets": list,
    "skip_typedefs": bool,
    "timeout_seconds": int,
}


def load_env(root: Path) -> bool:
    """Load ``<root>/.env`` if present. Exported variables take precedence."""
    env_path = Path(root) / ENV_FILENAME
    if not env_path.exists():
        return False
    logger.debug("loading %s", env_path)
    return bool(load_dotenv(env_path, override=False))


def _check_str_list(key: str, value: List[Any], source: Path) -> List[str]:
    out: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{source}: '{key}' entries must be non-empty strings, got {item!r}")
        out.append(item)
    return out


def _validate(raw: Dict[str, Any], source: Path) -> Dict[str, Any]:
    unknown = sorted(set(raw) - set(_YAML_KEYS))
    if unknown:
        raise ConfigError(f"{source}: unknown keys {unknown}. Valid: {sorted(_YAML_KEYS)}")

    clean: Dict[str, Any] = {}
    for key, value in raw.items():
        expected = _YAML_KEYS[key]
        # bool is a subclass of int; reject it where an int is expected.
        if expected is int and isinstance(value, bool):
            raise ConfigError(f"{source}: '{key}' must be an integer, got {value!r}")
        if not isinstance(value, expected):
            raise ConfigError(f"{source}: '{key}' must be {expected.__name__}, got {type(value).__name__}")
        if expected is list:
            value = _check_str_list(key, value, source)
        if key == "timeout_seconds" and value < 0:
            raise ConfigError(f"{source}: 'timeout_seconds' must be >= 0")
        clean[key] = value
    return clean


def load_config_yaml(path: str | Path) -> Dict[str, Any]:
    """Load and validate a YAML config file; returns only the keys it sets."""
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{p}: invalid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config YAML must be a mapping/object at top level: {p}")
    return _validate(raw, p)


def apply_overrides(config: AnalyzeConfig, overrides: Dict[str, Any]) -> AnalyzeConfig:
    """Return a copy of ``config`` with non-None overrides applied.

    ``extra_ignores`` appends to whatever ``ignores`` ends up being.
    """
    known = {f.name for f in fields(AnalyzeConfig)}
    changes = {k: v for k, v in overrides.items() if k in known and v is not None}
    extra = overrides.get("extra_ignores") or []

    if "ignores" in changes:
        changes["ignores"] = list(changes["ignores"])
    if "targets" in changes:
        changes["targets"] = list(changes["targets"])

    updated = replace(config, **changes)
    if extra:
        updated = replace(updated, ignores=list(updated.ignores) + list(extra))
    return updated


def resolve_config(
    root: Path,
    *,
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AnalyzeConfig:
    """Build the effective configuration for a run rooted at ``root``."""
    root = Path(root).expanduser().resolve()
    config = AnalyzeConfig(root=root)

    if config_path:
        path: Optional[Path] = Path(config_path).expanduser().resolve()
    else:
        path = root / CONFIG_FILENAME
        if not path.exists():
            path = None

    if path is not None:
        logger.info("using config file %s", path)
        config = apply_overrides(config, load_config_yaml(path))

    if overrides:
        config = apply_overrides(config, overrides)
    return config
