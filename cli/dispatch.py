from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict

from pipeline.config import ConfigError, load_env, resolve_config
from pipeline.orchestrator import run_steps
from pipeline.steps import STEPS

logger = logging.getLogger(__name__)


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect CLI overrides; unset flags are None and leave config alone."""
    return {
        "script": args.script,
        "platform": args.platform,
        "settings": args.settings,
        "ignores": args.ignores,
        "extra_ignores": args.extra_ignores,
        "targets": args.targets or None,
        "skip_typedefs": args.skip_typedefs,
        "timeout_seconds": args.timeout_seconds,
    }


def list_steps() -> int:
    for idx, (key, info) in enumerate(STEPS.items(), start=1):
        print(f"[{idx}] {info.label} ({key}) - {info.bin_name} (override: {info.bin_env})")
    return 0


def dispatch(args: argparse.Namespace) -> int:
    if args.list_steps:
        return list_steps()

    root = Path(args.root).expanduser().resolve()
    if not root.is_dir():
        raise SystemExit(f"ERROR: project root is not a directory: {root}")

    # Load .env before reading config so $VARS in analyze.yaml can use it.
    load_env(root)

    try:
        config = resolve_config(root, config_path=args.config_path, overrides=overrides_from_args(args))
    except (ConfigError, FileNotFoundError) as e:
        raise SystemExit(f"ERROR: {e}")

    print("\n🚀 Running analysis")
    print(f"  Root    : {config.root}")

    try:
        summary = run_steps(
            config,
            dry_run=args.dry_run,
            quiet=args.quiet,
            metadata_out=Path(args.metadata_out) if args.metadata_out else None,
        )
    except ConfigError as e:
        raise SystemExit(f"ERROR: {e}")

    code = summary.exit_code
    if summary.dry_run:
        return 0
    if code == 0:
        print("\n✅ Analysis completed.")
    else:
        print(f"\n⚠️ Step '{summary.failed_step}' failed with exit code {code}")
    return code
