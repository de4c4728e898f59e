"""pipeline.orchestrator

Sequential execution of the planned steps.

Design principles
-----------------
- Keep the CLI thin: parse args + resolve config + call :func:`run_steps`.
- Keep argv building centralized (via :mod:`pipeline.core`).
- One step at a time, each awaited to completion. The first non-zero exit
  stops the run and becomes the run's exit code; later steps never start.
- Never fail a run because metadata writing failed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from pipeline.config import AnalyzeConfig
from pipeline.core import plan_steps
from pipeline.models import PlannedStep, RunSummary, StepResult
from pipeline.steps import STEPS
from tools.core_cmd import EXIT_NOT_FOUND, CmdResult, which_or_raise
from tools.core_metadata import build_run_metadata
from tools.io import write_json

logger = logging.getLogger(__name__)

# Shell status for "found but not executable".
EXIT_NOT_EXECUTABLE = 126


Resolver = Callable[[str], str]


def resolve_step_bin(step_key: str) -> str:
    """Resolve the executable for a step (env override, PATH, fallbacks)."""
    info = STEPS[step_key]
    return which_or_raise(info.bin_name, list(info.fallbacks), env_var=info.bin_env)


def _execute(
    step: PlannedStep,
    *,
    config: AnalyzeConfig,
    quiet: bool,
    resolver: Resolver,
) -> StepResult:
    try:
        bin_path = resolver(step.key)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return StepResult(key=step.key, command=step.command, exit_code=EXIT_NOT_FOUND, elapsed_seconds=0.0)

    cmd = [bin_path] + step.command[1:]
    try:
        res: CmdResult = STEPS[step.key].runner(
            cmd,
            cwd=config.root,
            timeout_seconds=config.timeout_seconds,
            quiet=quiet,
        )
    except PermissionError as e:
        logger.error("cannot execute %s: %s", bin_path, e)
        return StepResult(key=step.key, command=cmd, exit_code=EXIT_NOT_EXECUTABLE, elapsed_seconds=0.0)
    except FileNotFoundError as e:
        # Resolved path vanished, or cwd does not exist.
        logger.error("cannot execute %s: %s", bin_path, e)
        return StepResult(key=step.key, command=cmd, exit_code=EXIT_NOT_FOUND, elapsed_seconds=0.0)

    return StepResult(
        key=step.key,
        command=cmd,
        exit_code=res.exit_code,
        elapsed_seconds=res.elapsed_seconds,
        timed_out=res.timed_out,
    )


def run_steps(
    config: AnalyzeConfig,
    *,
    dry_run: bool = False,
    quiet: bool = False,
    env: Optional[Mapping[str, str]] = None,
    resolver: Optional[Resolver] = None,
    metadata_out: Optional[Path] = None,
) -> RunSummary:
    """Run every enabled step in order, stopping at the first failure.

    All argv are built before the first step starts, so an unset variable
    (``ConfigError``) aborts the run with nothing executed.
    """
    plan = plan_steps(config, env=env)
    summary = RunSummary(dry_run=dry_run)

    if dry_run:
        for step in plan:
            print(f"  [{step.key}] {step.command_str}")
        print("  (dry-run: not executing)")
        if metadata_out is not None:
            logger.warning("dry-run: not writing run metadata to %s", str(metadata_out))
        return summary

    resolver = resolver or resolve_step_bin

    for idx, step in enumerate(plan):
        print(f"\n▶ {step.label}")
        print(f"  Command : {step.command_str}")

        result = _execute(step, config=config, quiet=quiet, resolver=resolver)
        summary.results.append(result)
        logger.info("step %s exited %d in %.2fs", step.key, result.exit_code, result.elapsed_seconds)

        if not result.ok:
            summary.skipped = [s.key for s in plan[idx + 1:]]
            if summary.skipped:
                logger.info("skipping %s after %s failed", ", ".join(summary.skipped), step.key)
            break

    if metadata_out is not None:
        _write_metadata(metadata_out, config=config, summary=summary, resolver=resolver)

    return summary


def _tool_versions(summary: RunSummary, resolver: Resolver) -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for r in summary.results:
        info = STEPS[r.key]
        try:
            versions[info.bin_name] = info.version_fn(resolver(r.key))
        except FileNotFoundError:
            versions[info.bin_name] = "unknown"
    return versions


def _write_metadata(path: Path, *, config: AnalyzeConfig, summary: RunSummary, resolver: Resolver) -> None:
    steps: List[Dict[str, object]] = [r.to_dict() for r in summary.results]
    steps += [{"step": k, "skipped": True} for k in summary.skipped]
    try:
        meta = build_run_metadata(
            root=config.root,
            config=config.to_dict(),
            steps=steps,
            exit_code=summary.exit_code,
            tool_versions=_tool_versions(summary, resolver),
        )
        write_json(Path(path), meta)
        print(f"📝 Wrote run metadata: {path}")
    except OSError as e:
        logger.warning("Failed to write run metadata to %s: %s", str(path), e)
