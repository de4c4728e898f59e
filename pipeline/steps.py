"""pipeline.steps

Central registry of the steps a run executes, in order.

Several parts of the runner need to agree on the *same* step facts:
- which steps exist and in what order they run
- human-friendly labels (banners / ``--list-steps``)
- which executable each step needs and where to look for it
- how each step's argv is built from the configuration

What belongs here
-----------------
Only small, pure wiring hooks:
- no filesystem writes
- no subprocess execution

Anything that actually runs a tool belongs in ``tools/``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from pipeline.config import AnalyzeConfig
from tools.core_cmd import CmdResult
from tools.luau_lsp import (
    LUAU_LSP_BIN_ENV,
    LUAU_LSP_FALLBACKS,
    build_analyze_command,
    luau_lsp_version,
    run_analyze,
)
from tools.lune import LUNE_BIN_ENV, LUNE_FALLBACKS, build_run_command, lune_version, run_script


ArgvBuilder = Callable[[AnalyzeConfig, str, Callable[[str], str]], List[str]]

# (argv, *, cwd, timeout_seconds, quiet) -> CmdResult
StepRunner = Callable[..., CmdResult]


@dataclass(frozen=True)
class StepInfo:
    """Static metadata describing one step."""

    key: str
    label: str

    # Executable name looked up on PATH, the env var that overrides it, and
    # extra install locations to try.
    bin_name: str
    bin_env: str
    fallbacks: Tuple[str, ...]

    # Pure hook: (config, bin, expand) -> argv. ``expand`` resolves $VARS.
    argv_builder: ArgvBuilder
    version_fn: Callable[[str], str]

    # Adapter entrypoint that executes the resolved argv.
    runner: StepRunner

    # Optional hook: return False to leave the step out of the plan.
    enabled: Optional[Callable[[AnalyzeConfig], bool]] = None

    def is_enabled(self, config: AnalyzeConfig) -> bool:
        return True if self.enabled is None else bool(self.enabled(config))


def _typedefs_argv(config: AnalyzeConfig, bin_name: str, expand: Callable[[str], str]) -> List[str]:
    return build_run_command(bin_name, expand(config.script))


def _analyze_argv(config: AnalyzeConfig, bin_name: str, expand: Callable[[str], str]) -> List[str]:
    return build_analyze_command(
        bin_name,
        platform=expand(config.platform),
        settings=expand(config.settings),
        ignores=[expand(g) for g in config.ignores],
        targets=[expand(t) for t in config.targets],
    )


# Canonical registry. Insertion order is execution order.
STEPS: Dict[str, StepInfo] = {
    "typedefs": StepInfo(
        key="typedefs",
        label="Copy type definitions (lune)",
        bin_name="lune",
        bin_env=LUNE_BIN_ENV,
        fallbacks=tuple(LUNE_FALLBACKS),
        argv_builder=_typedefs_argv,
        version_fn=lune_version,
        runner=run_script,
        enabled=lambda config: not config.skip_typedefs,
    ),
    "analyze": StepInfo(
        key="analyze",
        label="Static analysis (luau-lsp)",
        bin_name="luau-lsp",
        bin_env=LUAU_LSP_BIN_ENV,
        fallbacks=tuple(LUAU_LSP_FALLBACKS),
        argv_builder=_analyze_argv,
        version_fn=luau_lsp_version,
        runner=run_analyze,
    ),
}


STEP_ORDER: List[str] = list(STEPS.keys())
STEP_LABELS: Dict[str, str] = {k: info.label for k, info in STEPS.items()}
