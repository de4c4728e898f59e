# pipeline/core.py
"""Command construction.

Every argv is built here, before anything executes, so a configuration that
references an unset variable fails the whole run up front.
"""

from __future__ import annotations

import os
from string import Template
from typing import List, Mapping, Optional

from pipeline.config import AnalyzeConfig, ConfigError
from pipeline.models import PlannedStep
from pipeline.steps import STEPS


def expand_vars(value: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Expand ``$NAME`` / ``${NAME}`` in ``value``; ``$$`` is a literal ``$``.

    Strict: an unset variable raises :class:`ConfigError` instead of
    expanding to an empty string.
    """
    mapping = os.environ if env is None else env
    try:
        return Template(value).substitute(mapping)
    except KeyError as e:
        raise ConfigError(f"unbound variable: {e.args[0]} (in {value!r})") from None
    except ValueError as e:
        raise ConfigError(f"invalid variable reference in {value!r}: {e}") from None


def build_step_command(
    step_key: str,
    config: AnalyzeConfig,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    if step_key not in STEPS:
        raise ValueError(f"Unknown step '{step_key}'. Valid: {list(STEPS)}")
    info = STEPS[step_key]
    return info.argv_builder(config, info.bin_name, lambda v: expand_vars(v, env))


def build_typedefs_command(config: AnalyzeConfig, *, env: Optional[Mapping[str, str]] = None) -> List[str]:
    """``lune run <script>``"""
    return build_step_command("typedefs", config, env=env)


def build_analyze_command(config: AnalyzeConfig, *, env: Optional[Mapping[str, str]] = None) -> List[str]:
    """``luau-lsp analyze --platform=... --settings=... --ignore=... <targets>``"""
    return build_step_command("analyze", config, env=env)


def plan_steps(config: AnalyzeConfig, *, env: Optional[Mapping[str, str]] = None) -> List[PlannedStep]:
    """Build argv for every enabled step, in execution order.

    ``command[0]`` is the bare executable name; it is resolved to a path only
    when the step is about to run.
    """
    plan: List[PlannedStep] = []
    for key, info in STEPS.items():
        if not info.is_enabled(config):
            continue
        plan.append(
            PlannedStep(
                key=key,
                label=info.label,
                tool=info.bin_name,
                command=build_step_command(key, config, env=env),
            )
        )
    return plan
