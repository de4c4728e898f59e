"""pipeline.models

Lightweight data structures passed between the orchestrator and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PlannedStep:
    """A step whose argv has been fully built but not yet executed."""

    key: str
    label: str
    tool: str
    command: List[str]

    @property
    def command_str(self) -> str:
        return " ".join(self.command)


@dataclass(frozen=True)
class StepResult:
    key: str
    command: List[str]
    exit_code: int
    elapsed_seconds: float
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.key,
            "command": " ".join(self.command),
            "exit_code": self.exit_code,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "timed_out": self.timed_out,
        }


@dataclass
class RunSummary:
    """Outcome of one run.

    ``exit_code`` is 0 when every executed step succeeded, otherwise the exit
    code of the first failing step. ``skipped`` lists steps that never ran
    because an earlier one failed.
    """

    results: List[StepResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def exit_code(self) -> int:
        for r in self.results:
            if not r.ok:
                return r.exit_code
        return 0

    @property
    def failed_step(self) -> Optional[str]:
        for r in self.results:
            if not r.ok:
                return r.key
        return None
