from __future__ import annotations

import dataclasses
import logging
import stat
import subprocess
import sys
from pathlib import Path
from typing import List

import pytest

from pipeline.config import AnalyzeConfig
from pipeline.orchestrator import run_steps
from pipeline.steps import STEPS
from tools.core_cmd import CmdResult


class FakeRun:
    """Stands in for subprocess.run; returns scripted exit codes per tool."""

    def __init__(self, codes: dict) -> None:
        self.codes = codes
        self.calls: List[List[str]] = []
        self.real_run = subprocess.run

    def __call__(self, cmd, **kwargs):
        name = Path(cmd[0]).name
        if name not in self.codes:
            return self.real_run(cmd, **kwargs)
        self.calls.append(list(cmd))
        code = self.codes[name]
        if isinstance(code, BaseException):
            raise code
        return subprocess.CompletedProcess(cmd, code, stdout="", stderr="")


def _resolver(key: str) -> str:
    return {"typedefs": "/bin/lune", "analyze": "/bin/luau-lsp"}[key]


@pytest.fixture
def config(tmp_path: Path) -> AnalyzeConfig:
    return AnalyzeConfig(root=tmp_path)


def _run(monkeypatch, config, codes, **kwargs):
    fake = FakeRun(codes)
    monkeypatch.setattr(subprocess, "run", fake)
    summary = run_steps(config, env={}, resolver=_resolver, **kwargs)
    return summary, fake


def test_both_steps_succeed_exit_zero(monkeypatch, config) -> None:
    summary, fake = _run(monkeypatch, config, {"lune": 0, "luau-lsp": 0})

    assert summary.exit_code == 0
    assert [Path(c[0]).name for c in fake.calls] == ["lune", "luau-lsp"]
    assert summary.skipped == []


def test_pre_step_failure_stops_before_analyzer(monkeypatch, config) -> None:
    summary, fake = _run(monkeypatch, config, {"lune": 3, "luau-lsp": 0})

    assert summary.exit_code == 3
    assert summary.failed_step == "typedefs"
    assert summary.skipped == ["analyze"]
    assert len(fake.calls) == 1
    assert fake.calls[0] == ["/bin/lune", "run", "scripts/analyze_copy_typedefs"]


def test_analyzer_failure_propagates_its_code(monkeypatch, config) -> None:
    summary, fake = _run(monkeypatch, config, {"lune": 0, "luau-lsp": 1})

    assert summary.exit_code == 1
    assert summary.failed_step == "analyze"
    assert len(fake.calls) == 2
    assert fake.calls[1][1:4] == ["analyze", "--platform=standard", "--settings=.vscode/settings.json"]


def test_signal_death_reports_128_plus_signal(monkeypatch, config) -> None:
    summary, _ = _run(monkeypatch, config, {"lune": -9, "luau-lsp": 0})

    assert summary.exit_code == 137


def test_timeout_reports_124_and_stops(monkeypatch, tmp_path) -> None:
    config = AnalyzeConfig(root=tmp_path, timeout_seconds=5)
    timeout = subprocess.TimeoutExpired(["lune"], 5)
    summary, fake = _run(monkeypatch, config, {"lune": timeout, "luau-lsp": 0})

    assert summary.exit_code == 124
    assert summary.results[0].timed_out is True
    assert len(fake.calls) == 1


def test_missing_executable_reports_127_and_stops(monkeypatch, config) -> None:
    fake = FakeRun({"lune": 0, "luau-lsp": 0})
    monkeypatch.setattr(subprocess, "run", fake)

    def resolver(key: str) -> str:
        raise FileNotFoundError(f"Executable for {key} not found")

    summary = run_steps(config, env={}, resolver=resolver)

    assert summary.exit_code == 127
    assert summary.skipped == ["analyze"]
    assert fake.calls == []


def test_skip_typedefs_runs_only_analyzer(monkeypatch, tmp_path) -> None:
    config = AnalyzeConfig(root=tmp_path, skip_typedefs=True)
    summary, fake = _run(monkeypatch, config, {"lune": 0, "luau-lsp": 0})

    assert summary.exit_code == 0
    assert [Path(c[0]).name for c in fake.calls] == ["luau-lsp"]


def test_dry_run_executes_nothing(monkeypatch, config, capsys) -> None:
    summary, fake = _run(monkeypatch, config, {"lune": 1, "luau-lsp": 1}, dry_run=True)

    assert summary.exit_code == 0
    assert fake.calls == []
    out = capsys.readouterr().out
    assert "lune run scripts/analyze_copy_typedefs" in out
    assert "luau-lsp analyze --platform=standard" in out


def test_steps_run_in_project_root(monkeypatch, config) -> None:
    seen = []

    def fake(cmd, **kwargs):
        seen.append(kwargs.get("cwd"))
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(subprocess, "run", fake)
    run_steps(config, env={}, resolver=_resolver)

    assert seen == [str(config.root), str(config.root)]


def test_permission_error_reports_126_and_stops(monkeypatch, config) -> None:
    summary, fake = _run(monkeypatch, config, {"lune": PermissionError(13, "Permission denied"), "luau-lsp": 0})

    assert summary.exit_code == 126
    assert summary.failed_step == "typedefs"
    assert summary.skipped == ["analyze"]
    assert len(fake.calls) == 1


def test_steps_execute_through_adapter_runners(monkeypatch, config) -> None:
    from tools.luau_lsp import run_analyze
    from tools.lune import run_script

    assert STEPS["typedefs"].runner is run_script
    assert STEPS["analyze"].runner is run_analyze

    seen = []

    def recording_runner(cmd, *, cwd, timeout_seconds, quiet):
        seen.append((cmd[0], cwd, timeout_seconds, quiet))
        return CmdResult(exit_code=0, elapsed_seconds=0.0, command_str=" ".join(cmd), stdout="", stderr="")

    patched = {k: dataclasses.replace(info, runner=recording_runner) for k, info in STEPS.items()}
    monkeypatch.setattr("pipeline.orchestrator.STEPS", patched)

    summary = run_steps(config, env={}, resolver=_resolver, quiet=True)

    assert summary.exit_code == 0
    assert seen == [
        ("/bin/lune", config.root, 0, True),
        ("/bin/luau-lsp", config.root, 0, True),
    ]


def test_dry_run_skips_metadata_with_warning(monkeypatch, config, tmp_path, caplog) -> None:
    out = tmp_path / "meta.json"

    with caplog.at_level(logging.WARNING, logger="pipeline.orchestrator"):
        summary, fake = _run(monkeypatch, config, {"lune": 0, "luau-lsp": 0}, dry_run=True, metadata_out=out)

    assert summary.exit_code == 0
    assert fake.calls == []
    assert not out.exists()
    assert "not writing run metadata" in caplog.text


def _make_exe(path: Path) -> Path:
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell for the stand-in tools")
def test_relative_bin_overrides_work_when_root_is_elsewhere(monkeypatch, tmp_path) -> None:
    launch = tmp_path / "launch"
    project = tmp_path / "project"
    (launch / "bin").mkdir(parents=True)
    project.mkdir()
    _make_exe(launch / "bin" / "lune")
    _make_exe(launch / "bin" / "luau-lsp")

    monkeypatch.chdir(launch)
    monkeypatch.setenv("LUNE_BIN", "./bin/lune")
    monkeypatch.setenv("LUAU_LSP_BIN", "./bin/luau-lsp")

    summary = run_steps(AnalyzeConfig(root=project), env={}, quiet=True)

    assert summary.exit_code == 0
    assert [r.key for r in summary.results] == ["typedefs", "analyze"]
    assert all(Path(r.command[0]).is_absolute() for r in summary.results)
