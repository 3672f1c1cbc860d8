"""Shared test utilities."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from frs.terminal.result import RunResult

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX sh")


class RecordingExecutor:
    """PlanExecutor that records what it was asked to run."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[tuple[list[str], dict[str, str] | None]] = []

    async def execute(self, argv: list[str], env: dict[str, str] | None = None) -> RunResult:
        self.calls.append((argv, env))
        return RunResult(command=argv, exit_code=self.exit_code, signal=None, duration_ms=0.0)


def python_extension(tmp_path: Path, body: str, name: str = "ext.py") -> list[str]:
    """Write a Python extension script and return the argv that runs it."""
    script = tmp_path / name
    script.write_text(body, encoding="utf-8")
    return [sys.executable, str(script)]


ECHO_EXTENSION = """\
import json, sys
context = json.load(sys.stdin)
print(json.dumps({
    "meta": {"step_log": [
        {"description": "venv::activate", "prompt": "venv"},
        {"description": "seen %d steps" % len(context["steps"]), "prompt": None},
    ]},
    "step": {"kind": "scope", "prelude": "source .venv/bin/activate"},
    "origin": {"tool": "venv", "version": 2},
}))
"""
