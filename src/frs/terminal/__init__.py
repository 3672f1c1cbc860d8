"""Foreground execution of composed plans."""

from frs.terminal.executor import ForegroundExecutor, exit_status
from frs.terminal.protocol import PlanExecutor
from frs.terminal.result import RunResult

__all__ = [
    "ForegroundExecutor",
    "PlanExecutor",
    "RunResult",
    "exit_status",
]
