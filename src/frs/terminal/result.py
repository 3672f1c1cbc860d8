"""Execution result dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunResult:
    """Result of running a composed plan in the foreground.

    Attributes:
        command: The argument vector that was executed.
        exit_code: Exit status to report. A child killed by signal N
            reports 128 + N, like a shell.
        signal: Signal name if the child was killed by a signal.
        duration_ms: Execution duration in milliseconds.
    """

    command: list[str]
    exit_code: int
    signal: str | None
    duration_ms: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def __repr__(self) -> str:
        if self.signal:
            return f"<RunResult killed by {self.signal}, exit={self.exit_code}>"
        return f"<RunResult exit={self.exit_code}>"
