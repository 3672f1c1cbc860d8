"""Executor protocol for running composed plans."""

from __future__ import annotations

from typing import Protocol

from frs.terminal.result import RunResult


class PlanExecutor(Protocol):
    """Protocol for executing a composed plan.

    Implementations:
    - ForegroundExecutor: local child process with inherited stdio
    """

    async def execute(
        self,
        argv: list[str],
        env: dict[str, str] | None = None,
    ) -> RunResult:
        """Execute ``argv`` and wait for it.

        Args:
            argv: Full argument vector, e.g. ``["/bin/sh", "-c", plan]``.
            env: Additional environment variables to set.

        Returns:
            RunResult with the exit status to propagate.
        """
        ...
