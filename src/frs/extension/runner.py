"""Run extension programs and turn their replies into steps."""

from __future__ import annotations

import asyncio
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from frs.context.model import Context, StepLogEntry
from frs.context.steps import ExtensionStep
from frs.errors import ExtensionFailure, ExtensionNotFound
from frs.extension.protocol import CONTEXT_FILE_ENV, CONTEXT_PLACEHOLDER, parse_reply
from frs.logging import get_logger

log = get_logger("extension")


@dataclass(frozen=True)
class ExtensionResult:
    """What an extension contributes to the active context."""

    step: ExtensionStep
    log: tuple[StepLogEntry, ...]


class ExtensionRunner:
    """Execute extension programs using asyncio subprocess.

    The context is handed over on stdin, or, when an argument contains
    ``{context}``, in a temp file whose path replaces the token. Stdout
    carries the reply; stderr is passed through to the user.
    """

    def __init__(self, default_cwd: str | None = None) -> None:
        """Initialize the runner.

        Args:
            default_cwd: Working directory for extensions. None means the
                current directory.
        """
        self._default_cwd = default_cwd

    async def run(self, program: str, args: list[str], context: Context) -> ExtensionResult:
        """Run ``program`` against ``context``.

        Raises:
            ExtensionNotFound: The program cannot be started.
            ExtensionFailure: The program exited nonzero.
            InvalidExtensionOutput: The reply is not of the required shape.
        """
        payload = context.to_json().encode("utf-8")
        use_file = any(CONTEXT_PLACEHOLDER in arg for arg in args)
        context_file: Path | None = None
        env = os.environ.copy()

        if use_file:
            fd, name = tempfile.mkstemp(prefix="frs-context-", suffix=".json")
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            context_file = Path(name)
            env[CONTEXT_FILE_ENV] = name
            argv = [program, *(arg.replace(CONTEXT_PLACEHOLDER, name) for arg in args)]
        else:
            argv = [program, *args]

        start_time = time.perf_counter()
        try:
            try:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=None if use_file else asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    cwd=self._default_cwd,
                    env=env,
                )
            except FileNotFoundError:
                raise ExtensionNotFound(program) from None
            except PermissionError:
                raise ExtensionNotFound(program, "permission denied") from None
            except OSError as e:
                raise ExtensionNotFound(program, str(e)) from e

            stdout_data, _ = await process.communicate(None if use_file else payload)
        finally:
            if context_file is not None:
                context_file.unlink(missing_ok=True)

        duration_ms = (time.perf_counter() - start_time) * 1000
        log.debug(
            "Extension %s exited %s after %.0fms", program, process.returncode, duration_ms
        )

        if process.returncode != 0:
            raise ExtensionFailure(program, process.returncode)

        reply, entries = parse_reply(program, stdout_data)
        step = ExtensionStep(source=(program, *args), payload=reply)
        return ExtensionResult(step=step, log=entries)
