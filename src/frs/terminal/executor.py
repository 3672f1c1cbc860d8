"""Foreground execution of composed plans.

The child inherits stdin/stdout/stderr, so its output streams straight to
the user. On POSIX it runs in its own process group, which becomes the
terminal's foreground group while it runs; signals delivered to frs itself
are forwarded to that whole group.
"""

from __future__ import annotations

import asyncio
import os
import platform
import signal
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager

from frs.logging import get_logger
from frs.terminal.result import RunResult

log = get_logger("terminal")

_WINDOWS = platform.system() == "Windows"
_CREATE_NEW_PROCESS_GROUP = 0x00000200 if _WINDOWS else 0

FORWARDED_SIGNALS: tuple[str, ...] = ("SIGINT", "SIGTERM", "SIGHUP")


def _send_interrupt(process: asyncio.subprocess.Process) -> None:
    """Deliver an interrupt to the child's process group."""
    if _WINDOWS:
        # CTRL_C_EVENT does not reach a new process group; CTRL_BREAK_EVENT does.
        try:
            os.kill(process.pid, signal.CTRL_BREAK_EVENT)  # type: ignore[attr-defined]
        except OSError:
            process.terminate()
    else:
        _signal_group(process, signal.SIGINT)


def _signal_group(process: asyncio.subprocess.Process, sig: int) -> None:
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        pass  # Already gone
    except OSError:
        process.send_signal(sig)


def exit_status(returncode: int) -> tuple[int, str | None]:
    """Map a returncode to (shell-style exit status, signal name)."""
    if returncode >= 0:
        return returncode, None
    signum = -returncode
    try:
        name = signal.Signals(signum).name
    except ValueError:
        name = f"SIG{signum}"
    return 128 + signum, name


def _tty_fd() -> int | None:
    try:
        if sys.stdin is not None and sys.stdin.isatty():
            return sys.stdin.fileno()
    except (OSError, ValueError):
        pass  # Replaced or closed stdin
    return None


@contextmanager
def _foreground(pgid: int) -> Iterator[None]:
    """Make ``pgid`` the terminal's foreground process group while active.

    Does nothing when stdin is not a terminal or frs is not itself in the
    foreground.
    """
    fd = _tty_fd()
    if _WINDOWS or fd is None:
        yield
        return
    try:
        owner = os.tcgetpgrp(fd)
    except OSError:
        yield
        return
    if owner != os.getpgrp():
        yield
        return

    try:
        os.tcsetpgrp(fd, pgid)
    except OSError as e:
        # A child that already exited took its process group with it.
        log.debug("Could not hand terminal to group %d: %s", pgid, e)
        handed_off = False
    else:
        handed_off = True
    if not handed_off:
        yield
        return

    # The child may have touched the tty before the handoff and been stopped.
    try:
        os.killpg(pgid, signal.SIGCONT)
    except OSError:
        pass
    try:
        yield
    finally:
        # We are a background group now; taking the tty back raises SIGTTOU.
        previous = signal.signal(signal.SIGTTOU, signal.SIG_IGN)
        try:
            os.tcsetpgrp(fd, os.getpgrp())
        except OSError as e:
            log.debug("Could not reclaim terminal: %s", e)
        finally:
            signal.signal(signal.SIGTTOU, previous)


class ForegroundExecutor:
    """Run a plan as a foreground child process tree."""

    def __init__(self, forward_signals: tuple[str, ...] = FORWARDED_SIGNALS) -> None:
        self._forward_signals = tuple(
            getattr(signal, name) for name in forward_signals if hasattr(signal, name)
        )

    async def execute(
        self,
        argv: list[str],
        env: dict[str, str] | None = None,
    ) -> RunResult:
        """Execute ``argv`` with inherited stdio and wait for it.

        Args:
            argv: Full argument vector.
            env: Additional environment variables.

        Returns:
            RunResult. Spawn failures are reported as exit codes
            (127 not found, 126 permission denied), not raised.
        """
        start_time = time.perf_counter()

        process_env = os.environ.copy()
        if env:
            process_env.update(env)

        if _WINDOWS:
            group_kwargs = {"creationflags": _CREATE_NEW_PROCESS_GROUP}
        else:
            group_kwargs = {"process_group": 0}

        def failed(code: int, message: str) -> RunResult:
            print(f"frs: {message}", file=sys.stderr)
            return RunResult(
                command=argv,
                exit_code=code,
                signal=None,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )

        try:
            process = await asyncio.create_subprocess_exec(
                *argv, env=process_env, **group_kwargs
            )
        except FileNotFoundError:
            return failed(127, f"command not found: {argv[0]}")
        except PermissionError:
            return failed(126, f"permission denied: {argv[0]}")
        except OSError as e:
            return failed(1, f"cannot execute {argv[0]}: {e}")

        log.debug("Started pid %d: %s", process.pid, argv)

        loop = asyncio.get_running_loop()
        installed: list[int] = []
        for sig in self._forward_signals:
            try:
                loop.add_signal_handler(sig, self._forward, process, sig)
                installed.append(sig)
            except (NotImplementedError, RuntimeError, ValueError):
                pass  # No signal handlers on this loop/platform

        try:
            with _foreground(process.pid):
                try:
                    returncode = await process.wait()
                except asyncio.CancelledError:
                    _send_interrupt(process)
                    await process.wait()
                    raise
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

        exit_code, signal_name = exit_status(returncode)
        return RunResult(
            command=argv,
            exit_code=exit_code,
            signal=signal_name,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )

    @staticmethod
    def _forward(process: asyncio.subprocess.Process, sig: int) -> None:
        if process.returncode is not None:
            return
        log.debug("Forwarding signal %d to process group %d", sig, process.pid)
        if _WINDOWS:
            _send_interrupt(process)
        else:
            _signal_group(process, sig)
