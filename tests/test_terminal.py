"""Tests for foreground plan execution."""

import os
import signal
import sys

import pytest

from frs.terminal import executor as executor_module
from frs.terminal.executor import ForegroundExecutor, exit_status
from frs.terminal.result import RunResult
from tests.utils import posix_only


class TestRunResult:
    """Tests for RunResult dataclass."""

    def test_success_property(self):
        result = RunResult(command=["true"], exit_code=0, signal=None, duration_ms=1.0)
        assert result.success is True

    def test_failure_property(self):
        result = RunResult(command=["false"], exit_code=1, signal=None, duration_ms=1.0)
        assert result.success is False

    def test_repr(self):
        ok = RunResult(command=["true"], exit_code=0, signal=None, duration_ms=1.0)
        killed = RunResult(command=["x"], exit_code=130, signal="SIGINT", duration_ms=1.0)
        assert "exit=0" in repr(ok)
        assert "SIGINT" in repr(killed)


class TestExitStatus:
    def test_normal_exit(self):
        assert exit_status(0) == (0, None)
        assert exit_status(42) == (42, None)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_killed_by_signal(self):
        assert exit_status(-signal.SIGINT) == (130, "SIGINT")
        assert exit_status(-signal.SIGKILL) == (137, "SIGKILL")


@posix_only
class TestForegroundExecutor:
    """Tests for ForegroundExecutor."""

    @pytest.fixture
    def executor(self):
        return ForegroundExecutor()

    @pytest.mark.asyncio
    async def test_output_streams_through(self, executor, capfd):
        result = await executor.execute(["/bin/sh", "-c", "echo hi"])
        assert result.success
        assert capfd.readouterr().out == "hi\n"

    @pytest.mark.asyncio
    async def test_exit_code_propagates(self, executor):
        result = await executor.execute(["/bin/sh", "-c", "exit 7"])
        assert result.exit_code == 7
        assert result.signal is None

    @pytest.mark.asyncio
    async def test_extra_env(self, executor, capfd):
        result = await executor.execute(["/bin/sh", "-c", "echo $FRS_X"], env={"FRS_X": "yes"})
        assert result.success
        assert capfd.readouterr().out == "yes\n"

    @pytest.mark.asyncio
    async def test_killed_child_maps_to_shell_status(self, executor):
        result = await executor.execute(["/bin/sh", "-c", "kill -TERM $$"])
        assert result.exit_code == 128 + signal.SIGTERM
        assert result.signal == "SIGTERM"

    @pytest.mark.asyncio
    async def test_child_leads_its_own_process_group(self, executor, capfd):
        result = await executor.execute(
            [sys.executable, "-c", "import os; print(os.getpgrp() == os.getpid())"]
        )
        assert result.success
        assert capfd.readouterr().out.strip() == "True"

    @pytest.mark.asyncio
    async def test_forward_reaches_grandchildren(self, tmp_path):
        import asyncio

        marker = tmp_path / "survived"
        process = await asyncio.create_subprocess_exec(
            "/bin/sh", "-c", f"(sleep 2; touch {marker}) & wait", process_group=0
        )
        await asyncio.sleep(0.2)
        ForegroundExecutor._forward(process, signal.SIGTERM)
        returncode = await asyncio.wait_for(process.wait(), timeout=5)

        assert returncode == -signal.SIGTERM
        await asyncio.sleep(2.5)
        assert not marker.exists()

    @pytest.mark.asyncio
    async def test_command_not_found(self, executor, capfd):
        result = await executor.execute(["frs-nonexistent-shell-xyz", "-c", "true"])
        assert result.exit_code == 127
        assert "not found" in capfd.readouterr().err


@posix_only
class TestForegroundHandoff:
    """Terminal handoff when the child's process group is already gone."""

    @pytest.fixture
    def owned_tty(self, monkeypatch: pytest.MonkeyPatch) -> list[int]:
        reclaimed: list[int] = []

        def vanished_group(fd: int, pgid: int) -> None:
            if pgid != os.getpgrp():
                raise ProcessLookupError(3, "No such process")
            reclaimed.append(pgid)

        monkeypatch.setattr(executor_module, "_tty_fd", lambda: 0)
        monkeypatch.setattr(executor_module.os, "tcgetpgrp", lambda fd: os.getpgrp())
        monkeypatch.setattr(executor_module.os, "tcsetpgrp", vanished_group)
        return reclaimed

    def test_vanished_group_is_not_an_error(self, owned_tty: list[int]):
        entered = False
        with executor_module._foreground(2**22 + 12345):
            entered = True
        assert entered
        assert owned_tty == []

    @pytest.mark.asyncio
    async def test_fast_child_exit_code(self, owned_tty: list[int]):
        result = await ForegroundExecutor().execute(["/bin/sh", "-c", "exit 0"])
        assert result.exit_code == 0
