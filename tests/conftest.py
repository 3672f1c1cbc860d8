"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from frs.composer import ComposeOptions
from frs.context.store import ContextStore
from frs.extension.runner import ExtensionRunner
from frs.session.engine import SessionEngine
from frs.session.state import SessionStore
from tests.utils import RecordingExecutor

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture
def frs_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every frs location at tmp_path and pin the session key."""
    monkeypatch.setenv("FRS_STORE", str(tmp_path / "store"))
    monkeypatch.setenv("FRS_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("FRS_SESSION", "test-session")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("FRS_SHELL", raising=False)
    monkeypatch.delenv("FRS_LOG", raising=False)
    monkeypatch.delenv("FRS_TERM_PID", raising=False)
    return tmp_path


@pytest.fixture
def store(tmp_path: Path) -> ContextStore:
    return ContextStore(tmp_path / "store")


@pytest.fixture
def sessions(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path / "state")


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def engine(store: ContextStore, sessions: SessionStore, executor: RecordingExecutor) -> SessionEngine:
    return SessionEngine(
        store=store,
        sessions=sessions,
        runner=ExtensionRunner(),
        executor=executor,
        options=ComposeOptions(),
        shell="/bin/sh",
    )
