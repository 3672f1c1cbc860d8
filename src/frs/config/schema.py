"""Configuration schema dataclasses for frs.

All fields have defaults so partial configs merge together.
"""

from __future__ import annotations

import getpass
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def default_store_root() -> Path:
    """~/.config/frs/context, where saved contexts live."""
    return Path.home() / ".config" / "frs" / "context"


def default_state_dir() -> Path:
    """Per-user directory holding each session's active context."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "user"
    return Path(tempfile.gettempdir()) / f"frs-{user}"


@dataclass
class StoreConfig:
    """Context store location."""

    root: Path = field(default_factory=default_store_root)


@dataclass
class SessionConfig:
    """Where active contexts are kept between invocations."""

    state_dir: Path = field(default_factory=default_state_dir)


@dataclass
class ExecutionConfig:
    """How composed plans are executed and how containers are entered.

    Example config.yaml:
        execution:
          shell: /bin/bash
          docker: podman
          docker_run_args: ["--rm", "-it"]
    """

    shell: str = "/bin/sh"
    docker: str = "docker"
    docker_run_args: list[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    file: str | None = None
    verbose: int | None = None  # 0-4, overrides level


@dataclass
class Config:
    """Root configuration object."""

    store: StoreConfig = field(default_factory=StoreConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections, kept for tools layered on top of frs
    extra: dict[str, Any] = field(default_factory=dict)
