"""Tests for the configuration module."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from frs.config import Config, load_config
from frs.config.loader import env_overrides, merge_into
from frs.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
)
from frs.config.schema import LoggingConfig
from frs.logging import TRACE, VERBOSE, resolve_level


class TestMergeInto:
    """Test the layered merge."""

    def test_simple_override(self) -> None:
        """Test that layer values replace base values."""
        result = merge_into({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_sections_merge_key_by_key(self) -> None:
        base = {"execution": {"shell": "/bin/sh", "docker": "docker"}}
        result = merge_into(base, {"execution": {"docker": "podman"}})
        assert result == {"execution": {"shell": "/bin/sh", "docker": "podman"}}

    def test_none_does_not_override(self) -> None:
        """Test that None values in a layer don't replace base values."""
        assert merge_into({"a": 1}, {"a": None}) == {"a": 1}

    def test_list_replaced_not_merged(self) -> None:
        base = {"execution": {"docker_run_args": ["--rm"]}}
        result = merge_into(base, {"execution": {"docker_run_args": ["-it"]}})
        assert result["execution"]["docker_run_args"] == ["-it"]

    def test_base_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        merge_into(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestConfigPaths:
    """Test platform-aware path resolution."""

    def test_windows_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PROGRAMDATA", "C:\\ProgramData")

        path = get_system_config_path()
        assert path is not None
        assert "ProgramData" in str(path)
        assert "frs" in str(path)

    def test_windows_user_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("APPDATA", "C:\\Users\\Test\\AppData\\Roaming")

        path = get_user_config_path()
        assert path is not None
        assert "AppData" in str(path)

    def test_unix_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_system_config_path() == Path("/etc/frs/config.yaml")

    def test_unix_user_path_xdg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test user config path respects XDG_CONFIG_HOME."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/home/test/.config-custom")
        assert get_user_config_path() == Path("/home/test/.config-custom/frs/config.yaml")

    def test_explicit_path_is_last(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        paths = get_config_paths(Path("/tmp/extra.yaml"))
        assert len(paths) == 3
        assert "etc" in paths[0].parts
        assert paths[-1] == Path("/tmp/extra.yaml")


class TestConfigLoading:
    """Test configuration loading."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        for var in ("FRS_STORE", "FRS_STATE_DIR", "FRS_SHELL", "FRS_LOG"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setattr("frs.config.loader.get_config_paths", self._paths(tmp_path))

    @staticmethod
    def _paths(tmp_path: Path):
        # The system file is outside the test's control, so leave it out.
        def paths(explicit: Path | None = None) -> list[Path]:
            result = [tmp_path / "xdg" / "frs" / "config.yaml"]
            if explicit is not None:
                result.append(explicit)
            return result

        return paths

    @pytest.fixture
    def user_config(self, tmp_path: Path) -> Path:
        path = tmp_path / "xdg" / "frs" / "config.yaml"
        path.parent.mkdir(parents=True)
        return path

    def test_missing_file_uses_defaults(self) -> None:
        config = load_config()
        assert isinstance(config, Config)
        assert config.execution.shell == "/bin/sh"
        assert config.execution.docker == "docker"
        assert config.store.root.parts[-3:] == (".config", "frs", "context")

    def test_load_yaml_config(self, user_config: Path) -> None:
        user_config.write_text(
            """
store:
  root: /srv/contexts
execution:
  shell: /bin/bash
  docker: podman
  docker_run_args: ["--rm", "-i"]
"""
        )
        config = load_config()
        assert config.store.root == Path("/srv/contexts")
        assert config.execution.shell == "/bin/bash"
        assert config.execution.docker == "podman"
        assert config.execution.docker_run_args == ["--rm", "-i"]

    def test_explicit_file_overrides_user(self, user_config: Path, tmp_path: Path) -> None:
        user_config.write_text("execution:\n  shell: /bin/bash\n  docker: podman\n")
        explicit = tmp_path / "ci.yaml"
        explicit.write_text("execution:\n  shell: /bin/dash\n")

        config = load_config(explicit)
        assert config.execution.shell == "/bin/dash"
        assert config.execution.docker == "podman"

    def test_env_overrides_files(
        self, user_config: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        user_config.write_text("store:\n  root: /from/file\n")
        monkeypatch.setenv("FRS_STORE", str(tmp_path / "env-store"))
        monkeypatch.setenv("FRS_SHELL", "/bin/zsh")

        config = load_config()
        assert config.store.root == tmp_path / "env-store"
        assert config.execution.shell == "/bin/zsh"

    def test_frs_log_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRS_LOG", "/tmp/frs-test.log")
        assert load_config().logging.file == "/tmp/frs-test.log"

    def test_empty_env_var_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRS_SHELL", "")
        assert env_overrides() == {}

    def test_invalid_yaml_uses_defaults(
        self, user_config: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        user_config.write_text("invalid: yaml: :")
        with caplog.at_level(logging.WARNING, logger="frs.config"):
            config = load_config()
        assert config.execution.shell == "/bin/sh"
        assert "Invalid YAML" in caplog.text

    def test_extra_fields_preserved(self, user_config: Path) -> None:
        """Test that unknown config sections are preserved in extra."""
        user_config.write_text("prompt:\n  style: minimal\n")
        config = load_config()
        assert config.extra == {"prompt": {"style": "minimal"}}


class TestLogLevel:
    def test_default_is_warning(self) -> None:
        assert resolve_level(None) == logging.WARNING
        assert resolve_level(LoggingConfig()) == logging.WARNING

    def test_level_name(self) -> None:
        assert resolve_level(LoggingConfig(level="debug")) == logging.DEBUG
        assert resolve_level(LoggingConfig(level="verbose")) == VERBOSE

    def test_verbosity_wins(self) -> None:
        assert resolve_level(LoggingConfig(level="error", verbose=2)) == logging.INFO
        assert resolve_level(LoggingConfig(verbose=9)) == TRACE
