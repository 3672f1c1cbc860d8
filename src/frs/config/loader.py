"""Configuration file loading.

Handles:
- YAML file parsing
- Cascading merge (system -> user -> explicit file -> environment)
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from frs.config.paths import get_config_paths
from frs.config.schema import (
    Config,
    ExecutionConfig,
    LoggingConfig,
    SessionConfig,
    StoreConfig,
)

# Logging is configured from the result of this module, so it may not be set up yet.
_log = logging.getLogger("frs.config")

_KNOWN_SECTIONS = {"store", "session", "execution", "logging"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def merge_into(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Return base updated by layer.

    Sections (dicts) merge key by key; lists and scalars are replaced;
    None in a layer leaves the lower value alone.
    """
    merged = dict(base)
    for key, value in layer.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_into(current, value)
        else:
            merged[key] = value
    return merged


def env_overrides() -> dict[str, Any]:
    """Config dict built from FRS_* environment variables (highest priority)."""
    overrides: dict[str, Any] = {}

    def put(section: str, key: str, var: str) -> None:
        value = os.environ.get(var)
        if value:
            overrides.setdefault(section, {})[key] = value

    put("store", "root", "FRS_STORE")
    put("session", "state_dir", "FRS_STATE_DIR")
    put("execution", "shell", "FRS_SHELL")
    put("logging", "file", "FRS_LOG")
    return overrides


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    store_data = data.get("store") or {}
    store = StoreConfig()
    if store_data.get("root"):
        store.root = Path(os.path.expanduser(str(store_data["root"])))

    session_data = data.get("session") or {}
    session = SessionConfig()
    if session_data.get("state_dir"):
        session.state_dir = Path(os.path.expanduser(str(session_data["state_dir"])))

    exec_data = data.get("execution") or {}
    run_args = exec_data.get("docker_run_args", [])
    execution = ExecutionConfig(
        shell=str(exec_data.get("shell", "/bin/sh")),
        docker=str(exec_data.get("docker", "docker")),
        docker_run_args=[str(a) for a in run_args] if isinstance(run_args, list) else [],
    )

    log_data = data.get("logging") or {}
    verbose = log_data.get("verbose")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        file=log_data.get("file"),
        verbose=int(verbose) if verbose is not None else None,
    )

    extra = {k: v for k, v in data.items() if k not in _KNOWN_SECTIONS}

    return Config(
        store=store,
        session=session,
        execution=execution,
        logging=logging_config,
        extra=extra,
    )


def load_config(config_path: Path | None = None) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. FRS_* environment variables
    2. The explicit config file (--config)
    3. User config (~/.config/frs/config.yaml or %APPDATA%)
    4. System config (/etc/frs/ or %PROGRAMDATA%)
    """
    merged: dict[str, Any] = {}
    for path in get_config_paths(config_path):
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Loaded config from %s", path)
            merged = merge_into(merged, layer)

    merged = merge_into(merged, env_overrides())
    return dict_to_config(merged)
