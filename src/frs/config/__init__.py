"""Configuration management for frs.

Layered YAML configuration:
- System-level config (/etc/frs/ or %PROGRAMDATA%)
- User-level config (~/.config/frs/ or %APPDATA%)
- An explicit file passed with --config
- FRS_* environment variable overrides (highest priority)

Example usage:
    from frs.config import load_config

    config = load_config()
    print(config.store.root)
    print(config.execution.shell)
"""

from frs.config.loader import load_config
from frs.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
)
from frs.config.schema import (
    Config,
    ExecutionConfig,
    LoggingConfig,
    SessionConfig,
    StoreConfig,
)

__all__ = [
    "Config",
    "load_config",
    "ExecutionConfig",
    "LoggingConfig",
    "SessionConfig",
    "StoreConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
]
