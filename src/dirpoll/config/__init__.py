"""Configuration management for dirpoll.

Hierarchical YAML configuration with:
- System-level config (/etc/dirpoll/ or %PROGRAMDATA%)
- User-level config (~/.config/dirpoll/, ~/.dirpoll/ or %APPDATA%)
- Project-level config (<project_root>/.dirpoll/)
- An explicit ``--config`` file
- Environment variable overrides (highest priority)

Example usage:
    from dirpoll.config import load_config

    config = load_config(project_root=".")
    print(config.poller.interval)
"""

from dirpoll.config.loader import (
    dict_to_config,
    get_config,
    load_config,
    load_yaml_file,
    reset_config,
)
from dirpoll.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from dirpoll.config.schema import Config, LoggingConfig, PollerConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "PollerConfig",
    "dict_to_config",
    "get_config",
    "load_config",
    "load_yaml_file",
    "reset_config",
    "get_config_paths",
    "get_project_config_path",
    "get_system_config_path",
    "get_user_config_path",
]
