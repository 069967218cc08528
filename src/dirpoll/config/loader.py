"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Conversion from merged dict to typed Config dataclass
- Caching of the global (non-project) config
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from dirpoll.config.merge import merge_layers
from dirpoll.config.paths import get_config_paths
from dirpoll.config.schema import DEFAULT_INTERVAL, Config, LoggingConfig, PollerConfig

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("dirpoll.config")

_cached_config: Config | None = None

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
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

    if not isinstance(data, dict):
        if data is not None:
            _log.warning("Ignoring %s: top level must be a mapping", path)
        return {}
    return data


def env_overrides() -> dict[str, Any]:
    """Build a config layer from DIRPOLL_* environment variables."""
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("DIRPOLL_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    interval = os.environ.get("DIRPOLL_INTERVAL")
    if interval:
        overrides.setdefault("poller", {})["interval"] = interval

    recursive = os.environ.get("DIRPOLL_RECURSIVE")
    if recursive:
        overrides.setdefault("poller", {})["recursive"] = recursive

    return overrides


def _as_interval(value: Any) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError):
        _log.warning("Invalid poller.interval %r, using %.1f", value, DEFAULT_INTERVAL)
        return DEFAULT_INTERVAL
    if interval <= 0:
        _log.warning("poller.interval must be positive, got %r", value)
        return DEFAULT_INTERVAL
    return interval


def _as_bool(value: Any, key: str, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    _log.warning("Invalid boolean for %s: %r", key, value)
    return default


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        _log.warning("Ignoring config section %r: expected a mapping", name)
        return {}
    return section


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass."""
    defaults = PollerConfig()
    poller_data = _section(data, "poller")
    poller = PollerConfig(
        interval=_as_interval(poller_data.get("interval", defaults.interval)),
        recursive=_as_bool(
            poller_data.get("recursive", defaults.recursive), "poller.recursive", defaults.recursive
        ),
        track_directories=_as_bool(
            poller_data.get("track_directories", defaults.track_directories),
            "poller.track_directories",
            defaults.track_directories,
        ),
        track_symlinks=_as_bool(
            poller_data.get("track_symlinks", defaults.track_symlinks),
            "poller.track_symlinks",
            defaults.track_symlinks,
        ),
    )

    log_data = _section(data, "logging")
    verbose = log_data.get("verbose")
    if verbose is not None and not isinstance(verbose, int):
        _log.warning("Invalid logging.verbose %r", verbose)
        verbose = None
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=verbose,
        file=log_data.get("file"),
    )

    known_keys = {"poller", "logging"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(poller=poller, logging=logging_config, extra=extra)


def load_config(
    project_root: str | Path | None = None,
    config_file: str | Path | None = None,
    reload: bool = False,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables (DIRPOLL_*)
    2. Explicit config file (``--config``)
    3. Project config (<project_root>/.dirpoll/config.yaml)
    4. User config
    5. System config

    Args:
        project_root: Directory for project-level config.
        config_file: Extra config file layered above the project config.
        reload: Force reload even if cached.

    Returns:
        Merged Config object.
    """
    global _cached_config

    is_global = project_root is None and config_file is None
    if _cached_config is not None and not reload and is_global:
        return _cached_config

    layers: list[dict[str, Any]] = []

    paths = get_config_paths(project_root)
    if config_file is not None:
        paths.append(Path(config_file).expanduser())

    for path in paths:
        data = load_yaml_file(path)
        if data:
            _log.debug("Loaded config from %s", path)
            layers.append(data)

    layers.append(env_overrides())

    config = dict_to_config(merge_layers(*layers))

    if is_global:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config (used by tests)."""
    global _cached_config
    _cached_config = None
