"""Configuration schema dataclasses for dirpoll.

All fields have defaults so partial configs from any layer merge cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_INTERVAL = 1.0


@dataclass
class PollerConfig:
    """Defaults for every watched root.

    Example config.yaml:
        poller:
          interval: 0.5
          recursive: false
          track_directories: true
    """

    interval: float = DEFAULT_INTERVAL  # Seconds between poll starts
    recursive: bool = True  # Walk into subdirectories
    track_directories: bool = False  # Report directories as entries
    track_symlinks: bool = False  # Report symlinks as entries (never followed)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # TRACE, DEBUG, VERBOSE, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    poller: PollerConfig = field(default_factory=PollerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)
