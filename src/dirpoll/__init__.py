"""dirpoll: directory change detection by snapshot polling."""

__version__ = "0.1.0"

# Public API
from dirpoll.config import Config, LoggingConfig, PollerConfig, get_config, load_config
from dirpoll.watching import (
    ChangeEvent,
    ChangeKind,
    DirectoryPoller,
    EntryKind,
    InvalidRoot,
    PollerError,
    WatchSpec,
)

__all__ = [
    # Main entry point
    "DirectoryPoller",
    # Values
    "ChangeEvent",
    "ChangeKind",
    "EntryKind",
    "WatchSpec",
    # Errors
    "InvalidRoot",
    "PollerError",
    # Config
    "Config",
    "LoggingConfig",
    "PollerConfig",
    "get_config",
    "load_config",
]
