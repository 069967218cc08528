"""The ``dirpoll`` logger and its handlers.

Stdout carries change lines, so diagnostics go to a log file when one is
configured (``logging.file`` or ``DIRPOLL_LOG``) and to stderr only on a
terminal. ``--verbose`` counts map onto ERROR through TRACE.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dirpoll.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("dirpoll")

_initialized = False

_LEVEL_NAMES = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective log level for *config*.

    ``verbose`` wins over ``level``; unknown names fall back to INFO.
    """
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        index = min(max(config.verbose, 0), len(_VERBOSITY_LEVELS) - 1)
        return _VERBOSITY_LEVELS[index]
    if config.level:
        return _LEVEL_NAMES.get(config.level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Attach handlers to the ``dirpoll`` logger.

    Only the first call has an effect until :func:`reset_logging`. A log
    file that cannot be opened is reported on a terminal and otherwise
    ignored.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = resolve_level(config)
    logger.setLevel(level)

    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get("DIRPOLL_LOG")
    if not log_path:
        # Piped output gets no log lines
        if sys.stderr.isatty():
            _add_stderr_handler(formatter, level)
        return

    try:
        handler: logging.Handler = logging.FileHandler(
            os.path.expanduser(log_path), mode="a", encoding="utf-8"
        )
    except OSError as e:
        if sys.stderr.isatty():
            print(f"[dirpoll] Failed to open log file: {e}", file=sys.stderr)
            _add_stderr_handler(formatter, level)
        return

    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def reset_logging() -> None:
    """Drop installed handlers so :func:`setup_logging` can run again."""
    global _initialized
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _initialized = False


def _add_stderr_handler(formatter: logging.Formatter, level: int) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the ``dirpoll`` logger, e.g. ``get_logger("poller")``."""
    return logger.getChild(name) if name else logger
