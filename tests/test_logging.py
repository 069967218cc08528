"""Tests for logging configuration and the module entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

import dirpoll.logging as logging_module
from dirpoll.config.schema import LoggingConfig
from dirpoll.logging import TRACE, VERBOSE, get_logger, resolve_level, setup_logging


@pytest.fixture
def temp_log_file(tmp_path: Path) -> str:
    """A log file path inside the test directory."""
    return str(tmp_path / "dirpoll.log")


class TestLogging:
    """Tests for logging configuration."""

    def test_setup_logging_creates_file_handler(self, temp_log_file: str) -> None:
        """A configured file gets a handler at the configured level."""
        setup_logging(LoggingConfig(level="INFO", file=temp_log_file))

        assert Path(temp_log_file).exists()
        assert get_logger().level == logging.INFO

    def test_setup_logging_bad_file_does_not_raise(self) -> None:
        """An unopenable log file is not fatal."""
        setup_logging(LoggingConfig(level="DEBUG", file="/nonexistent/dir/log.txt"))

        assert logging_module._initialized is True

    def test_setup_logging_idempotent(self, temp_log_file: str) -> None:
        """Only the first call installs handlers."""
        setup_logging(LoggingConfig(file=temp_log_file))
        handlers = list(get_logger().handlers)

        setup_logging(LoggingConfig(file=temp_log_file))

        assert get_logger().handlers == handlers

    def test_env_log_file(self, temp_log_file: str, monkeypatch: pytest.MonkeyPatch) -> None:
        """DIRPOLL_LOG is used when no config is given."""
        monkeypatch.setenv("DIRPOLL_LOG", temp_log_file)

        setup_logging()

        assert Path(temp_log_file).exists()

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("trace", TRACE),
            ("DEBUG", logging.DEBUG),
            ("verbose", VERBOSE),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("bogus", logging.INFO),
        ],
    )
    def test_level_names(self, level: str, expected: int) -> None:
        """Level names map to logging constants, case-insensitively."""
        assert resolve_level(LoggingConfig(level=level)) == expected

    @pytest.mark.parametrize(
        ("verbose", "expected"),
        [(0, logging.ERROR), (1, logging.WARNING), (2, logging.INFO), (3, VERBOSE), (4, TRACE), (9, TRACE)],
    )
    def test_verbosity_overrides_level(self, verbose: int, expected: int) -> None:
        """verbose wins over level."""
        assert resolve_level(LoggingConfig(level="ERROR", verbose=verbose)) == expected

    def test_default_level(self) -> None:
        """No config means INFO."""
        assert resolve_level(None) == logging.INFO

    def test_log_format(self, temp_log_file: str) -> None:
        """Records are written with lowercase level names."""
        setup_logging(LoggingConfig(level="INFO", file=temp_log_file))

        get_logger("poller").warning("Test message")

        content = Path(temp_log_file).read_text()
        assert "warning: Test message" in content

    def test_get_logger_child(self) -> None:
        """Child loggers hang off the dirpoll logger."""
        assert get_logger("cli").name == "dirpoll.cli"
        assert get_logger().name == "dirpoll"

    def test_reset_logging_removes_handlers(self, temp_log_file: str) -> None:
        """reset_logging allows a fresh setup."""
        setup_logging(LoggingConfig(file=temp_log_file))
        logging_module.reset_logging()

        assert get_logger().handlers == []
        assert logging_module._initialized is False


class TestMainEntryPoint:
    """Tests for the __main__ entry point."""

    def test_main_passes_argv(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """main() forwards sys.argv to run_cli and returns its status."""
        from dirpoll import __main__ as entry

        calls: list[list[str]] = []

        def fake_run_cli(args: list[str]) -> int:
            calls.append(list(args))
            return 7

        monkeypatch.setattr("dirpoll.cli.run_cli", fake_run_cli)
        monkeypatch.setattr("sys.argv", ["dirpoll", "/some/dir", "-v"])

        assert entry.main() == 7
        assert calls == [["/some/dir", "-v"]]
