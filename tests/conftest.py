"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirpoll.config import reset_config
from dirpoll.logging import reset_logging


@pytest.fixture
def watch_root(tmp_path: Path) -> Path:
    """An empty directory to watch."""
    root = tmp_path / "watched"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep real user config and DIRPOLL_* variables out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setattr(
        "dirpoll.config.paths.get_system_config_path",
        lambda: tmp_path / "etc" / "dirpoll" / "config.yaml",
    )
    for name in ("DIRPOLL_LOG", "DIRPOLL_INTERVAL", "DIRPOLL_RECURSIVE"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
    reset_logging()
