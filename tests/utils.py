"""Shared test helpers for dirpoll tests."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from pathlib import Path

# Fixed base timestamp so modifications never depend on clock resolution
BASE_NS = 1_700_000_000_000_000_000


def write_file(path: Path, content: str = "", mtime_ns: int = BASE_NS) -> Path:
    """Write *content* to *path* and pin its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


def bump_mtime(path: Path, seconds: int = 1) -> None:
    """Move *path*'s modification time forward by *seconds*."""
    mtime = path.stat().st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(mtime, mtime))


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Spin until *predicate* holds or *timeout* seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
