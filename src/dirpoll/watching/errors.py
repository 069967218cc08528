"""Error taxonomy for directory polling.

Only :class:`InvalidRoot` ever reaches callers. The other two are raised
inside enumeration and absorbed by the poller.
"""

from __future__ import annotations

from pathlib import Path


class PollerError(Exception):
    """Base class for directory polling errors."""


class InvalidRoot(PollerError):
    """Raised at construction when the watch root is unusable.

    Raised when:
    - the root path does not exist
    - the root path is not a directory
    """

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"{reason}: {root}")
        self.root = root
        self.reason = reason


class EnumerationError(PollerError):
    """A single entry could not be inspected during a walk."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Cannot inspect {path}: {cause}")
        self.path = path
        self.cause = cause


class RootVanished(PollerError):
    """The watch root could not be listed at all."""

    def __init__(self, root: Path, cause: OSError) -> None:
        super().__init__(f"Watch root unavailable {root}: {cause}")
        self.root = root
        self.cause = cause
