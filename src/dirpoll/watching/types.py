"""Value types shared by the snapshot walker and the poller."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dirpoll.watching.errors import InvalidRoot

# Relative posix path -> st_mtime_ns
Snapshot = Mapping[str, int]


class ChangeKind(Enum):
    """Classification of a detected change."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


class EntryKind(Enum):
    """What a directory entry turned out to be when it was enumerated."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"  # fifo, socket, device


@dataclass(frozen=True)
class ChangeEvent:
    """A single change between two snapshots.

    ``path`` is relative to the watch root and always uses ``/``.
    """

    kind: ChangeKind
    path: str

    def __str__(self) -> str:
        return f"{self.kind.value} {self.path}"

    def to_dict(self) -> dict[str, str]:
        """Serialize for structured output."""
        return {"kind": self.kind.value, "path": self.path}


@dataclass(frozen=True)
class WatchSpec:
    """Immutable description of what one poller watches.

    Directories are always descended when ``recursive`` is set; the
    ``track_*`` flags only decide whether they also appear as snapshot
    entries. Symlinked directories are never descended.
    """

    root: Path
    recursive: bool = True
    interval: float = 1.0
    track_directories: bool = False
    track_symlinks: bool = False

    def tracks(self, kind: EntryKind) -> bool:
        """Whether entries of *kind* belong in a snapshot."""
        if kind is EntryKind.FILE:
            return True
        if kind is EntryKind.DIRECTORY:
            return self.track_directories
        if kind is EntryKind.SYMLINK:
            return self.track_symlinks
        return False

    def validate(self) -> WatchSpec:
        """Check the root and interval, returning a spec with an absolute root.

        Raises:
            InvalidRoot: If the root is missing or not a directory.
            ValueError: If the interval is not positive.
        """
        root = Path(self.root).expanduser()
        if not root.exists():
            raise InvalidRoot(root, "Directory does not exist")
        if not root.is_dir():
            raise InvalidRoot(root, "Not a directory")
        if not self.interval > 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval!r}")
        return WatchSpec(
            root=root.resolve(),
            recursive=self.recursive,
            interval=float(self.interval),
            track_directories=self.track_directories,
            track_symlinks=self.track_symlinks,
        )
