"""Directory watching for dirpoll.

Polling-based change detection: snapshots of a directory tree are taken
at a fixed interval and compared to classify entries as created, modified
or deleted.
"""

from dirpoll.watching.errors import EnumerationError, InvalidRoot, PollerError, RootVanished
from dirpoll.watching.poller import ChangeCallback, DirectoryPoller
from dirpoll.watching.snapshot import diff_snapshots, take_snapshot
from dirpoll.watching.types import ChangeEvent, ChangeKind, EntryKind, Snapshot, WatchSpec

__all__ = [
    "ChangeCallback",
    "ChangeEvent",
    "ChangeKind",
    "DirectoryPoller",
    "EntryKind",
    "EnumerationError",
    "InvalidRoot",
    "PollerError",
    "RootVanished",
    "Snapshot",
    "WatchSpec",
    "diff_snapshots",
    "take_snapshot",
]
