"""Directory enumeration and snapshot comparison.

A snapshot maps each tracked entry's root-relative posix path to its
``st_mtime_ns``. Directories are listed in name order and walked depth-first,
so the insertion order of a snapshot is stable for an unchanged tree.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from dirpoll.logging import TRACE, get_logger
from dirpoll.watching.errors import EnumerationError, RootVanished
from dirpoll.watching.types import ChangeEvent, ChangeKind, EntryKind, Snapshot, WatchSpec

log = get_logger("snapshot")


def classify_entry(entry: os.DirEntry[str]) -> EntryKind:
    """Classify *entry* without following symlinks.

    Raises:
        EnumerationError: If the entry vanished or cannot be inspected.
    """
    try:
        if entry.is_symlink():
            return EntryKind.SYMLINK
        if entry.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
        if entry.is_file(follow_symlinks=False):
            return EntryKind.FILE
    except OSError as e:
        raise EnumerationError(Path(entry.path), e) from e
    return EntryKind.OTHER


def entry_mtime(entry: os.DirEntry[str]) -> int:
    """Return the modification time of *entry* in nanoseconds.

    Symlinks report their own timestamp, not their target's.

    Raises:
        EnumerationError: If the entry cannot be stat'ed.
    """
    try:
        return entry.stat(follow_symlinks=False).st_mtime_ns
    except OSError as e:
        raise EnumerationError(Path(entry.path), e) from e


def _list_dir(path: str | Path) -> list[os.DirEntry[str]]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def take_snapshot(spec: WatchSpec) -> dict[str, int]:
    """Enumerate the tracked entries under ``spec.root``.

    Entries that fail to classify or stat are left out, and a subdirectory
    that cannot be listed contributes nothing.

    Raises:
        RootVanished: If the root itself cannot be listed.
    """
    try:
        top = _list_dir(spec.root)
    except OSError as e:
        raise RootVanished(spec.root, e) from e

    entries: dict[str, int] = {}
    stack: list[tuple[str, Iterator[os.DirEntry[str]]]] = [("", iter(top))]

    while stack:
        prefix, pending = stack[-1]
        entry = next(pending, None)
        if entry is None:
            stack.pop()
            continue

        rel = prefix + entry.name
        try:
            kind = classify_entry(entry)
            if spec.tracks(kind):
                entries[rel] = entry_mtime(entry)
        except EnumerationError as e:
            log.log(TRACE, "Skipping entry: %s", e)
            continue

        if kind is EntryKind.DIRECTORY and spec.recursive:
            try:
                children = _list_dir(entry.path)
            except OSError as e:
                log.debug("Skipping unreadable directory %s: %s", entry.path, e)
                continue
            stack.append((rel + "/", iter(children)))

    return entries


def diff_snapshots(old: Snapshot, new: Snapshot) -> list[ChangeEvent]:
    """Classify the differences between two snapshots.

    Created and Modified events come first, in *new*'s iteration order,
    followed by Deleted events in *old*'s iteration order.
    """
    events: list[ChangeEvent] = []

    for path, mtime in new.items():
        previous = old.get(path)
        if previous is None:
            events.append(ChangeEvent(ChangeKind.CREATED, path))
        elif previous != mtime:
            events.append(ChangeEvent(ChangeKind.MODIFIED, path))

    for path in old:
        if path not in new:
            events.append(ChangeEvent(ChangeKind.DELETED, path))

    return events
