"""Directory change detection by polling.

Each poll tick enumerates the watch root into a fresh snapshot, diffs it
against the previous one and swaps it in. Polling is preferred over native
watchers for cross-platform reliability and because it needs no extra
dependencies.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from dirpoll.logging import VERBOSE, get_logger
from dirpoll.watching.errors import RootVanished
from dirpoll.watching.snapshot import diff_snapshots, take_snapshot
from dirpoll.watching.types import ChangeEvent, Snapshot, WatchSpec

if TYPE_CHECKING:
    from dirpoll.config.schema import PollerConfig

log = get_logger("poller")

ChangeCallback = Callable[[ChangeEvent], None]


class DirectoryPoller:
    """Watches one directory tree for changes using snapshot diffs.

    ``poll()`` is a single synchronous step and can be driven from any loop.
    ``run()`` is the blocking loop for a dedicated thread and ``arun()`` the
    same loop as a coroutine.

    Example:
        poller = DirectoryPoller.create("/data/inbox", recursive=False, interval=2.0)

        def on_change(event: ChangeEvent) -> None:
            print(event)

        threading.Thread(target=poller.run, args=(on_change,), daemon=True).start()
        ...
        poller.stop()

    Raises:
        InvalidRoot: From the constructor, when the root is missing or not
            a directory.
    """

    def __init__(self, spec: WatchSpec) -> None:
        self._spec = spec.validate()

        # Serializes enumerate-diff-swap across threads
        self._lock = threading.Lock()

        # Guards the running flag, the active token and the asyncio task
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._cancel: threading.Event | None = None
        self._running = False
        self._root_missing = False

        self._task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

        self._snapshot: Snapshot = MappingProxyType(self._enumerate())
        log.debug("Baseline for %s: %d entries", self._spec.root, len(self._snapshot))

    @classmethod
    def create(
        cls,
        root: str | Path,
        recursive: bool = True,
        interval: float = 1.0,
        *,
        track_directories: bool = False,
        track_symlinks: bool = False,
    ) -> DirectoryPoller:
        """Build a poller for *root* and take its baseline snapshot."""
        return cls(
            WatchSpec(
                root=Path(root),
                recursive=recursive,
                interval=interval,
                track_directories=track_directories,
                track_symlinks=track_symlinks,
            )
        )

    @classmethod
    def from_config(cls, root: str | Path, config: PollerConfig) -> DirectoryPoller:
        """Build a poller for *root* using configured defaults."""
        return cls.create(
            root,
            recursive=config.recursive,
            interval=config.interval,
            track_directories=config.track_directories,
            track_symlinks=config.track_symlinks,
        )

    @property
    def spec(self) -> WatchSpec:
        return self._spec

    @property
    def root(self) -> Path:
        return self._spec.root

    @property
    def interval(self) -> float:
        return self._spec.interval

    @property
    def snapshot(self) -> Snapshot:
        """The current snapshot, as a read-only view that is never mutated."""
        return self._snapshot

    def is_running(self) -> bool:
        """Check if ``run()`` or ``arun()`` is currently looping."""
        return self._running

    def resolve(self, event: ChangeEvent) -> Path:
        """Absolute path of the entry *event* refers to."""
        return self._spec.root.joinpath(*event.path.split("/"))

    def _enumerate(self) -> dict[str, int]:
        try:
            entries = take_snapshot(self._spec)
        except RootVanished as e:
            if not self._root_missing:
                log.warning("%s", e)
                self._root_missing = True
            return {}

        if self._root_missing:
            log.info("Watch root is back: %s", self._spec.root)
            self._root_missing = False
        return entries

    def poll(self) -> list[ChangeEvent]:
        """Run one poll tick and return the detected changes.

        Never raises for filesystem trouble: a vanished root reads as an
        empty directory and unreadable entries read as absent.
        """
        with self._lock:
            current = self._enumerate()
            events = diff_snapshots(self._snapshot, current)
            self._snapshot = MappingProxyType(current)

        if events:
            log.log(VERBOSE, "%d change(s) under %s", len(events), self._spec.root)
        return events

    def _dispatch(self, callback: ChangeCallback, events: list[ChangeEvent]) -> None:
        for event in events:
            try:
                callback(event)
            except Exception as e:
                log.error("Error in change callback for %s: %s", event.path, e)

    def run(self, callback: ChangeCallback, cancel: threading.Event | None = None) -> None:
        """Poll in a loop, invoking *callback* once per change.

        Blocks until :meth:`stop` is called or *cancel* is set. Cancellation
        is observed while waiting between ticks, never mid-poll. The interval
        spaces poll starts; a slow poll is followed immediately by the next.

        Args:
            callback: Called with each ChangeEvent, in poll order.
            cancel: Optional external cancellation token.
        """
        token = cancel if cancel is not None else self._stop_event
        with self._state_lock:
            if self._running:
                log.warning("DirectoryPoller already running for %s", self._spec.root)
                return
            self._running = True
            self._cancel = token
            # A stop() that arrived before this run still applies
            if self._stop_event.is_set():
                token.set()

        log.info(
            "Polling %s (interval: %.1fs, recursive: %s)",
            self._spec.root,
            self._spec.interval,
            self._spec.recursive,
        )

        try:
            next_start = time.monotonic() + self._spec.interval
            while not token.wait(max(0.0, next_start - time.monotonic())):
                next_start = time.monotonic() + self._spec.interval
                self._dispatch(callback, self.poll())
        finally:
            with self._state_lock:
                self._running = False
                self._cancel = None
                self._stop_event.clear()
            log.info("Stopped polling %s", self._spec.root)

    async def arun(self, callback: ChangeCallback) -> None:
        """Coroutine form of :meth:`run` for callers on an event loop.

        Ends on :meth:`stop` or when the task is cancelled.
        """
        loop = asyncio.get_running_loop()
        with self._state_lock:
            if self._running:
                log.warning("DirectoryPoller already running for %s", self._spec.root)
                return
            self._running = True
            self._loop = loop
            self._task = asyncio.current_task()

        log.info("Polling %s (interval: %.1fs)", self._spec.root, self._spec.interval)

        try:
            next_start = loop.time() + self._spec.interval
            while not self._stop_event.is_set():
                await asyncio.sleep(max(0.0, next_start - loop.time()))
                if self._stop_event.is_set():
                    break
                next_start = loop.time() + self._spec.interval
                self._dispatch(callback, self.poll())
        except asyncio.CancelledError:
            log.info("DirectoryPoller cancelled")
        finally:
            with self._state_lock:
                self._running = False
                self._task = None
                self._loop = None
                self._stop_event.clear()

    def stop(self) -> None:
        """Stop the loop at its next wait.

        Safe to call from any thread. A stop requested before ``run()`` or
        ``arun()`` starts makes that loop return without polling.
        """
        with self._state_lock:
            self._stop_event.set()
            cancel, task, loop = self._cancel, self._task, self._loop

        if cancel is not None:
            cancel.set()
        if task is not None and loop is not None and not task.done():
            loop.call_soon_threadsafe(task.cancel)
        log.debug("Stop requested for %s", self._spec.root)
