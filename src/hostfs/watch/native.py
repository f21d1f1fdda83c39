#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Platform change notification for watch sessions, using watchdog.

The native observer (inotify, FSEvents, kqueue, ReadDirectoryChangesW) is
used when it can be started; otherwise, or when polling is requested, the
``PollingObserver`` scans the tree every ``interval`` seconds. watchdog
delivers events on its own dispatcher thread, where they are converted to
RawEvents and pushed into the session's EventChannel."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
import threading

from provide.foundation.logger import get_logger
from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from hostfs import fs
from hostfs.watch.channel import EventChannel
from hostfs.watch.defaults import OBSERVER_JOIN_TIMEOUT, SUPERVISOR_CHECK_SECONDS
from hostfs.watch.errors import RegistrationError, WatchError
from hostfs.watch.events import RawEvent, RawEventKind
from hostfs.watch.options import WatchOptions

log = get_logger(__name__)

WATCHDOG_EVENT_KINDS: dict[str, RawEventKind] = {
    EVENT_TYPE_CREATED: RawEventKind.CREATED,
    EVENT_TYPE_DELETED: RawEventKind.REMOVED,
    EVENT_TYPE_MODIFIED: RawEventKind.MODIFIED,
    # Renames count as modifications of both the old and the new path
    EVENT_TYPE_MOVED: RawEventKind.MODIFIED,
    EVENT_TYPE_CLOSED_NO_WRITE: RawEventKind.ACCESS_READ,
}

# Child events that emitters follow with a DirModifiedEvent for the parent
PARENT_TOUCHING_EVENT_TYPES = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED, EVENT_TYPE_CLOSED}
)


def raw_event_from_watchdog(event: FileSystemEvent) -> RawEvent:
    """Convert a watchdog event into a RawEvent."""
    kind = WATCHDOG_EVENT_KINDS.get(event.event_type, RawEventKind.OTHER)
    paths = [Path(os.fsdecode(event.src_path))]
    if event.event_type == EVENT_TYPE_MOVED and event.dest_path:
        paths.append(Path(os.fsdecode(event.dest_path)))
    return RawEvent(kind=kind, paths=paths, is_directory=event.is_directory)


class _ChannelEventHandler(FileSystemEventHandler):
    """Forwards watchdog events into the channel, blocking while it is full.

    Emitters follow a create, delete, move or close-after-write of a child
    with a DirModifiedEvent for its parent directory. Those parent echoes are
    dropped; a directory modification with no pending child event still
    passes through."""

    def __init__(self, channel: EventChannel) -> None:
        super().__init__()
        self._channel = channel
        self._touched_parents: set[str] = set()

    def is_parent_echo(self, event: FileSystemEvent) -> bool:
        """Record parents touched by ``event``, or report that it is such a parent's echo."""
        if event.event_type in PARENT_TOUCHING_EVENT_TYPES:
            self._touched_parents.add(os.path.dirname(os.fsdecode(event.src_path)))
            if event.event_type == EVENT_TYPE_MOVED and event.dest_path:
                self._touched_parents.add(os.path.dirname(os.fsdecode(event.dest_path)))
            return False

        if event.event_type == EVENT_TYPE_MODIFIED and event.is_directory:
            path = os.fsdecode(event.src_path)
            if path in self._touched_parents:
                self._touched_parents.discard(path)
                return True
        return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if self.is_parent_echo(event):
            return
        raw = raw_event_from_watchdog(event)
        if not self._channel.send_blocking(raw):
            log.debug("Channel closed, dropping event", kind=raw.kind.name, paths=[str(p) for p in raw.paths])


class NativeWatcher:
    """Owns one watchdog observer and feeds its events into an EventChannel.

    Usage:
        watcher = NativeWatcher(options, channel)
        await asyncio.to_thread(watcher.start, root, recursive=True)
        ...
        await watcher.stop()

    While running, a supervisor thread checks that the observer and its
    emitters are alive. If one of them dies (an emitter stops on its own when
    the watched root is removed), a WatchError is sent through the channel.

    ``start`` blocks while the observer registers the tree (the polling
    observer takes its first snapshot, inotify adds one watch per directory),
    so hosts run it off the event loop. A ``stop`` that arrives meanwhile wins:
    ``start`` then shuts the fresh observer down itself."""

    def __init__(self, options: WatchOptions, channel: EventChannel) -> None:
        self._options = options
        self._channel = channel
        self._observer: BaseObserver | None = None
        self._supervisor: threading.Thread | None = None
        self._stopping = threading.Event()
        self._lock = threading.Lock()
        self._started = False
        self._polling = False

    @property
    def is_running(self) -> bool:
        return self._observer is not None and not self._stopping.is_set()

    @property
    def polling(self) -> bool:
        """True if events come from the polling observer."""
        return self._polling

    def _polling_observer(self) -> BaseObserver:
        return PollingObserver(timeout=self._options.poll_interval)

    def _schedule_and_start(self, observer: BaseObserver, root: Path, recursive: bool) -> None:
        observer.schedule(_ChannelEventHandler(self._channel), str(root), recursive=recursive)
        observer.start()

    def start(self, root: str | Path, recursive: bool = False) -> None:
        """Register a watch on ``root`` and start producing events.

        Raises RegistrationError if ``root`` is missing or inaccessible."""
        with self._lock:
            if self._started:
                raise RuntimeError("NativeWatcher has already been started")
            self._started = True

        root = Path(root)
        try:
            if not fs.exists(root):
                raise RegistrationError(root, "no such file or directory")
        except OSError as e:
            raise RegistrationError(root, e.strerror or str(e)) from e
        if not os.access(root, os.R_OK):
            raise RegistrationError(root, "permission denied")

        if self._options.poll:
            observer = self._polling_observer()
            self._polling = True
        else:
            observer = Observer()

        try:
            self._schedule_and_start(observer, root, recursive)
        except OSError as e:
            observer.unschedule_all()
            if self._polling or not fs.exists(root):
                raise RegistrationError(root, e.strerror or str(e)) from e
            log.warning(
                "Native file watching unavailable, falling back to polling",
                root=str(root),
                interval=self._options.poll_interval,
                error=str(e),
            )
            observer = self._polling_observer()
            self._polling = True
            try:
                self._schedule_and_start(observer, root, recursive)
            except OSError as e2:
                observer.unschedule_all()
                raise RegistrationError(root, e2.strerror or str(e2)) from e2

        with self._lock:
            stopped_meanwhile = self._stopping.is_set()
            if not stopped_meanwhile:
                self._observer = observer
                self._supervisor = threading.Thread(
                    target=self._supervise, args=(observer,), name="hostfs-watch-supervisor", daemon=True
                )
                self._supervisor.start()

        if stopped_meanwhile:
            log.debug("Watcher stopped while starting", root=str(root))
            self._shutdown_observer(observer)
            return

        log.debug(
            "Watcher started",
            root=str(root),
            recursive=recursive,
            observer=type(observer).__name__,
        )

    def _supervise(self, observer: BaseObserver) -> None:
        while not self._stopping.wait(SUPERVISOR_CHECK_SECONDS):
            if not observer.is_alive():
                reason = "observer thread stopped unexpectedly"
            elif not all(emitter.is_alive() for emitter in observer.emitters):
                reason = "event emitter stopped (the watched path may have been removed)"
            else:
                continue

            if self._stopping.is_set():
                return
            log.error("File watcher failed", reason=reason)
            self._channel.send_error(WatchError(f"File watcher failed: {reason}"))
            return

    def _shutdown_observer(self, observer: BaseObserver) -> None:
        # The supervisor reads the emitter set, so it has to be gone before unscheduling
        if self._supervisor is not None:
            self._supervisor.join(OBSERVER_JOIN_TIMEOUT)
        observer.unschedule_all()
        observer.stop()
        observer.join(OBSERVER_JOIN_TIMEOUT)
        if observer.is_alive():
            log.warning("Observer thread did not stop in time", timeout=OBSERVER_JOIN_TIMEOUT)

    async def stop(self) -> None:
        """Unregister the watch, stop the observer and close the channel.

        Must be awaited on the loop that owns the channel. Safe to call more
        than once, and on a watcher that never started."""
        with self._lock:
            self._stopping.set()
            observer, self._observer = self._observer, None
        # Closing first releases a dispatcher thread blocked on a full channel
        self._channel.close()

        if observer is None:
            return
        await asyncio.to_thread(self._shutdown_observer, observer)
        log.debug("Watcher stopped")


# 🔼⚙️🔚
