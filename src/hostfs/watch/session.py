#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Watch sessions: the loop that connects a watcher to host handlers.

A session moves through ``CREATED -> RUNNING -> CLOSED | ERRORED``:

- It enters RUNNING once the watcher has registered the root, which happens
  off the event loop. A RegistrationError at that point ends the session
  while it is still CREATED; such a session cannot be run again.
- While RUNNING, it waits on the channel, filters each event and schedules
  the matching handler. Events are processed one at a time, in order.
- A WatchError from the channel moves it to ERRORED and is re-raised.
- A closed channel (the awaiting task was cancelled, or ``close()`` was
  called) moves it to CLOSED.

There is no retry or reconnection: any notifier failure ends the session."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from enum import Enum, auto
import os
from pathlib import Path
from typing import Any, Protocol

from attrs import define, field
from provide.foundation.logger import get_logger

from hostfs.watch.channel import EventChannel
from hostfs.watch.errors import ConfigError, WatchError
from hostfs.watch.events import RawEvent
from hostfs.watch.filter import EventFilter
from hostfs.watch.native import NativeWatcher
from hostfs.watch.options import WatchOptions
from hostfs.watch.router import EventRouter, WatchHandlers
from hostfs.watch.scheduler import AsyncioScheduler, Scheduler

log = get_logger(__name__)


class SessionState(Enum):
    """Lifecycle states of a watch session."""

    CREATED = auto()
    RUNNING = auto()
    CLOSED = auto()
    ERRORED = auto()


class Watcher(Protocol):
    def start(self, root: str | Path, recursive: bool = False) -> None: ...

    async def stop(self) -> None: ...


WatcherFactory = Callable[[WatchOptions, EventChannel], Watcher]


@define
class SessionStats:
    """Counters for events seen by a session."""

    received: int = field(default=0)
    dropped: int = field(default=0)
    dispatched: int = field(default=0)


class WatchSession:
    """Runs one watch over ``root`` until it is closed or the watcher fails."""

    def __init__(
        self,
        root: str | os.PathLike[str],
        options: WatchOptions,
        handlers: WatchHandlers,
        scheduler: Scheduler,
        *,
        watcher_factory: WatcherFactory = NativeWatcher,
    ) -> None:
        self.root = Path(root)
        self.options = options
        self.handlers = handlers
        self.stats = SessionStats()
        self._filter = EventFilter(options)
        self._router = EventRouter(handlers, scheduler)
        self._watcher_factory = watcher_factory
        self._watcher: Watcher | None = None
        self._channel: EventChannel | None = None
        self._state = SessionState.CREATED
        self._log = log.bind(root=str(self.root), pattern=options.pattern)

    @property
    def state(self) -> SessionState:
        return self._state

    def close(self) -> None:
        """Ask a running session to finish normally.

        Must be called on the session's event loop. A session closed before it
        runs never starts."""
        if self._state is SessionState.CREATED and self._channel is None:
            self._state = SessionState.CLOSED
            return
        if self._channel is not None:
            self._channel.close()

    async def run(self) -> None:
        """Run the session until its channel closes.

        Raises RegistrationError if the root cannot be watched, WatchError if
        the watcher fails later on."""
        if self._state is not SessionState.CREATED:
            raise RuntimeError(f"Watch session cannot run from state {self._state.name}")
        if self._channel is not None:
            raise RuntimeError("Watch session has already been started")

        self._channel = EventChannel(asyncio.get_running_loop())
        watcher = self._watcher_factory(self.options, self._channel)
        self._watcher = watcher
        try:
            await asyncio.to_thread(watcher.start, self.root, recursive=self.options.recursive)
        except asyncio.CancelledError:
            self._state = SessionState.CLOSED
            await watcher.stop()
            raise
        except BaseException as e:
            self._log.info("Watch session failed to start", error=str(e))
            await watcher.stop()
            raise

        self._state = SessionState.RUNNING
        self._log.info("Watch session started", recursive=self.options.recursive)
        try:
            await self._loop(self._channel)
        except asyncio.CancelledError:
            self._state = SessionState.CLOSED
            self._log.info("Watch session cancelled")
            raise
        finally:
            await watcher.stop()

    async def _loop(self, channel: EventChannel) -> None:
        while True:
            try:
                event = await channel.receive()
            except WatchError as e:
                self._state = SessionState.ERRORED
                self._log.error("Watch session failed", error=str(e))
                raise

            if event is None:
                self._state = SessionState.CLOSED
                self._log.info("Watch session closed", **self._stats_fields())
                return

            self.stats.received += 1
            self._handle(event)

    def _handle(self, event: RawEvent) -> None:
        paths = self._filter.filter_paths(event)
        if not paths:
            self.stats.dropped += 1
            self._log.debug("Watch event filtered out", kind=event.kind.name)
            return

        if self._router.dispatch(event.kind, paths) is not None:
            self.stats.dispatched += 1

    def _stats_fields(self) -> dict[str, int]:
        return {
            "received": self.stats.received,
            "dropped": self.stats.dropped,
            "dispatched": self.stats.dispatched,
        }


async def watch(
    path: str | os.PathLike[str],
    options: str | Mapping[str, Any] | WatchOptions,
    handlers: Mapping[str, Any] | WatchHandlers | None = None,
    *,
    scheduler: Scheduler | None = None,
) -> None:
    """Watch ``path`` and call ``handlers`` with the paths of matching changes.

    ``options`` is a glob string or a mapping (``pattern``, ``recursive``,
    ``watchFiles``, ``watchDirectories``, ``interval``, ``poll``).
    ``handlers`` maps ``added``, ``removed``, ``changed`` and ``read`` to
    callables taking a list of path strings; each call is queued on the
    event loop and not awaited.

    Completes when the awaiting task is cancelled. Raises ConfigError for bad
    options, RegistrationError if ``path`` cannot be watched and WatchError if
    the watcher fails."""
    if not isinstance(path, (str, os.PathLike)):
        raise ConfigError(f"Watch path must be a string, got {type(path).__name__}", field="path")

    watch_options = WatchOptions.from_value(options)
    watch_handlers = WatchHandlers.from_value(handlers)
    session = WatchSession(
        path,
        watch_options,
        watch_handlers,
        scheduler if scheduler is not None else AsyncioScheduler(),
    )
    await session.run()


# 🔼⚙️🔚
