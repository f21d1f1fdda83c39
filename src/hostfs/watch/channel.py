#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Bounded hand-off from the notifier thread to the watch loop.

The channel holds at most one item. ``send_blocking`` is called from the
notifier's thread and does not return until the item is in the queue, which
means until the loop has taken the previous one. A slow loop therefore
stalls the notifier instead of letting events pile up in memory, and events
keep their order.

``receive`` and ``close`` must be called on the event loop thread."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Final

from provide.foundation.logger import get_logger

from hostfs.watch.defaults import CHANNEL_CAPACITY
from hostfs.watch.errors import WatchError
from hostfs.watch.events import RawEvent

log = get_logger(__name__)

_CLOSED: Final = object()


class EventChannel:
    """Capacity-limited channel carrying RawEvents or a fatal WatchError."""

    def __init__(self, loop: asyncio.AbstractEventLoop, capacity: int = CHANNEL_CAPACITY) -> None:
        self._loop = loop
        self._capacity = capacity
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._lock = threading.Lock()
        self._in_flight: set[concurrent.futures.Future[None]] = set()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def send_blocking(self, event: RawEvent) -> bool:
        """Hand ``event`` to the loop, blocking the calling thread until it is queued.

        Returns False if the channel is (or becomes) closed before the event
        could be queued."""
        return self._send(event)

    def send_error(self, error: WatchError) -> bool:
        """Deliver a fatal notifier error to the loop, blocking like ``send_blocking``."""
        return self._send(error)

    def _send(self, item: object) -> bool:
        with self._lock:
            if self._closed:
                return False
            try:
                future = asyncio.run_coroutine_threadsafe(self._queue.put(item), self._loop)
            except RuntimeError:
                # Event loop already closed
                return False
            self._in_flight.add(future)

        try:
            future.result()
        except concurrent.futures.CancelledError:
            return False
        finally:
            with self._lock:
                self._in_flight.discard(future)
        return True

    async def receive(self) -> RawEvent | None:
        """Wait for the next event.

        Returns None once the channel is closed. Raises WatchError if the
        notifier reported a failure."""
        if self._closed:
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        if isinstance(item, WatchError):
            raise item
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the channel, releasing any blocked sender and waking the receiver.

        Events still waiting in the channel are discarded."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = list(self._in_flight)

        for future in pending:
            future.cancel()

        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            dropped += 1
        if dropped:
            log.debug("Discarded undelivered events on close", count=dropped)
        self._queue.put_nowait(_CLOSED)


# 🔼⚙️🔚
