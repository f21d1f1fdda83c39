#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Host scheduler used to run watch handlers.

The watch loop never calls a handler directly. It hands the handler and its
argument to a scheduler, which queues the call on the host's event loop and
returns immediately. A slow handler therefore never delays the loop, and an
exception raised by a handler is reported through the event loop's
exception handler rather than through the watch call."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import inspect
from typing import Any, Protocol

from provide.foundation.logger import get_logger

log = get_logger(__name__)

Handler = Callable[[list[str]], Any]


class Scheduler(Protocol):
    def spawn(self, handler: Handler, paths: list[str]) -> None: ...


class AsyncioScheduler:
    """Queues handler calls on an asyncio event loop.

    Plain callables run from ``loop.call_soon``. If a handler returns an
    awaitable (async functions do), it is wrapped in a task that the
    scheduler keeps a reference to until it finishes."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._tasks: set[asyncio.Future[Any]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def pending(self) -> int:
        """Number of handler tasks still running."""
        return len(self._tasks)

    def spawn(self, handler: Handler, paths: list[str]) -> None:
        self._loop.call_soon(self._invoke, handler, paths)

    def _invoke(self, handler: Handler, paths: list[str]) -> None:
        try:
            result = handler(paths)
        except Exception as e:
            self._report(handler, e)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self._loop)
            self._tasks.add(task)
            task.add_done_callback(lambda t: self._task_done(handler, t))

    def _task_done(self, handler: Handler, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report(handler, exc)

    def _report(self, handler: Handler, exc: BaseException) -> None:
        log.debug("Watch handler raised", handler=repr(handler), error=str(exc))
        self._loop.call_exception_handler(
            {
                "message": "Exception in watch handler",
                "exception": exc,
                "handler": handler,
            }
        )

    async def wait_idle(self) -> None:
        """Wait until every handler queued so far has finished."""
        # Let call_soon callbacks queued before this point run and create their tasks
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


# 🔼⚙️🔚
