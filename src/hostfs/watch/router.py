#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Handler registry and dispatch of filtered events."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from attrs import define, field
from provide.foundation.logger import get_logger

from hostfs.watch.errors import ConfigError
from hostfs.watch.events import EventCategory, RawEventKind, category_for
from hostfs.watch.scheduler import Handler, Scheduler

log = get_logger(__name__)


@define(frozen=True)
class WatchHandlers:
    """Optional host callables keyed by event category.

    The callables are borrowed from the host for the duration of one watch
    call; the registry never changes once built."""

    added: Handler | None = field(default=None)
    read: Handler | None = field(default=None)
    removed: Handler | None = field(default=None)
    changed: Handler | None = field(default=None)

    @classmethod
    def from_value(cls, value: Mapping[str, Any] | WatchHandlers | None) -> WatchHandlers:
        """Build a registry from a mapping of category name to callable.

        Missing or None entries mean "no handler". Keys other than the four
        category names are ignored. A non-callable entry is a ConfigError."""
        if value is None:
            return cls()
        if isinstance(value, WatchHandlers):
            return value
        if not isinstance(value, Mapping):
            raise ConfigError(f"Watch handlers must be a mapping, got {type(value).__name__}")

        kwargs: dict[str, Handler] = {}
        for category in EventCategory:
            handler = value.get(category.handler_key)
            if handler is None:
                continue
            if not callable(handler):
                raise ConfigError(
                    f"Watch handler '{category.handler_key}' must be callable, "
                    f"got {type(handler).__name__}",
                    field=category.handler_key,
                )
            kwargs[category.handler_key] = handler

        ignored = sorted(str(k) for k in value if k not in {c.handler_key for c in EventCategory})
        if ignored:
            log.debug("Ignoring unknown watch handler keys", keys=ignored)
        return cls(**kwargs)

    def get(self, category: EventCategory) -> Handler | None:
        return getattr(self, category.handler_key)


class EventRouter:
    """Maps an event kind to a category and schedules the matching handler."""

    def __init__(self, handlers: WatchHandlers, scheduler: Scheduler):
        self._handlers = handlers
        self._scheduler = scheduler

    def dispatch(self, kind: RawEventKind, paths: list[str]) -> EventCategory | None:
        """Schedule the handler for ``kind`` with ``paths``.

        Returns the category that was scheduled, or None when the kind is not
        dispatched or no handler is registered for its category."""
        category = category_for(kind)
        if category is None:
            return None

        handler = self._handlers.get(category)
        if handler is None:
            return None

        self._scheduler.spawn(handler, list(paths))
        log.debug("Watch handler scheduled", category=category.handler_key, paths=paths)
        return category


# 🔼⚙️🔚
