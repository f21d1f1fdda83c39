#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Raw watcher events and the callback categories they map to."""

from __future__ import annotations

from enum import Enum, auto
from pathlib import Path

from attrs import define, field


class RawEventKind(Enum):
    """Kinds of change reported by the notifier."""

    CREATED = auto()
    REMOVED = auto()
    MODIFIED = auto()
    ACCESS_READ = auto()
    OTHER = auto()


class EventCategory(Enum):
    """Callback categories exposed to host handlers."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    READ = "read"

    @property
    def handler_key(self) -> str:
        return self.value


# Kinds missing from this table are never dispatched
KIND_CATEGORIES: dict[RawEventKind, EventCategory] = {
    RawEventKind.CREATED: EventCategory.ADDED,
    RawEventKind.REMOVED: EventCategory.REMOVED,
    RawEventKind.MODIFIED: EventCategory.CHANGED,
    RawEventKind.ACCESS_READ: EventCategory.READ,
}


def category_for(kind: RawEventKind) -> EventCategory | None:
    """Return the callback category for ``kind``, or None if it is not dispatched."""
    return KIND_CATEGORIES.get(kind)


def _to_paths(paths: tuple[Path, ...] | list[Path] | list[str]) -> tuple[Path, ...]:
    return tuple(Path(p) for p in paths)


@define(frozen=True)
class RawEvent:
    """An unfiltered notification carrying a change kind and the affected paths.

    ``is_directory`` is the notifier's own idea of the path type, when it has
    one. It lets paths that no longer exist (removals, move sources) still be
    type-filtered."""

    kind: RawEventKind
    paths: tuple[Path, ...] = field(converter=_to_paths)
    is_directory: bool | None = field(default=None)


# 🔼⚙️🔚
