#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Type and glob filtering of raw watcher events."""

from __future__ import annotations

from pathlib import Path

from provide.foundation.logger import get_logger

from hostfs.fs import PathType, probe, to_text
from hostfs.watch.events import RawEvent
from hostfs.watch.options import WatchOptions

log = get_logger(__name__)


class EventFilter:
    """Reduces an event's paths to those allowed by the session options.

    A path survives when its type is watched (file with ``watch_files``,
    directory with ``watch_directories``) and the glob matches it. The type
    comes from a stat at filter time. When the stat fails (the path is gone
    or unreadable), the notifier's ``is_directory`` hint is used if the event
    carries one; otherwise the path is excluded. Filtering only ever removes
    paths."""

    def __init__(self, options: WatchOptions):
        self._options = options
        self._matcher = options.matcher

    def _type_allowed(self, path: Path, hint: bool | None) -> bool:
        try:
            path_type = probe(path)
        except OSError as e:
            log.debug("Stat failed during filtering", path=str(path), error=str(e))
            path_type = None

        if path_type is None:
            if hint is None:
                return False
            path_type = PathType.DIRECTORY if hint else PathType.FILE

        if path_type is PathType.FILE:
            return self._options.watch_files
        if path_type is PathType.DIRECTORY:
            return self._options.watch_directories
        return False

    def filter_paths(self, event: RawEvent) -> list[str]:
        """Return the surviving paths of ``event`` as text, in event order."""
        kept: list[str] = []
        for path in event.paths:
            if not self._type_allowed(path, event.is_directory):
                continue
            if not self._matcher.is_match(str(path)):
                continue
            kept.append(to_text(path))
        return kept


# 🔼⚙️🔚
