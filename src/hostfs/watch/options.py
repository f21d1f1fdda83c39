#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Watch options parsing and validation.

Options arrive from the host either as a bare glob string or as a mapping::

    WatchOptions.from_value("*.txt")
    WatchOptions.from_value({"pattern": "*.txt", "recursive": True, "watchDirectories": False})

The glob is compiled once, when the options are built, so a malformed
pattern fails before any watcher is started."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from attrs import define, field

from hostfs.watch.defaults import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RECURSIVE,
    DEFAULT_WATCH_DIRECTORIES,
    DEFAULT_WATCH_FILES,
)
from hostfs.watch.errors import ConfigError
from hostfs.watch.glob import GlobMatcher, GlobSyntaxError

# Host-facing option keys, plus their snake_case spellings
_OPTION_KEYS: dict[str, str] = {
    "pattern": "pattern",
    "recursive": "recursive",
    "watchFiles": "watch_files",
    "watch_files": "watch_files",
    "watchDirectories": "watch_directories",
    "watch_directories": "watch_directories",
    "interval": "interval",
    "poll": "poll",
}


def _validate_pattern(instance: Any, attribute: Any, value: Any) -> None:
    if not isinstance(value, str):
        raise ConfigError(
            f"Option '{attribute.name}' must be a string, got {type(value).__name__}",
            field=attribute.name,
        )
    if not value:
        raise ConfigError("Option 'pattern' must not be empty", field=attribute.name)


def _validate_bool(instance: Any, attribute: Any, value: Any) -> None:
    if not isinstance(value, bool):
        raise ConfigError(
            f"Option '{attribute.name}' must be a boolean, got {type(value).__name__}",
            field=attribute.name,
        )


def _validate_interval(instance: Any, attribute: Any, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(
            f"Option 'interval' must be an integer number of seconds, got {type(value).__name__}",
            field=attribute.name,
        )
    if value <= 0:
        raise ConfigError("Option 'interval' must be positive", field=attribute.name)


@define(frozen=True)
class WatchOptions:
    """Validated options for a single watch session."""

    pattern: str = field(validator=_validate_pattern)
    recursive: bool = field(default=DEFAULT_RECURSIVE, validator=_validate_bool)
    watch_files: bool = field(default=DEFAULT_WATCH_FILES, validator=_validate_bool)
    watch_directories: bool = field(default=DEFAULT_WATCH_DIRECTORIES, validator=_validate_bool)
    interval: int | None = field(default=DEFAULT_POLL_INTERVAL_SECONDS, validator=_validate_interval)
    poll: bool = field(default=False, validator=_validate_bool)
    matcher: GlobMatcher = field(init=False, eq=False, repr=False)

    def __attrs_post_init__(self) -> None:
        try:
            matcher = GlobMatcher(self.pattern)
        except GlobSyntaxError as e:
            raise ConfigError(str(e), field="pattern") from e
        object.__setattr__(self, "matcher", matcher)

    @property
    def poll_interval(self) -> float:
        """Seconds between polling scans, used only by the polling observer."""
        return float(self.interval if self.interval is not None else DEFAULT_POLL_INTERVAL_SECONDS)

    @classmethod
    def from_value(cls, value: str | Mapping[str, Any] | WatchOptions) -> WatchOptions:
        """Build options from a glob string, a mapping, or existing options."""
        if isinstance(value, WatchOptions):
            return value
        if isinstance(value, str):
            return cls(pattern=value)
        if isinstance(value, Mapping):
            return cls._from_mapping(value)
        raise ConfigError(
            f"Watch options must be a string or a mapping, got {type(value).__name__}"
        )

    @classmethod
    def _from_mapping(cls, value: Mapping[str, Any]) -> WatchOptions:
        kwargs: dict[str, Any] = {}
        for key, item in value.items():
            name = _OPTION_KEYS.get(key) if isinstance(key, str) else None
            if name is None:
                raise ConfigError(f"Unknown watch option '{key}'", field=str(key))
            if name in kwargs:
                raise ConfigError(f"Watch option '{name}' given more than once", field=name)
            # None means "not given"
            if item is None:
                continue
            kwargs[name] = item

        if "pattern" not in kwargs:
            raise ConfigError("Watch options are missing required key 'pattern'", field="pattern")
        return cls(**kwargs)


# 🔼⚙️🔚
