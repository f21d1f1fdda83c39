#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Exception types raised by the watch subsystem.

Configuration and registration failures are raised before any event loop
exists. A WatchError ends a running session; nothing is retried."""

from __future__ import annotations

from pathlib import Path


class HostFsWatchError(Exception):
    """Base exception for watch subsystem errors."""


class ConfigError(HostFsWatchError):
    """Raised when watch options or handlers are malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class RegistrationError(HostFsWatchError):
    """Raised when the watch root cannot be registered with the notifier."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot watch '{self.path}': {reason}")


class WatchError(HostFsWatchError):
    """Raised when the notifier fails after the session has started."""


# 🔼⚙️🔚
