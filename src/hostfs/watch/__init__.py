#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Directory change watching for hostfs, using watchdog."""

from hostfs.watch.errors import ConfigError, HostFsWatchError, RegistrationError, WatchError
from hostfs.watch.events import EventCategory, RawEvent, RawEventKind
from hostfs.watch.options import WatchOptions
from hostfs.watch.router import WatchHandlers
from hostfs.watch.scheduler import AsyncioScheduler, Scheduler
from hostfs.watch.session import SessionState, WatchSession, watch

__all__ = [
    "AsyncioScheduler",
    "ConfigError",
    "EventCategory",
    "HostFsWatchError",
    "RawEvent",
    "RawEventKind",
    "RegistrationError",
    "Scheduler",
    "SessionState",
    "WatchError",
    "WatchHandlers",
    "WatchOptions",
    "WatchSession",
    "watch",
]

# 🔼⚙️🔚
