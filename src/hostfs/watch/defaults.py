#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Default values for watch sessions."""

from __future__ import annotations

from typing import Final

DEFAULT_POLL_INTERVAL_SECONDS: Final[int] = 30
DEFAULT_RECURSIVE: Final[bool] = False
DEFAULT_WATCH_FILES: Final[bool] = True
DEFAULT_WATCH_DIRECTORIES: Final[bool] = True

# Producer blocks until the loop has taken the previous event
CHANNEL_CAPACITY: Final[int] = 1

# How often the supervisor thread checks observer/emitter liveness
SUPERVISOR_CHECK_SECONDS: Final[float] = 0.5

OBSERVER_JOIN_TIMEOUT: Final[float] = 5.0

# 🔼⚙️🔚
