#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Test helpers package for hostfs."""

from tests.helpers.watch_testing import FakeWatcher, RecordingHandler, wait_until

__all__ = ["FakeWatcher", "RecordingHandler", "wait_until"]

# 🔼⚙️🔚
