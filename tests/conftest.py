#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Shared pytest fixtures for hostfs tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from hostfs.watch.channel import EventChannel
from hostfs.watch.options import WatchOptions
from tests.helpers.watch_testing import FakeWatcher, RecordingHandler


@pytest.fixture
def watch_root(tmp_path: Path) -> Path:
    """An empty directory to watch."""
    root = tmp_path / "watched"
    root.mkdir()
    return root


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def fake_watchers() -> list[FakeWatcher]:
    """FakeWatcher instances created through ``fake_watcher_factory``."""
    return []


@pytest.fixture
def fake_watcher_factory(fake_watchers: list[FakeWatcher]):
    def factory(options: WatchOptions, channel: EventChannel) -> FakeWatcher:
        watcher = FakeWatcher(options, channel)
        fake_watchers.append(watcher)
        return watcher

    return factory


# 🔼⚙️🔚
