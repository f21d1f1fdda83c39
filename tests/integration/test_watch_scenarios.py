#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Integration tests for watch sessions against a real directory."""

import asyncio
import contextlib
from pathlib import Path
import shutil
import threading

from provide.testkit.mocking import Mock
import pytest

from hostfs.watch import (
    AsyncioScheduler,
    RegistrationError,
    SessionState,
    WatchError,
    WatchHandlers,
    WatchOptions,
    WatchSession,
    watch,
)
from tests.helpers.watch_testing import RecordingHandler, wait_until

pytestmark = pytest.mark.integration


def _session(root: Path, options, handlers, scheduler=None) -> WatchSession:
    return WatchSession(
        root,
        WatchOptions.from_value(options),
        WatchHandlers.from_value(handlers),
        scheduler if scheduler is not None else AsyncioScheduler(),
    )


async def _running(session: WatchSession) -> asyncio.Task:
    task = asyncio.create_task(session.run())
    await wait_until(lambda: session.state is not SessionState.CREATED)
    assert session.state is SessionState.RUNNING
    # Give the native notifier a moment to settle before touching files
    await asyncio.sleep(0.1)
    return task


async def _finish(session: WatchSession, task: asyncio.Task) -> None:
    session.close()
    await asyncio.wait_for(task, timeout=10.0)


class TestScenarios:
    async def test_no_handlers_means_no_invocation(self, watch_root: Path) -> None:
        """Scenario A: events arrive, nothing is scheduled, nothing fails."""
        scheduler = Mock(spec=["spawn"])
        session = _session(watch_root, {"pattern": "*", "watchFiles": True}, {}, scheduler)
        task = await _running(session)

        (watch_root / "a.txt").write_text("a")
        await wait_until(lambda: session.stats.received >= 1)
        await _finish(session, task)

        scheduler.spawn.assert_not_called()
        assert session.stats.dispatched == 0
        assert session.state is SessionState.CLOSED

    async def test_changed_handler_respects_pattern_and_type(self, watch_root: Path) -> None:
        """Scenario B: writing b.txt calls changed once; writing b.bin calls nothing."""
        (watch_root / "b.txt").write_text("")
        (watch_root / "b.bin").write_text("")
        changed = RecordingHandler()
        session = _session(
            watch_root,
            {
                "pattern": "*.txt",
                "watchFiles": True,
                "watchDirectories": False,
                "poll": True,
                "interval": 1,
            },
            {"changed": changed},
        )
        task = await _running(session)

        (watch_root / "b.txt").write_text("hello")
        await wait_until(lambda: changed.calls, timeout=10.0)
        (watch_root / "b.bin").write_text("hello")
        # Two more polling rounds
        await asyncio.sleep(2.5)
        await _finish(session, task)

        assert changed.calls == [[str(watch_root / "b.txt")]]

    async def test_changed_exactly_once_with_native_observer(self, watch_root: Path) -> None:
        (watch_root / "b.txt").write_text("")
        (watch_root / "b.bin").write_text("")
        changed = RecordingHandler()
        session = _session(
            watch_root,
            {"pattern": "*.txt", "watchFiles": True, "watchDirectories": False},
            {"changed": changed},
        )
        task = await _running(session)

        with (watch_root / "b.txt").open("a") as fh:
            fh.write("hello")
        await wait_until(lambda: changed.calls, timeout=10.0)
        with (watch_root / "b.bin").open("a") as fh:
            fh.write("hello")
        await asyncio.sleep(1.0)
        await _finish(session, task)

        assert changed.calls == [[str(watch_root / "b.txt")]]

    async def test_creating_a_file_never_reports_the_root(self, watch_root: Path) -> None:
        added = RecordingHandler()
        changed = RecordingHandler()
        session = _session(watch_root, "*", {"added": added, "changed": changed})
        task = await _running(session)

        (watch_root / "a.txt").write_text("x")
        await wait_until(lambda: added.calls, timeout=10.0)
        await asyncio.sleep(0.5)
        await _finish(session, task)

        assert added.calls == [[str(watch_root / "a.txt")]]
        assert [str(watch_root)] not in changed.calls

    async def test_polling_never_reports_the_root(self, watch_root: Path) -> None:
        added = RecordingHandler()
        changed = RecordingHandler()
        session = _session(
            watch_root, {"pattern": "*", "poll": True, "interval": 1}, {"added": added, "changed": changed}
        )
        task = await _running(session)

        (watch_root / "a.txt").write_text("x")
        await wait_until(lambda: added.calls, timeout=10.0)
        await asyncio.sleep(1.5)
        await _finish(session, task)

        assert [str(watch_root)] not in changed.calls

    async def test_missing_root_fails_immediately(self) -> None:
        """Scenario C: a missing root is a RegistrationError and the session never runs."""
        session = _session(Path("/does/not/exist"), "*", {})
        with pytest.raises(RegistrationError):
            await session.run()
        assert session.state is SessionState.CREATED

        with pytest.raises(RegistrationError):
            await watch("/does/not/exist", "*", {})

    async def test_burst_is_delivered_in_order_to_slow_handler(self, watch_root: Path) -> None:
        """Scenario D: a slow handler delays delivery but loses nothing."""
        added = RecordingHandler(delay=0.2)
        session = _session(
            watch_root, {"pattern": "*.txt", "watchDirectories": False}, {"added": added}
        )
        task = await _running(session)

        def burst() -> None:
            for name in ("one.txt", "two.txt", "three.txt"):
                (watch_root / name).write_text(name)

        await asyncio.to_thread(burst)
        await wait_until(lambda: len(added.calls) >= 3, timeout=10.0)
        await _finish(session, task)

        assert added.names == ["one.txt", "two.txt", "three.txt"]


class TestRecursion:
    async def test_recursive_sees_nested_descendants(self, watch_root: Path) -> None:
        nested = watch_root / "a" / "b"
        nested.mkdir(parents=True)
        added = RecordingHandler()
        session = _session(
            watch_root, {"pattern": "*.txt", "recursive": True}, {"added": added}
        )
        task = await _running(session)

        (nested / "deep.txt").write_text("deep")
        await wait_until(lambda: added.calls, timeout=10.0)
        await _finish(session, task)

        assert added.calls[0] == [str(nested / "deep.txt")]

    async def test_non_recursive_sees_only_direct_children(self, watch_root: Path) -> None:
        sub = watch_root / "sub"
        sub.mkdir()
        added = RecordingHandler()
        session = _session(watch_root, {"pattern": "*.txt", "recursive": False}, {"added": added})
        task = await _running(session)

        (sub / "nested.txt").write_text("nested")
        (watch_root / "direct.txt").write_text("direct")
        await wait_until(lambda: "direct.txt" in added.names, timeout=10.0)
        await asyncio.sleep(0.5)
        await _finish(session, task)

        assert "nested.txt" not in added.names


class TestHandlers:
    async def test_removed_handler_fires_for_deleted_file(self, watch_root: Path) -> None:
        doomed = watch_root / "doomed.txt"
        doomed.write_text("bye")
        removed = RecordingHandler()
        session = _session(watch_root, "*.txt", {"removed": removed})
        task = await _running(session)

        doomed.unlink()
        await wait_until(lambda: removed.calls, timeout=10.0)
        await _finish(session, task)

        assert removed.calls[0] == [str(doomed)]

    async def test_async_handler(self, watch_root: Path) -> None:
        seen: list[list[str]] = []

        async def added(paths: list[str]) -> None:
            await asyncio.sleep(0.01)
            seen.append(paths)

        session = _session(watch_root, "*.md", {"added": added})
        task = await _running(session)

        (watch_root / "readme.md").write_text("# hi")
        await wait_until(lambda: seen, timeout=10.0)
        await _finish(session, task)

        assert seen[0] == [str(watch_root / "readme.md")]


class TestTermination:
    async def test_cancelling_watch_tears_down(self, watch_root: Path) -> None:
        added = RecordingHandler()
        task = asyncio.create_task(watch(watch_root, "*", {"added": added}))
        await asyncio.sleep(0.2)

        (watch_root / "a.txt").write_text("a")
        await wait_until(lambda: added.calls, timeout=10.0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not [t for t in threading.enumerate() if t.name == "hostfs-watch-supervisor"]

    async def test_removing_root_is_a_watch_error(self, watch_root: Path) -> None:
        session = _session(watch_root, {"pattern": "*", "poll": True, "interval": 1}, {})
        task = await _running(session)

        shutil.rmtree(watch_root)
        try:
            with pytest.raises(WatchError, match="File watcher failed"):
                await asyncio.wait_for(task, timeout=10.0)
        finally:
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        assert session.state is SessionState.ERRORED


# 🔼⚙️🔚
