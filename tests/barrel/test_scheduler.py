"""Tests for per-root debounce of regeneration."""

import asyncio
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from barrelwatch.barrel.scheduler import DebounceScheduler


class Recorder:
    def __init__(self) -> None:
        self.calls: list[Path] = []

    def __call__(self, root: Path) -> None:
        self.calls.append(root)


class TestDebounceScheduler:
    @pytest.mark.asyncio
    async def test_burst_collapses_into_one_call(self) -> None:
        """N rapid schedules for one root fire the callback once."""
        recorder = Recorder()
        scheduler = DebounceScheduler(recorder)
        root = Path("/project/src")

        for _ in range(5):
            scheduler.schedule(root, 30)
            await asyncio.sleep(0.005)

        assert scheduler.is_pending(root)
        await asyncio.sleep(0.15)

        assert recorder.calls == [root]
        assert not scheduler.is_pending(root)

    @pytest.mark.asyncio
    async def test_roots_are_debounced_independently(self) -> None:
        recorder = Recorder()
        scheduler = DebounceScheduler(recorder)
        a, b = Path("/project/a"), Path("/project/b")

        scheduler.schedule(a, 10)
        scheduler.schedule(b, 10)
        assert sorted(scheduler.pending_roots()) == [a, b]
        await asyncio.sleep(0.1)

        assert sorted(recorder.calls) == [a, b]

    @pytest.mark.asyncio
    async def test_callback_sees_state_at_fire_time(self) -> None:
        state = {"value": 0}
        seen: list[int] = []
        scheduler = DebounceScheduler(lambda _root: seen.append(state["value"]))
        root = Path("/project/src")

        scheduler.schedule(root, 20)
        state["value"] = 1
        scheduler.schedule(root, 20)
        state["value"] = 2
        await asyncio.sleep(0.1)

        assert seen == [2]

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        recorder = Recorder()
        scheduler = DebounceScheduler(recorder)
        root = Path("/project/src")

        scheduler.schedule(root, 20)
        assert scheduler.cancel(root)
        assert not scheduler.cancel(root)
        await asyncio.sleep(0.06)

        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_cancel_all(self) -> None:
        recorder = Recorder()
        scheduler = DebounceScheduler(recorder)

        scheduler.schedule(Path("/a"), 20)
        scheduler.schedule(Path("/b"), 20)
        scheduler.cancel_all()
        await asyncio.sleep(0.06)

        assert recorder.calls == []
        assert scheduler.pending_roots() == []

    @pytest.mark.asyncio
    async def test_minimum_delay_is_enforced(self) -> None:
        recorder = Recorder()
        scheduler = DebounceScheduler(recorder, min_delay_ms=80)
        root = Path("/project/src")

        scheduler.schedule(root, 0)
        await asyncio.sleep(0.02)
        assert recorder.calls == []

        await asyncio.sleep(0.15)
        assert recorder.calls == [root]

    @pytest.mark.asyncio
    async def test_callback_failure_is_logged(self) -> None:
        def boom(root: Path) -> None:
            raise OSError("disk full")

        scheduler = DebounceScheduler(boom)
        root = Path("/project/src")

        with capture_logs() as logs:
            scheduler.schedule(root, 0)
            await asyncio.sleep(0.05)

        assert not scheduler.is_pending(root)
        assert any(log["event"] == "scheduled_generation_failed" for log in logs)

    def test_schedule_without_running_loop_explains_itself(self) -> None:
        scheduler = DebounceScheduler(Recorder())

        with pytest.raises(RuntimeError, match="running event loop"):
            scheduler.schedule(Path("/project/src"), 10)

    def test_explicit_loop_allows_synchronous_callers(self) -> None:
        recorder = Recorder()
        loop = asyncio.new_event_loop()
        try:
            scheduler = DebounceScheduler(recorder, loop=loop)
            root = Path("/project/src")

            scheduler.schedule(root, 0)
            assert scheduler.is_pending(root)

            loop.run_until_complete(asyncio.sleep(0.05))
        finally:
            loop.close()

        assert recorder.calls == [root]
