import asyncio

import pytest

from wildwatch.controller.scheduler import FrameScheduler


def test_scheduled_callback_runs_once() -> None:
    calls = []

    async def cycle() -> None:
        calls.append(1)

    async def scenario() -> None:
        scheduler = FrameScheduler(target_fps=200)
        scheduler.schedule(cycle)
        assert scheduler.pending is True
        await asyncio.sleep(0.05)
        await scheduler.drain()
        assert scheduler.pending is False

    asyncio.run(scenario())
    assert calls == [1]


def test_cancel_drops_pending_callback() -> None:
    calls = []

    async def cycle() -> None:
        calls.append(1)

    async def scenario() -> None:
        scheduler = FrameScheduler(target_fps=100)
        scheduler.schedule(cycle)
        scheduler.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert calls == []


def test_rescheduling_replaces_pending_callback() -> None:
    calls = []

    async def first() -> None:
        calls.append("first")

    async def second() -> None:
        calls.append("second")

    async def scenario() -> None:
        scheduler = FrameScheduler(target_fps=100)
        scheduler.schedule(first)
        scheduler.schedule(second, immediate=True)
        await asyncio.sleep(0.05)
        await scheduler.drain()

    asyncio.run(scenario())
    assert calls == ["second"]


def test_rejects_non_positive_fps() -> None:
    with pytest.raises(ValueError):
        FrameScheduler(target_fps=0)
