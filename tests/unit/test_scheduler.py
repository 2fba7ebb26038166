"""Tests for keyed one-shot timers."""

import asyncio

import pytest

from tests.unit.fakes.timing import wait_for

pytestmark = pytest.mark.asyncio


async def test_timer_fires_once(timers) -> None:
    fired = []

    async def action(value):
        fired.append(value)

    timers.schedule("t", 0.02, action, "a")
    assert timers.is_pending("t")
    await wait_for(lambda: fired)
    await asyncio.sleep(0.05)
    assert fired == ["a"]
    assert not timers.is_pending("t")


async def test_same_key_replaces_pending(timers) -> None:
    fired = []

    async def action(value):
        fired.append(value)

    timers.schedule("t", 0.05, action, "first")
    timers.schedule("t", 0.05, action, "second")
    await wait_for(lambda: fired)
    await asyncio.sleep(0.08)
    assert fired == ["second"]


async def test_cancel(timers) -> None:
    fired = []

    async def action():
        fired.append(True)

    timers.schedule("t", 0.03, action)
    assert timers.cancel("t") is True
    assert timers.cancel("t") is False
    await asyncio.sleep(0.08)
    assert fired == []


async def test_shutdown_drops_pending(timers) -> None:
    fired = []

    async def action():
        fired.append(True)

    timers.schedule("a", 0.03, action)
    timers.schedule("b", 0.03, action)
    timers.shutdown()
    await asyncio.sleep(0.08)
    assert fired == []
    assert not timers.running
