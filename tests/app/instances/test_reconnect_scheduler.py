"""Testes para ReconnectScheduler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.instances.reconnect import ReconnectScheduler


@pytest.mark.asyncio
async def test_callback_runs_after_delay_and_key_is_released() -> None:
    scheduler = ReconnectScheduler()
    callback = AsyncMock()

    scheduler.schedule("inst-1", 0.01, callback)
    assert scheduler.is_scheduled("inst-1")
    assert scheduler.pending == 1

    await asyncio.sleep(0.05)

    callback.assert_awaited_once()
    assert not scheduler.is_scheduled("inst-1")
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_rescheduling_replaces_previous_task() -> None:
    scheduler = ReconnectScheduler()
    first = AsyncMock()
    second = AsyncMock()

    scheduler.schedule("inst-1", 0.02, first)
    scheduler.schedule("inst-1", 0.02, second)
    await asyncio.sleep(0.06)

    first.assert_not_awaited()
    second.assert_awaited_once()


@pytest.mark.asyncio
async def test_cancel_prevents_callback() -> None:
    scheduler = ReconnectScheduler()
    callback = AsyncMock()

    scheduler.schedule("inst-1", 0.02, callback)
    assert scheduler.cancel("inst-1") is True
    assert scheduler.cancel("inst-1") is False
    await asyncio.sleep(0.05)

    callback.assert_not_awaited()


@pytest.mark.asyncio
async def test_callback_failure_is_logged_not_raised(caplog) -> None:
    caplog.set_level("ERROR")
    scheduler = ReconnectScheduler()
    task = scheduler.schedule("inst-1", 0, AsyncMock(side_effect=RuntimeError("boom")))

    await task

    assert task.exception() is None
    assert "reconnect_callback_failed" in caplog.text


@pytest.mark.asyncio
async def test_cancel_all() -> None:
    scheduler = ReconnectScheduler()
    callbacks = [AsyncMock() for _ in range(3)]
    for index, callback in enumerate(callbacks):
        scheduler.schedule(f"inst-{index}", 0.05, callback)

    await scheduler.cancel_all()
    await asyncio.sleep(0.08)

    assert scheduler.pending == 0
    for callback in callbacks:
        callback.assert_not_awaited()
