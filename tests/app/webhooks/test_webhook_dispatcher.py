"""Testes para WebhookDispatcher.

Usa httpx.MockTransport para simular o servidor do webhook.
"""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from app.webhooks import DispatchResult, WebhookDispatcher
from config.settings import WebhookSettings

URL = "http://hook.test/events"
EVENT = {"event": "connection_ready", "instance": {"id": "i-1", "name": "Sales"}}


def _dispatcher(handler, **settings) -> tuple[WebhookDispatcher, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookDispatcher(WebhookSettings(**settings), client=client), client


class TestDispatch:
    @pytest.mark.asyncio
    async def test_empty_url_is_skipped_without_request(self) -> None:
        calls: list[httpx.Request] = []
        dispatcher, client = _dispatcher(lambda r: calls.append(r) or httpx.Response(200))

        result = await dispatcher.dispatch("", EVENT)

        assert result == DispatchResult.skipped()
        assert result.ok is False
        assert calls == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_delivers_json_envelope(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        dispatcher, client = _dispatcher(handler)

        result = await dispatcher.dispatch(URL, EVENT)

        assert result.ok
        assert result.status_code == 204
        assert result.attempts == 1
        assert seen[0].method == "POST"
        assert seen[0].headers["content-type"] == "application/json"
        assert json.loads(seen[0].content) == EVENT
        await client.aclose()

    @pytest.mark.asyncio
    async def test_server_error_single_attempt_by_default(self, caplog) -> None:
        caplog.set_level(logging.WARNING)
        calls: list[httpx.Request] = []
        dispatcher, client = _dispatcher(lambda r: calls.append(r) or httpx.Response(500))

        result = await dispatcher.dispatch(URL, EVENT)

        assert result.outcome == "failed"
        assert result.reason == "http_status_500"
        assert result.status_code == 500
        assert result.attempts == 1
        assert len(calls) == 1
        assert "webhook_delivery_failed" in caplog.text
        await client.aclose()

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, monkeypatch) -> None:
        sleep = AsyncMock()
        monkeypatch.setattr("app.webhooks.dispatcher._backoff_sleep", sleep)
        calls: list[httpx.Request] = []
        dispatcher, client = _dispatcher(
            lambda r: calls.append(r) or httpx.Response(404), max_retries=3
        )

        result = await dispatcher.dispatch(URL, EVENT)

        assert result.reason == "http_status_404"
        assert len(calls) == 1
        sleep.assert_not_awaited()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_retries_transient_failures_when_enabled(self, monkeypatch) -> None:
        sleep = AsyncMock()
        monkeypatch.setattr("app.webhooks.dispatcher._backoff_sleep", sleep)
        responses = iter([httpx.Response(503), httpx.Response(429), httpx.Response(200)])
        dispatcher, client = _dispatcher(lambda r: next(responses), max_retries=2)

        result = await dispatcher.dispatch(URL, EVENT)

        assert result.ok
        assert result.attempts == 3
        assert sleep.await_count == 2
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_and_connection_errors(self) -> None:
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("lento", request=request)

        def refused(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("recusado", request=request)

        slow, slow_client = _dispatcher(timeout)
        down, down_client = _dispatcher(refused)

        assert (await slow.dispatch(URL, EVENT)).reason == "timeout"
        assert (await down.dispatch(URL, EVENT)).reason == "connection_error"

        await slow_client.aclose()
        await down_client.aclose()


class TestBackgroundDelivery:
    @pytest.mark.asyncio
    async def test_submit_and_drain(self) -> None:
        calls: list[httpx.Request] = []
        dispatcher, client = _dispatcher(lambda r: calls.append(r) or httpx.Response(200))

        assert dispatcher.submit("", EVENT) is None
        task = dispatcher.submit(URL, EVENT)
        assert dispatcher.active_tasks == 1

        await dispatcher.drain(1.0)

        assert task.done()
        assert task.result().ok
        assert dispatcher.active_tasks == 0
        assert len(calls) == 1
        await client.aclose()

    @pytest.mark.asyncio
    async def test_drain_timeout_cancels_hanging_deliveries(self, caplog) -> None:
        caplog.set_level(logging.INFO)

        async def hang(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200)

        dispatcher, client = _dispatcher(hang)
        task = dispatcher.submit(URL, EVENT)

        await dispatcher.drain(0.05)

        assert task.cancelled()
        assert dispatcher.active_tasks == 0
        assert "webhook_delivery_shutdown_cancelled" in caplog.text
        await client.aclose()

    @pytest.mark.asyncio
    async def test_drain_without_pending_returns(self) -> None:
        dispatcher, client = _dispatcher(lambda r: httpx.Response(200))

        await dispatcher.drain(0.01)

        assert dispatcher.active_tasks == 0
        await client.aclose()
