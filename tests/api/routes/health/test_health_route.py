"""Testes dos endpoints de health e readiness."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from starlette.requests import Request

from api.routes.health.router import health_check, readiness_check


def _build_request_with_state(state: SimpleNamespace) -> Request:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/ready",
        "raw_path": b"/ready",
        "query_string": b"",
        "headers": [],
        "app": SimpleNamespace(state=state),
    }

    async def _receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, _receive)


@pytest.mark.asyncio
async def test_health_reports_service() -> None:
    response = await health_check()

    assert response.status == "healthy"
    assert response.service


@pytest.mark.asyncio
async def test_readiness_returns_not_ready_without_registry() -> None:
    request = _build_request_with_state(SimpleNamespace(registry=None))

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["status"] == "not_ready"
    assert payload["checks"]["registry"]["status"] == "failed"


@pytest.mark.asyncio
async def test_readiness_returns_not_ready_after_shutdown() -> None:
    registry = MagicMock()
    registry.is_running = False
    registry.stats.return_value = {}
    registry.scheduler.pending = 0
    registry.dispatcher.active_tasks = 0
    request = _build_request_with_state(SimpleNamespace(registry=registry))

    response = await readiness_check(request)

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_readiness_returns_ready_with_running_registry() -> None:
    registry = MagicMock()
    registry.is_running = True
    registry.stats.return_value = {"CONNECTED": 2, "DISCONNECTED": 1}
    registry.scheduler.pending = 1
    registry.dispatcher.active_tasks = 3
    request = _build_request_with_state(SimpleNamespace(registry=registry))

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["status"] == "ready"
    checks = payload["checks"]["registry"]
    assert checks["status"] == "ok"
    assert checks["instances"] == {"CONNECTED": 2, "DISCONNECTED": 1}
    assert checks["pending_reconnects"] == 1
    assert checks["pending_webhooks"] == 3
