"""Endpoints de health check."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe — verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: registry inicializado e aceitando instâncias."""
    registry = getattr(request.app.state, "registry", None)
    ready = registry is not None and registry.is_running

    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "registry": {
                "status": "ok" if ready else "failed",
                "instances": registry.stats() if registry is not None else {},
                "pending_reconnects": registry.scheduler.pending if registry is not None else 0,
                "pending_webhooks": (
                    registry.dispatcher.active_tasks if registry is not None else 0
                ),
            },
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if not ready:
        logger.warning("readiness_check_failed", extra={"registry_present": registry is not None})
    return JSONResponse(content=payload, status_code=200 if ready else 503)
