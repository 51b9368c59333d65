"""Dispatcher de webhooks por instância.

Entrega um envelope por evento via POST JSON. Falhas são registradas e
descartadas: nunca propagam para o lifecycle que originou o evento.
Por padrão há uma única tentativa (WEBHOOK_MAX_RETRIES=0).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from app.observability import record_webhook_delivery
from config.settings import WebhookSettings, get_webhook_settings

logger = logging.getLogger(__name__)

DispatchOutcome = Literal["skipped", "delivered", "failed"]

_JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class WebhookDeliveryError(Exception):
    """Falha de uma tentativa de entrega (uso interno do dispatcher)."""

    def __init__(
        self,
        reason: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.is_retryable = is_retryable


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Resultado de uma entrega de webhook."""

    outcome: DispatchOutcome
    status_code: int | None = None
    reason: str | None = None
    attempts: int = 0

    @classmethod
    def skipped(cls) -> DispatchResult:
        return cls(outcome="skipped", reason="no_webhook_url")

    @classmethod
    def delivered(cls, status_code: int, attempts: int = 1) -> DispatchResult:
        return cls(outcome="delivered", status_code=status_code, attempts=attempts)

    @classmethod
    def failed(
        cls,
        reason: str,
        status_code: int | None = None,
        attempts: int = 1,
    ) -> DispatchResult:
        return cls(outcome="failed", status_code=status_code, reason=reason, attempts=attempts)

    @property
    def ok(self) -> bool:
        return self.outcome == "delivered"


class WebhookDispatcher:
    """Entrega eventos de domínio aos webhooks configurados.

    `dispatch` aguarda a entrega; `submit` agenda em background com limite
    de concorrência e `drain` aguarda as pendentes no shutdown.
    """

    def __init__(
        self,
        settings: WebhookSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_webhook_settings()
        self._client = client
        self._semaphore = asyncio.Semaphore(self._settings.max_concurrent_deliveries)
        self._active_tasks: set[asyncio.Task[DispatchResult]] = set()

    @property
    def active_tasks(self) -> int:
        return len(self._active_tasks)

    async def dispatch(self, url: str, event: dict[str, Any]) -> DispatchResult:
        """Entrega o evento na URL.

        URL vazia retorna `skipped` sem nenhuma chamada HTTP.
        """
        event_kind = str(event.get("event", "unknown"))
        if not url:
            record_webhook_delivery(event_kind, "skipped")
            return DispatchResult.skipped()

        started = time.perf_counter()
        max_retries = self._settings.max_retries
        attempt = 0

        while True:
            try:
                status_code = await self._post(url, event)
                result = DispatchResult.delivered(status_code, attempts=attempt + 1)
                break
            except WebhookDeliveryError as exc:
                result = DispatchResult.failed(
                    exc.reason, status_code=exc.status_code, attempts=attempt + 1
                )
                if not exc.is_retryable or attempt >= max_retries:
                    break
                await _backoff_sleep(
                    attempt,
                    self._settings.backoff_base_seconds,
                    self._settings.backoff_max_seconds,
                )
                attempt += 1

        latency_ms = (time.perf_counter() - started) * 1000
        record_webhook_delivery(event_kind, result.outcome, latency_ms, result.status_code)

        if not result.ok:
            logger.warning(
                "webhook_delivery_failed",
                extra={
                    "event": event_kind,
                    "reason": result.reason,
                    "status_code": result.status_code,
                    "attempts": result.attempts,
                },
            )
        return result

    async def _post(self, url: str, event: dict[str, Any]) -> int:
        try:
            if self._client is not None:
                response = await self._client.post(
                    url,
                    json=event,
                    headers=_JSON_HEADERS,
                    timeout=self._settings.timeout_seconds,
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        url,
                        json=event,
                        headers=_JSON_HEADERS,
                        timeout=self._settings.timeout_seconds,
                    )
        except httpx.TimeoutException as exc:
            raise WebhookDeliveryError("timeout", is_retryable=True) from exc
        except httpx.TransportError as exc:
            raise WebhookDeliveryError("connection_error", is_retryable=True) from exc

        status_code = response.status_code
        if 200 <= status_code < 300:
            return status_code
        raise WebhookDeliveryError(
            f"http_status_{status_code}",
            status_code=status_code,
            is_retryable=status_code == 429 or status_code >= 500,
        )

    def submit(self, url: str, event: dict[str, Any]) -> asyncio.Task[DispatchResult] | None:
        """Agenda entrega em background. URL vazia não agenda nada."""
        if not url:
            record_webhook_delivery(str(event.get("event", "unknown")), "skipped")
            return None

        task = asyncio.create_task(self._run_with_limit(url, event))
        self._active_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _run_with_limit(self, url: str, event: dict[str, Any]) -> DispatchResult:
        async with self._semaphore:
            return await self.dispatch(url, event)

    def _on_task_done(self, task: asyncio.Task[DispatchResult]) -> None:
        self._active_tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "webhook_delivery_task_failed",
                    extra={
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._active_tasks),
                    },
                )

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda entregas pendentes durante o shutdown."""
        if not self._active_tasks:
            return

        pending_now = list(self._active_tasks)
        logger.info(
            "webhook_delivery_shutdown_wait",
            extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "webhook_delivery_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("webhook_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
