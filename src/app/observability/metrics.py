"""Registro de métricas via structured logging.

As métricas são linhas de log com `metric_type` e podem ser agregadas
por qualquer backend que indexe logs JSON.

Métricas suportadas:
- Transição: counter de mudanças de estado por origem/destino/gatilho
- Entrega de webhook: resultado e latência por tipo de evento
- Reconexão: tentativas agendadas com atraso e número da tentativa
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_transition(
    instance_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
) -> None:
    """Registra transição de estado de uma instância."""
    logger.info(
        "metric_transition",
        extra={
            "metric_type": "transition",
            "instance_id": instance_id,
            "from_state": from_state,
            "to_state": to_state,
            "trigger": trigger,
        },
    )


def record_webhook_delivery(
    event: str,
    outcome: str,
    latency_ms: float | None = None,
    status_code: int | None = None,
) -> None:
    """Registra resultado de entrega de webhook.

    Args:
        event: Tipo do evento de domínio (ex: "connection_ready")
        outcome: skipped | delivered | failed
        latency_ms: Duração total da entrega (incluindo retries)
        status_code: Status HTTP da última resposta, se houve
    """
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "event": event,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
            "status_code": status_code,
        },
    )


def record_reconnect(
    instance_id: str,
    attempt: int,
    delay_seconds: float,
    reason: str,
) -> None:
    """Registra reconexão agendada."""
    logger.info(
        "metric_reconnect",
        extra={
            "metric_type": "reconnect",
            "instance_id": instance_id,
            "attempt": attempt,
            "delay_seconds": delay_seconds,
            "reason": reason,
        },
    )
