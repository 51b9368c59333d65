"""Observabilidade: contexto de rastreamento e métricas via logs.

Uso:
    from app.observability import bind_instance_id, get_correlation_id
    from app.observability import record_transition, record_webhook_delivery
"""

from app.observability.context import (
    bind_instance_id,
    get_correlation_id,
    get_instance_id,
    reset_correlation_id,
    reset_instance_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_reconnect,
    record_transition,
    record_webhook_delivery,
)

__all__ = [
    "bind_instance_id",
    "get_correlation_id",
    "get_instance_id",
    "record_reconnect",
    "record_transition",
    "record_webhook_delivery",
    "reset_correlation_id",
    "reset_instance_id",
    "set_correlation_id",
]
