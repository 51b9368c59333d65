"""Entrega de eventos de domínio aos webhooks das instâncias."""

from app.webhooks.dispatcher import (
    DispatchResult,
    WebhookDeliveryError,
    WebhookDispatcher,
)
from app.webhooks.envelope import build_event_envelope

__all__ = [
    "DispatchResult",
    "WebhookDeliveryError",
    "WebhookDispatcher",
    "build_event_envelope",
]
