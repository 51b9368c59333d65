"""Gerenciamento de instâncias de mensageria.

Uso:
    from app.instances import InstanceRegistry
    registry = InstanceRegistry(adapter_factory, dispatcher)
    instance_id = await registry.create("Vendas", "https://hook/x")
"""

from app.instances.addressing import format_destination
from app.instances.classifier import NormalizedMessage, classify_message
from app.instances.events import (
    AckLevel,
    Authenticated,
    AuthFailure,
    DomainEventKind,
    LinkLost,
    MessageAckChanged,
    MessageEditedInbound,
    MessageInbound,
    MessageReactionInbound,
    PairingChallenge,
    Ready,
    TerminationReason,
    TransportEvent,
    is_logout_reason,
)
from app.instances.lifecycle import InstanceLifecycle
from app.instances.models import (
    AccountInfo,
    DeliveryHandle,
    InstanceRecord,
    InstanceSnapshot,
    InstanceSummary,
)
from app.instances.reconnect import ReconnectScheduler
from app.instances.registry import InstanceRegistry

__all__ = [
    "AccountInfo",
    "AckLevel",
    "AuthFailure",
    "Authenticated",
    "DeliveryHandle",
    "DomainEventKind",
    "InstanceLifecycle",
    "InstanceRecord",
    "InstanceRegistry",
    "InstanceSnapshot",
    "InstanceSummary",
    "LinkLost",
    "MessageAckChanged",
    "MessageEditedInbound",
    "MessageInbound",
    "MessageReactionInbound",
    "NormalizedMessage",
    "PairingChallenge",
    "Ready",
    "ReconnectScheduler",
    "TerminationReason",
    "TransportEvent",
    "classify_message",
    "format_destination",
    "is_logout_reason",
]
