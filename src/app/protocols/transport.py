"""Contrato do adapter de transporte consumido pelo lifecycle.

Qualquer provedor concreto precisa oferecer connect/send/terminate e
publicar eventos de transporte no sink recebido na construção.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.instances.events import TransportEvent

EventSink = Callable[["TransportEvent"], None]


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """Confirmação do provedor para um envio."""

    message_id: str
    timestamp: datetime


@runtime_checkable
class TransportAdapterProtocol(Protocol):
    """Contrato mínimo do adapter de uma instância."""

    async def connect(self) -> None:
        """Inicia a conexão (idempotente)."""
        ...

    async def send(self, destination: str, content: str) -> SendReceipt:
        """Envia mensagem; levanta TransportNotReadyError se o socket não estiver pronto."""
        ...

    async def terminate(self) -> None:
        """Encerra a conexão (idempotente, seguro em qualquer estado)."""
        ...

    def is_ready(self) -> bool: ...


class TransportFactoryProtocol(Protocol):
    """Cria um adapter novo para cada geração de uma instância."""

    def __call__(self, instance_id: str, sink: EventSink) -> TransportAdapterProtocol: ...
