"""Transporte em memória — apenas para desenvolvimento e testes.

ATENÇÃO: não fala com nenhum provedor real. Os métodos `simulate_*`
publicam no sink os mesmos eventos que um provedor publicaria.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from app.instances.events import (
    Authenticated,
    AuthFailure,
    LinkLost,
    MessageAckChanged,
    MessageEditedInbound,
    MessageInbound,
    MessageReactionInbound,
    PairingChallenge,
    Ready,
    TransportEvent,
)
from app.instances.models import AccountInfo
from app.protocols import EventSink, SendReceipt
from utils.errors import TransportNotReadyError

logger = logging.getLogger(__name__)


def _provider_message_id() -> str:
    return f"3EB0{uuid.uuid4().hex[:16].upper()}"


@dataclass(frozen=True, slots=True)
class SentMessage:
    """Mensagem aceita pelo transporte em memória."""

    destination: str
    content: str
    message_id: str
    timestamp: datetime


class MemoryTransport:
    """Adapter em memória de uma instância.

    Args:
        instance_id: Instância dona do adapter
        sink: Recebe os eventos de transporte
        auto_pairing: Emite um desafio de pareamento ao conectar
    """

    def __init__(self, instance_id: str, sink: EventSink, auto_pairing: bool = True) -> None:
        self.instance_id = instance_id
        self._sink = sink
        self._auto_pairing = auto_pairing
        self._ready = False
        self._terminated = False
        self.connect_calls = 0
        self.terminate_calls = 0
        self.fail_sends = False
        self.sent: list[SentMessage] = []

    @property
    def terminated(self) -> bool:
        return self._terminated

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_calls > 1 or self._terminated:
            return
        if self._auto_pairing:
            self.simulate_pairing(f"memory-pairing:{self.instance_id}:{uuid.uuid4().hex[:8]}")

    async def send(self, destination: str, content: str) -> SendReceipt:
        if not self._ready or self._terminated:
            raise TransportNotReadyError(f"Transporte {self.instance_id} não está pronto")
        if self.fail_sends:
            raise ConnectionError("envio recusado pelo transporte em memória")
        receipt = SendReceipt(message_id=_provider_message_id(), timestamp=datetime.now(UTC))
        self.sent.append(
            SentMessage(
                destination=destination,
                content=content,
                message_id=receipt.message_id,
                timestamp=receipt.timestamp,
            )
        )
        return receipt

    async def terminate(self) -> None:
        self.terminate_calls += 1
        self._ready = False
        self._terminated = True

    def is_ready(self) -> bool:
        return self._ready and not self._terminated

    # ──────────────────────────────────────────────────────────────────────
    # Simulação de eventos do provedor
    # ──────────────────────────────────────────────────────────────────────

    def _publish(self, event: TransportEvent) -> None:
        if self._terminated:
            logger.debug(
                "memory_transport_event_dropped",
                extra={"instance_id": self.instance_id, "event_type": type(event).__name__},
            )
            return
        self._sink(event)

    def simulate_pairing(self, payload: str) -> None:
        self._publish(PairingChallenge(payload))

    def simulate_authenticated(self) -> None:
        self._publish(Authenticated())

    def simulate_ready(
        self,
        identity: AccountInfo | dict[str, Any] | None = None,
        *,
        socket_ready: bool = True,
    ) -> None:
        """Marca o socket como pronto e publica Ready."""
        if identity is None:
            identity = AccountInfo(number="5511999990000", display_name="memory")
        elif isinstance(identity, dict):
            identity = AccountInfo.from_mapping(identity)
        self._ready = socket_ready
        self._publish(Ready(identity))

    def simulate_socket_down(self) -> None:
        """Derruba o socket sem publicar evento (estado gravado fica obsoleto)."""
        self._ready = False

    def simulate_link_lost(self, reason: str = "connection_closed") -> None:
        self._ready = False
        self._publish(LinkLost(reason))

    def simulate_auth_failure(self, message: str = "credencial rejeitada") -> None:
        self._ready = False
        self._publish(AuthFailure(message))

    def simulate_inbound(self, raw: dict[str, Any]) -> None:
        self._publish(MessageInbound(raw))

    def simulate_ack(self, message_id: str, level: int) -> None:
        self._publish(MessageAckChanged(message_id, level))

    def simulate_reaction(self, message_id: str, emoji: str, sender: str = "") -> None:
        self._publish(MessageReactionInbound(message_id, emoji, sender))

    def simulate_edit(
        self,
        message_id: str,
        text: str,
        previous_text: str | None = None,
        sender: str = "",
    ) -> None:
        self._publish(MessageEditedInbound(message_id, text, previous_text, sender))


class MemoryTransportFactory:
    """Factory de MemoryTransport; guarda todos os adapters criados."""

    def __init__(self, auto_pairing: bool = True) -> None:
        self._auto_pairing = auto_pairing
        self.created: list[MemoryTransport] = []

    def __call__(self, instance_id: str, sink: EventSink) -> MemoryTransport:
        transport = MemoryTransport(instance_id, sink, auto_pairing=self._auto_pairing)
        self.created.append(transport)
        return transport

    def for_instance(self, instance_id: str) -> list[MemoryTransport]:
        return [t for t in self.created if t.instance_id == instance_id]

    def latest(self, instance_id: str) -> MemoryTransport:
        """Adapter mais recente da instância (geração corrente).

        Raises:
            KeyError: Nenhum adapter criado para a instância
        """
        transports = self.for_instance(instance_id)
        if not transports:
            raise KeyError(instance_id)
        return transports[-1]
