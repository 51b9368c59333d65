"""Eventos consumidos e emitidos pelo ciclo de vida de instâncias.

Três famílias:
- Eventos de transporte: emitidos pelo adapter do provedor.
- Eventos internos: gerados pelo próprio lifecycle (timer de pareamento,
  confirmação de envio) e enfileirados na mesma fila, preservando o
  escritor único por instância.
- Tipos de evento de domínio: o que chega ao webhook.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.instances.models import AccountInfo


class AckLevel(IntEnum):
    """Nível de confirmação de entrega reportado pelo transporte."""

    ERROR = -1
    PENDING = 0
    SERVER = 1
    DEVICE = 2
    READ = 3
    PLAYED = 4


# Abaixo disso a instância é considerada degradada
DELIVERED_ACK_LEVEL = AckLevel.DEVICE

# Motivos de desconexão que significam logout remoto (sem reconexão)
LOGOUT_REASONS: frozenset[str] = frozenset({"LOGOUT", "LOGGED_OUT", "UNPAIRED", "401"})

CONNECT_FAILED_REASON = "connect_failed"


def is_logout_reason(reason: str | int | None) -> bool:
    """Verifica se o motivo de desconexão indica logout remoto."""
    if reason is None:
        return False
    return str(reason).strip().upper() in LOGOUT_REASONS


class DomainEventKind(StrEnum):
    """Tipos de evento entregues ao webhook da instância."""

    PAIRING_REQUESTED = "pairing_requested"
    AUTHENTICATED = "authenticated"
    CONNECTION_READY = "connection_ready"
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_SENT = "message_sent"
    DISCONNECTED = "disconnected"
    AUTH_FAILURE = "auth_failure"


class TerminationReason(StrEnum):
    """Motivo pelo qual uma instância chegou a TERMINATED."""

    TEARDOWN = "teardown"
    REMOTE_LOGOUT = "remote_logout"
    AUTH_FAILURE = "auth_failure"
    PAIRING_EXPIRED = "pairing_expired"
    RECONNECT_EXHAUSTED = "reconnect_exhausted"
    RECONNECTING = "reconnecting"
    SHUTDOWN = "shutdown"


# ──────────────────────────────────────────────────────────────────────────────
# Eventos de transporte
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PairingChallenge:
    """Provedor emitiu um QR/código de pareamento."""

    payload: str


@dataclass(frozen=True, slots=True)
class Authenticated:
    """Credencial aceita pelo provedor."""


@dataclass(frozen=True, slots=True)
class Ready:
    """Socket aberto e conta identificada."""

    identity: AccountInfo


@dataclass(frozen=True, slots=True)
class LinkLost:
    """Conexão com o provedor perdida."""

    reason: str = "unknown"

    @property
    def is_logout(self) -> bool:
        return is_logout_reason(self.reason)


@dataclass(frozen=True, slots=True)
class AuthFailure:
    """Provedor rejeitou a credencial restaurada."""

    message: str = ""


@dataclass(frozen=True, slots=True)
class MessageInbound:
    """Mensagem bruta criada na conta (recebida ou enviada pelo aparelho)."""

    raw: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class MessageAckChanged:
    """Nível de confirmação de uma mensagem enviada mudou."""

    message_id: str
    level: int


@dataclass(frozen=True, slots=True)
class MessageReactionInbound:
    """Reação recebida em uma mensagem."""

    message_id: str
    emoji: str
    sender: str = ""


@dataclass(frozen=True, slots=True)
class MessageEditedInbound:
    """Mensagem editada pelo remetente."""

    message_id: str
    text: str
    previous_text: str | None = None
    sender: str = ""


# ──────────────────────────────────────────────────────────────────────────────
# Eventos internos
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PairingExpired:
    """Janela de pareamento esgotada sem confirmação."""


@dataclass(frozen=True, slots=True)
class OutboundRecorded:
    """Envio via API concluído; registra id e notifica o webhook."""

    message_id: str
    destination: str
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


TransportEvent = (
    PairingChallenge
    | Authenticated
    | Ready
    | LinkLost
    | AuthFailure
    | MessageInbound
    | MessageAckChanged
    | MessageReactionInbound
    | MessageEditedInbound
)

LifecycleEvent = TransportEvent | PairingExpired | OutboundRecorded
