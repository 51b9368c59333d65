"""
Tipos para representar transições de estado de instância.

Cada transição efetivada gera um StateTransition imutável que compõe
o histórico da máquina e alimenta logs estruturados.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.instance import InstanceState

# Chaves de metadata que nunca saem em log (QR e conteúdo de mensagens)
REDACTED_METADATA_KEYS: frozenset[str] = frozenset({
    "pairing_payload",
    "text",
    "content",
})

REDACTED = "[redacted]"


@dataclass(frozen=True, slots=True)
class StateTransition:
    """
    Registro imutável de uma mudança de estado.

    Attributes:
        from_state: Estado de origem da transição
        to_state: Estado de destino da transição
        trigger: Evento que causou a transição (ex: 'pairing_challenge', 'link_lost')
        metadata: Dados adicionais para auditoria (ex: motivo da desconexão, nível de ack)
        timestamp: Momento da transição (UTC)
    """

    from_state: InstanceState
    to_state: InstanceState
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    @property
    def is_refresh(self) -> bool:
        """Reentrada no mesmo estado (novo QR em AWAITING_PAIRING)."""
        return self.from_state == self.to_state

    def to_log_dict(self) -> dict[str, Any]:
        """Representação para logging estruturado, com metadata sensível mascarada."""
        return {
            "from_state": self.from_state.name,
            "to_state": self.to_state.name,
            "trigger": self.trigger,
            "timestamp": self.timestamp.isoformat(),
            "metadata": {
                key: REDACTED if key in REDACTED_METADATA_KEYS else value
                for key, value in self.metadata.items()
            },
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma tentativa de transição.

    Attributes:
        success: Se a transição foi bem-sucedida
        transition: Dados da transição (se success=True)
        error_reason: Motivo da recusa (se success=False)
    """

    success: bool
    transition: StateTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.transition is None:
            raise ValueError("Transição bem-sucedida deve incluir transition")
        if not self.success and self.error_reason is None:
            raise ValueError("Transição recusada deve incluir error_reason")

    @classmethod
    def ok(cls, transition: StateTransition) -> "TransitionResult":
        return cls(success=True, transition=transition)

    @classmethod
    def rejected(cls, reason: str) -> "TransitionResult":
        return cls(success=False, error_reason=reason)
