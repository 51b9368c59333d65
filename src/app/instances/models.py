"""Modelos de instância: registro mutável e visões imutáveis.

O InstanceRecord é o contêiner autoritativo de estado de uma instância.
Apenas o lifecycle dono do registro escreve nele; todo caminho de
leitura externo recebe um InstanceSnapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from fsm import ACTIVE_STATES, FSMStateMachine, InstanceState, create_fsm

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fsm import StateTransition, TransitionResult

JID_SUFFIX = "@s.whatsapp.net"


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Identidade da conta autenticada no transporte."""

    number: str
    display_name: str | None = None
    platform: str | None = None

    @property
    def jid(self) -> str:
        """Endereço da própria conta (usado no probe de liveness)."""
        if "@" in self.number:
            return self.number
        return f"{self.number}{JID_SUFFIX}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "display_name": self.display_name,
            "platform": self.platform,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AccountInfo:
        """Constrói a partir do dict de identidade do provedor.

        Aceita `number`, `wid` (str ou {"user": ...}) e `pushname`.
        """
        number = data.get("number")
        if not number:
            wid = data.get("wid")
            number = wid.get("user") if isinstance(wid, dict) else wid
        if not number:
            raise ValueError("identidade sem número")
        return cls(
            number=str(number),
            display_name=data.get("display_name") or data.get("pushname"),
            platform=data.get("platform"),
        )


@dataclass(frozen=True, slots=True)
class InstanceSummary:
    """Resumo para listagem."""

    instance_id: str
    name: str
    state: InstanceState

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.instance_id, "name": self.name, "state": self.state.value}


@dataclass(frozen=True, slots=True)
class InstanceSnapshot:
    """Cópia imutável do registro num instante."""

    instance_id: str
    name: str
    state: InstanceState
    pairing_payload: str | None
    account_info: AccountInfo | None
    last_delivery_ack: int | None
    last_message_id: str | None
    webhook_configured: bool
    generation: int
    reconnect_attempts: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.instance_id,
            "name": self.name,
            "state": self.state.value,
            "pairing_payload": self.pairing_payload,
            "account_info": self.account_info.to_dict() if self.account_info else None,
            "last_delivery_ack": self.last_delivery_ack,
            "last_message_id": self.last_message_id,
            "webhook_configured": self.webhook_configured,
            "generation": self.generation,
            "reconnect_attempts": self.reconnect_attempts,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class DeliveryHandle:
    """Resultado de um envio aceito pelo transporte."""

    instance_id: str
    message_id: str
    destination: str
    timestamp: datetime


@dataclass(slots=True)
class InstanceRecord:
    """Estado autoritativo de uma instância.

    `state`, `pairing_payload` e `account_info` só mudam via
    `apply_transition`, que deriva os campos de payload do estado alvo:
    payload de pareamento existe apenas em AWAITING_PAIRING e dados da
    conta apenas em CONNECTED/DEGRADED.
    """

    instance_id: str
    name: str
    webhook_url: str = ""
    generation: int = 0
    reconnect_attempts: int = 0
    teardown_requested: bool = False
    last_delivery_ack: int | None = None
    last_message_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    _machine: FSMStateMachine = field(init=False, repr=False, compare=False)
    _pairing_payload: str | None = field(default=None, init=False, repr=False)
    _account_info: AccountInfo | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._machine = create_fsm(self.instance_id)

    @property
    def state(self) -> InstanceState:
        return self._machine.current_state

    @property
    def pairing_payload(self) -> str | None:
        return self._pairing_payload

    @property
    def account_info(self) -> AccountInfo | None:
        return self._account_info

    @property
    def history(self) -> list[StateTransition]:
        return self._machine.history

    def apply_transition(
        self,
        target: InstanceState,
        trigger: str,
        *,
        pairing_payload: str | None = None,
        account_info: AccountInfo | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Transita o estado e ajusta os campos derivados.

        Raises:
            ValueError: AWAITING_PAIRING sem payload, ou estado ativo sem conta.
        """
        if target is InstanceState.AWAITING_PAIRING and not pairing_payload:
            raise ValueError("AWAITING_PAIRING requer pairing_payload")
        if target in ACTIVE_STATES and account_info is None and self._account_info is None:
            raise ValueError(f"{target} requer account_info")

        result = self._machine.transition(target, trigger, metadata)
        if not result.success:
            return result

        self._pairing_payload = (
            pairing_payload if target is InstanceState.AWAITING_PAIRING else None
        )
        if target in ACTIVE_STATES:
            if account_info is not None:
                self._account_info = account_info
        else:
            self._account_info = None
        self.updated_at = datetime.now(UTC)
        return result

    def summary(self) -> InstanceSummary:
        return InstanceSummary(instance_id=self.instance_id, name=self.name, state=self.state)

    def snapshot(self) -> InstanceSnapshot:
        return InstanceSnapshot(
            instance_id=self.instance_id,
            name=self.name,
            state=self.state,
            pairing_payload=self._pairing_payload,
            account_info=self._account_info,
            last_delivery_ack=self.last_delivery_ack,
            last_message_id=self.last_message_id,
            webhook_configured=bool(self.webhook_url),
            generation=self.generation,
            reconnect_attempts=self.reconnect_attempts,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
