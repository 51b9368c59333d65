"""
Máquina de estados (FSMStateMachine) do ciclo de vida de instâncias.

Valida cada transição contra o grafo e os guards e mantém histórico
rastreável. Não conhece adapters nem webhooks: quem decide *quando*
transitar é o lifecycle da instância.
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.instance import DEFAULT_INITIAL_STATE, InstanceState
from fsm.transitions.rules import is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

# Histórico é limitado: instâncias oscilam CONNECTED ⇄ DEGRADED por dias
DEFAULT_HISTORY_LIMIT = 200


class FSMStateMachine:
    """
    Máquina de estados de uma instância.

    Attributes:
        current_state: Estado atual da máquina
        history: Histórico de transições realizadas (mais recentes ao fim)
    """

    __slots__ = ("_current_state", "_history", "_history_limit", "_instance_id")

    def __init__(
        self,
        initial_state: InstanceState | None = None,
        instance_id: str = "",
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_state: Estado inicial (usa DEFAULT_INITIAL_STATE se None)
            instance_id: Identificador da instância para logs
            history_limit: Máximo de transições mantidas no histórico
        """
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []
        self._history_limit = history_limit
        self._instance_id = instance_id

    @property
    def current_state(self) -> InstanceState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def instance_id(self) -> str:
        """Identificador da instância."""
        return self._instance_id

    def transition(
        self,
        target: InstanceState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho (ex: 'ready', 'ack_changed')
            metadata: Dados adicionais para auditoria

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult.rejected(
                f"Transição inválida: {self._current_state.name} → {target.name}"
            )

        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult.rejected(guard_result.reason or "guard_denied")

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)
        if len(self._history) > self._history_limit:
            del self._history[: len(self._history) - self._history_limit]

        return TransitionResult.ok(transition)


def create_fsm(
    instance_id: str,
    initial_state: InstanceState | None = None,
) -> FSMStateMachine:
    """Factory para criar a FSM de uma instância."""
    return FSMStateMachine(
        initial_state=initial_state,
        instance_id=instance_id,
    )
