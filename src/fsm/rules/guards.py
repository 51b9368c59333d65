"""
Guards para transições de estado de instância.

Guards são verificações adicionais ao grafo de transições. Cada guard
recebe origem e destino e pode negar a transição com um motivo legível.
"""

from collections.abc import Callable

from fsm.states.instance import TERMINAL_STATES, InstanceState

# Únicos estados que podem transitar para si mesmos
REFLEXIVE_STATES: frozenset[InstanceState] = frozenset({
    InstanceState.AWAITING_PAIRING,
})


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[InstanceState, InstanceState], GuardResult]


def guard_valid_state(
    from_state: InstanceState,
    to_state: InstanceState,
) -> GuardResult:
    """Guard: ambos os estados devem ser membros de InstanceState."""
    if not isinstance(from_state, InstanceState):
        return GuardResult.deny(f"Estado de origem inválido: {from_state}")

    if not isinstance(to_state, InstanceState):
        return GuardResult.deny(f"Estado de destino inválido: {to_state}")

    return GuardResult.allow()


def guard_terminal_state(
    from_state: InstanceState,
    to_state: InstanceState,
) -> GuardResult:
    """Guard: instância terminada não aceita mais transições."""
    del to_state
    if from_state in TERMINAL_STATES:
        return GuardResult.deny(
            f"Estado {from_state.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_same_state(
    from_state: InstanceState,
    to_state: InstanceState,
) -> GuardResult:
    """
    Guard: previne transição reflexiva.

    AWAITING_PAIRING é a exceção: cada novo QR emitido pelo provedor
    reentra no estado com um payload diferente.
    """
    if from_state in REFLEXIVE_STATES:
        return GuardResult.allow()

    if from_state == to_state:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_state.name} → {to_state.name}"
        )

    return GuardResult.allow()


# Aplicados em ordem; todos devem permitir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_state,
    guard_terminal_state,
    guard_same_state,
]


def evaluate_guards(
    from_state: InstanceState,
    to_state: InstanceState,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_state, to_state)
        if not result.allowed:
            return result

    return GuardResult.allow()
