"""
Regras de transição válidas entre estados de instância.

Este módulo define o grafo do ciclo de vida: quais estados podem
suceder cada estado. Reconexão não é uma transição: ela descarta o
registro DISCONNECTED e cria um novo em INITIALIZING.
"""

from fsm.states.instance import TERMINAL_STATES, InstanceState

TransitionMap = dict[InstanceState, frozenset[InstanceState]]

# Chave: estado de origem
# Valor: conjunto de estados de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    InstanceState.INITIALIZING: frozenset({
        InstanceState.AWAITING_PAIRING,
        InstanceState.AUTHENTICATED,
        InstanceState.CONNECTED,  # sessão restaurada sem novo pareamento
        InstanceState.INVALID,
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.AWAITING_PAIRING: frozenset({
        InstanceState.AWAITING_PAIRING,  # provedor renova o QR periodicamente
        InstanceState.AUTHENTICATED,
        InstanceState.CONNECTED,
        InstanceState.INVALID,  # probe de liveness falhou
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.AUTHENTICATED: frozenset({
        InstanceState.CONNECTED,
        InstanceState.INVALID,
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.CONNECTED: frozenset({
        InstanceState.DEGRADED,
        InstanceState.INVALID,
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.DEGRADED: frozenset({
        InstanceState.CONNECTED,
        InstanceState.INVALID,
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.INVALID: frozenset({
        InstanceState.AWAITING_PAIRING,
        InstanceState.CONNECTED,
        InstanceState.DISCONNECTED,
        InstanceState.TERMINATED,
    }),

    InstanceState.DISCONNECTED: frozenset({
        InstanceState.TERMINATED,
    }),

    InstanceState.TERMINATED: frozenset(),
}


def get_valid_targets(state: InstanceState) -> frozenset[InstanceState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de estados de destino permitidos (vazio se terminal)
    """
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: InstanceState, to_state: InstanceState) -> bool:
    """
    Verifica se uma transição é válida segundo o grafo.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino

    Returns:
        True se a transição é permitida, False caso contrário
    """
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todos os estados do enum estão no mapa
    - Estados terminais têm conjunto vazio
    - Todo estado não-terminal alcança TERMINATED diretamente

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in InstanceState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    for from_state, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, InstanceState):
                errors.append(
                    f"Transição {from_state.name} → {target}: destino inválido"
                )
        if from_state not in TERMINAL_STATES and InstanceState.TERMINATED not in targets:
            errors.append(f"Estado {from_state.name} não alcança TERMINATED")

    return errors
