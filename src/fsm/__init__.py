"""
Módulo FSM — máquina de estados do ciclo de vida de instâncias.

Estrutura:
    - states/: Definições dos estados (InstanceState enum)
    - transitions/: Grafo de transições (VALID_TRANSITIONS)
    - rules/: Guards
    - manager/: Máquina de estados (FSMStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

from fsm.manager import (
    FSMStateMachine,
    create_fsm,
)
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)
from fsm.states import (
    ACTIVE_STATES,
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    InstanceState,
    is_active,
    is_terminal,
    is_valid_state,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "ACTIVE_STATES",
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "FSMStateMachine",
    "GuardResult",
    "InstanceState",
    "StateTransition",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_active",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
