"""
Exports públicos do módulo fsm/states.

Estados canônicos do ciclo de vida de instâncias.
"""

from fsm.states.instance import (
    ACTIVE_STATES,
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    InstanceState,
    is_active,
    is_terminal,
    is_valid_state,
)

__all__ = [
    "ACTIVE_STATES",
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "InstanceState",
    "is_active",
    "is_terminal",
    "is_valid_state",
]
