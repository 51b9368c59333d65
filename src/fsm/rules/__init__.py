"""
Exports públicos do módulo fsm/rules.

Guards aplicados às transições de estado de instância.
"""

from fsm.rules.guards import (
    DEFAULT_GUARDS,
    REFLEXIVE_STATES,
    Guard,
    GuardResult,
    evaluate_guards,
    guard_same_state,
    guard_terminal_state,
    guard_valid_state,
)

__all__ = [
    "DEFAULT_GUARDS",
    "REFLEXIVE_STATES",
    "Guard",
    "GuardResult",
    "evaluate_guards",
    "guard_same_state",
    "guard_terminal_state",
    "guard_valid_state",
]
