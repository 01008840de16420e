"""
Exports públicos do módulo fsm/states.

Estados canônicos de transação MMS.
"""

from fsm.states.transaction import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    TransactionState,
    is_terminal,
    is_valid_state,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "TransactionState",
    "is_terminal",
    "is_valid_state",
]
