"""
Módulo FSM — Máquina de Estados das transações MMS.

Estrutura:
    - states/: Definições dos estados (TransactionState enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (TransactionStateMachine)
    - types/: Tipos de dados (StateTransition, TransactionStatus, TransitionResult)
"""

from fsm.manager import TransactionStateMachine
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    TransactionState,
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
    TransactionStatus,
    TransitionResult,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "GuardResult",
    "StateTransition",
    "TransactionState",
    "TransactionStateMachine",
    "TransactionStatus",
    "TransitionResult",
    "evaluate_guards",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
