"""
Exports públicos do módulo fsm/types.

Tipos e estruturas de dados para transições de estado.
"""

from fsm.types.transition import StateTransition, TransactionStatus, TransitionResult

__all__ = [
    "StateTransition",
    "TransactionStatus",
    "TransitionResult",
]
