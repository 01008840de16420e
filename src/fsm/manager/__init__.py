"""
Exports públicos do módulo fsm/manager.

Máquina de estados (TransactionStateMachine) de transações MMS.
"""

from fsm.manager.machine import TransactionStateMachine

__all__ = [
    "TransactionStateMachine",
]
