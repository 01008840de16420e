"""Casos de uso MMS (transações de retrieve)."""

from app.use_cases.mms.retrieve_transaction import RetrieveTransaction
from app.use_cases.mms.transaction import (
    RETRIEVE_TRANSACTION,
    Transaction,
    active_transaction_count,
    drain_transactions,
)

__all__ = [
    "RETRIEVE_TRANSACTION",
    "RetrieveTransaction",
    "Transaction",
    "active_transaction_count",
    "drain_transactions",
]
