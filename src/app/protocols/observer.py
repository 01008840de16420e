"""Protocolo de observers de transação."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.use_cases.mms.transaction import Transaction


class TransactionObserverProtocol(Protocol):
    """Recebe exatamente uma notificação, após a finalização da transação."""

    async def update(self, transaction: Transaction) -> None: ...
