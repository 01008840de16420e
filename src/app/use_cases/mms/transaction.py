"""Base observável de transações MMS.

Cada transação:
- tem uma FSM própria (INITIALIZED → DOWNLOADING → SUCCESS|FAILED)
- roda numa asyncio.Task independente, disparada por start()
- notifica seus observers exatamente uma vez, após finalizar

Observers são uma lista de registro (back-reference), não ownership:
quem observa não controla o ciclo de vida da transação.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from fsm.manager import TransactionStateMachine

if TYPE_CHECKING:
    from app.protocols.observer import TransactionObserverProtocol
    from fsm.states import TransactionState
    from fsm.types import TransactionStatus

logger = logging.getLogger(__name__)

RETRIEVE_TRANSACTION = "retrieve"

_active_tasks: set[asyncio.Task[Any]] = set()


class Transaction(ABC):
    """Transação MMS single-shot com observers.

    Args:
        transaction_id: Identificador da transação (ex.: content-location)
    """

    transaction_type: ClassVar[str]

    def __init__(self, transaction_id: str) -> None:
        self._transaction_id = transaction_id
        self._state_machine = TransactionStateMachine(transaction_id)
        self._observers: list[TransactionObserverProtocol] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def transaction_id(self) -> str:
        return self._transaction_id

    @property
    def status(self) -> TransactionStatus:
        """Snapshot imutável do estado e do locator de resultado."""
        return self._state_machine.status

    @property
    def state(self) -> TransactionState:
        return self._state_machine.current_state

    @property
    def state_machine(self) -> TransactionStateMachine:
        return self._state_machine

    @property
    def observers(self) -> tuple[TransactionObserverProtocol, ...]:
        return tuple(self._observers)

    def attach(self, observer: TransactionObserverProtocol) -> None:
        """Registra observer (idempotente)."""
        if observer not in self._observers:
            self._observers.append(observer)

    def detach(self, observer: TransactionObserverProtocol) -> None:
        """Remove observer, se registrado."""
        with contextlib.suppress(ValueError):
            self._observers.remove(observer)

    async def notify_observers(self) -> None:
        """Notifica cada observer uma vez; falha de um não impede os demais."""
        for observer in list(self._observers):
            try:
                await observer.update(self)
            except Exception as exc:
                logger.error(
                    "transaction_observer_failed",
                    extra={
                        "transaction_type": self.transaction_type,
                        "observer": type(observer).__name__,
                        "error_type": type(exc).__name__,
                    },
                )

    def is_equivalent(self, other: Transaction) -> bool:
        """Mesma classe e mesmo transaction_id (evita transações duplicadas)."""
        return type(self) is type(other) and self._transaction_id == other._transaction_id

    def start(self) -> asyncio.Task[None]:
        """Dispara a execução em background e retorna imediatamente.

        Precisa de um event loop rodando.

        Raises:
            RuntimeError: Se a transação já foi iniciada.
        """
        if self._task is not None:
            raise RuntimeError(f"Transação {self.transaction_type} já iniciada")

        task = asyncio.create_task(
            self.run(),
            name=f"mms-{self.transaction_type}-{self._transaction_id}",
        )
        self._task = task
        _active_tasks.add(task)
        task.add_done_callback(_on_transaction_task_done)
        logger.info(
            "transaction_scheduled",
            extra={
                "transaction_type": self.transaction_type,
                "active_tasks": len(_active_tasks),
            },
        )
        return task

    process = start

    @abstractmethod
    async def run(self) -> None:
        """Executa a transação até um estado terminal. Nunca levanta."""


def _on_transaction_task_done(task: asyncio.Task[Any]) -> None:
    _active_tasks.discard(task)
    with contextlib.suppress(asyncio.CancelledError):
        exc = task.exception()
        if exc is not None:
            logger.error(
                "transaction_task_crashed",
                extra={
                    "task": task.get_name(),
                    "error_type": type(exc).__name__,
                    "active_tasks": len(_active_tasks),
                },
            )


def active_transaction_count() -> int:
    """Quantidade de transações em execução."""
    return len(_active_tasks)


async def drain_transactions(timeout_seconds: float = 30.0) -> None:
    """Aguarda transações pendentes durante shutdown do processo."""
    if not _active_tasks:
        return

    pending_now = list(_active_tasks)
    logger.info(
        "transaction_shutdown_wait",
        extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
    )
    _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
    if not pending:
        return

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    logger.warning("transaction_shutdown_cancelled", extra={"cancelled_tasks": len(pending)})
