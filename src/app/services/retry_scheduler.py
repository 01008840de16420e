"""RetryScheduler: observer que agenda nova tentativa de download.

Anexado a toda RetrieveTransaction na construção. Ao receber FAILED,
se a notificação ainda existe (falha de rede/parse), grava o próximo
horário de tentativa; quando o esquema se esgota, marca falha
permanente. No caminho de duplicata a notificação já foi removida e
nada é agendado. Reexecutar a transação cabe a quem consome
due_notifications().
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from app.domain import columns
from app.domain.locator import build_locator
from fsm.states import TransactionState

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.message_store import MessageStoreProtocol
    from app.use_cases.mms.transaction import Transaction
    from config.settings import RetrySettings

logger = logging.getLogger(__name__)


class RetryScheduler:
    """Agenda retries de transações de retrieve falhas.

    Args:
        store: Store onde a notificação vive
        settings: Esquema de atrasos entre tentativas
        clock: Fonte de tempo em segundos (injetável em testes)
    """

    def __init__(
        self,
        store: MessageStoreProtocol,
        settings: RetrySettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock

    async def update(self, transaction: Transaction) -> None:
        """Callback de observer: chamado uma vez por transação finalizada."""
        status = transaction.status
        if status.state != TransactionState.FAILED or status.content_uri is None:
            return

        record = await self._store.get(status.content_uri)
        if record is None:
            logger.info(
                "retry_skipped_notification_gone",
                extra={"uri": status.content_uri},
            )
            return

        await self._schedule_retry(status.content_uri, int(record.get(columns.RETRY_INDEX) or 0))

    async def _schedule_retry(self, uri: str, previous_index: int) -> None:
        retry_index = previous_index + 1
        scheme = self._settings.scheme_seconds

        if retry_index < len(scheme):
            due_time = int(self._clock()) + scheme[retry_index]
            fields = {
                columns.RETRY_INDEX: retry_index,
                columns.DUE_TIME: due_time,
                columns.STATUS: columns.STATE_TRANSIENT_FAILURE,
            }
            logger.info(
                "retry_scheduled",
                extra={"uri": uri, "retry_index": retry_index, "due_time": due_time},
            )
        else:
            fields = {
                columns.RETRY_INDEX: retry_index,
                columns.DUE_TIME: 0,
                columns.STATUS: columns.STATE_PERMANENT_FAILURE,
            }
            logger.warning("retry_exhausted", extra={"uri": uri, "retry_index": retry_index})

        await self._store.update(uri, fields)

    async def due_notifications(self) -> list[str]:
        """Locators de notificações com retry vencido."""
        now = int(self._clock())
        pending = await self._store.find(
            columns.TABLE_PDU,
            {columns.STATUS: columns.STATE_TRANSIENT_FAILURE},
            order_by=columns.DUE_TIME,
        )
        return [
            build_locator(record[columns.ID])
            for record in pending
            if int(record.get(columns.DUE_TIME) or 0) <= now
        ]
