"""Recycler: limite de mensagens MMS por conversa (auto-delete).

Depois de persistir uma mensagem nova, remove as mais antigas da
mesma thread que excedem o limite. Mensagens travadas (locked) nunca
são removidas, mas contam para o total.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain import columns
from app.domain.locator import build_locator
from config.logging import log_best_effort_failure

if TYPE_CHECKING:
    from app.protocols.message_store import MessageStoreProtocol
    from config.settings import RetentionSettings

logger = logging.getLogger(__name__)


class MmsRecycler:
    """Aplicador de retenção por thread.

    Args:
        settings: Limite por thread e flag de auto-delete.
    """

    def __init__(self, settings: RetentionSettings) -> None:
        self._settings = settings

    @property
    def limit(self) -> int:
        return self._settings.mms_limit_per_thread

    async def enforce_limit(self, store: MessageStoreProtocol, uri: str) -> None:
        """Remove mensagens antigas da thread de `uri` (best-effort)."""
        if not self._settings.auto_delete:
            return
        try:
            deleted = await self._delete_old_messages_in_same_thread(store, uri)
        except Exception as exc:
            log_best_effort_failure(logger, "enforce_retention_limit", exc, uri=uri)
            return
        if deleted:
            logger.info("retention_messages_deleted", extra={"uri": uri, "deleted": deleted})

    async def _delete_old_messages_in_same_thread(
        self,
        store: MessageStoreProtocol,
        uri: str,
    ) -> int:
        record = await store.get(uri)
        if record is None or record.get(columns.THREAD_ID) is None:
            return 0

        messages = await store.find(
            columns.TABLE_PDU,
            {columns.THREAD_ID: record[columns.THREAD_ID]},
            order_by=columns.DATE,
        )
        excess = len(messages) - self.limit
        if excess <= 0:
            return 0

        deleted = 0
        # Mais antigas primeiro; locked são preservadas
        for message in messages:
            if deleted >= excess:
                break
            if message.get(columns.LOCKED):
                continue
            deleted += await store.delete(build_locator(message[columns.ID]))
        return deleted
