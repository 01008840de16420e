"""Detecção de M-Retrieve.conf já recebida (entrega duplicada pelo MMSC)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain import columns
from app.domain.pdu import MESSAGE_TYPE_RETRIEVE_CONF

if TYPE_CHECKING:
    from app.domain.pdu import RetrieveConf
    from app.protocols.message_store import MessageStoreProtocol

logger = logging.getLogger(__name__)


async def is_duplicate_message(store: MessageStoreProtocol, conf: RetrieveConf) -> bool:
    """Verifica se já existe mensagem com o mesmo Message-ID.

    Sem Message-ID não há como deduplicar: trata como nova.

    Args:
        store: Store de mensagens
        conf: M-Retrieve.conf recém parseada

    Returns:
        True se o mesmo Message-ID já foi recebido como retrieve-conf.
    """
    if conf.message_id is None:
        return False

    message_id = conf.message_id.decode("utf-8", errors="replace")
    existing = await store.find_one(
        columns.TABLE_PDU,
        {
            columns.MESSAGE_ID: message_id,
            columns.MESSAGE_TYPE: MESSAGE_TYPE_RETRIEVE_CONF,
        },
    )
    if existing is not None:
        logger.info("retrieve_duplicate_detected", extra={"existing_id": existing.get(columns.ID)})
        return True
    return False
