"""Marcação do estado de download na M-Notification.ind persistida.

Leitores do store (ex.: UI) acompanham o progresso pela coluna status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain import columns

if TYPE_CHECKING:
    from app.protocols.message_store import MessageStoreProtocol

logger = logging.getLogger(__name__)

VALID_DOWNLOAD_STATES = frozenset({
    columns.STATE_UNSTARTED,
    columns.STATE_DOWNLOADING,
    columns.STATE_TRANSIENT_FAILURE,
    columns.STATE_PERMANENT_FAILURE,
})


async def mark_state(store: MessageStoreProtocol, uri: str, state: int) -> bool:
    """Atualiza o status de download da notificação.

    Returns:
        True se o registro foi atualizado; False se não existe mais.

    Raises:
        ValueError: Estado desconhecido.
    """
    if state not in VALID_DOWNLOAD_STATES:
        raise ValueError(f"Estado de download inválido: {state:#x}")

    updated = await store.update(uri, {columns.STATUS: state})
    if not updated:
        logger.warning("download_state_target_missing", extra={"uri": uri, "state": state})
        return False

    logger.debug("download_state_marked", extra={"uri": uri, "state": state})
    return True
