"""Persistência de PDUs no store de mensagens.

Registros precisam ser serializáveis em JSON (store Redis): textos
são decodificados e o payload das partes vai em base64.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import TYPE_CHECKING, Any

from app.domain import columns
from app.domain.pdu import NotificationInd, PduPart, RetrieveConf

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.pdu import GenericPdu
    from app.protocols.message_store import MessageStoreProtocol, Record

logger = logging.getLogger(__name__)


def _text(value: bytes | None) -> str | None:
    return None if value is None else value.decode("utf-8", errors="replace")


def part_to_record(part: PduPart) -> dict[str, Any]:
    return {
        "content_type": part.content_type_str,
        "charset": part.charset,
        "data": base64.b64encode(part.data).decode("ascii"),
        "content_location": _text(part.content_location),
        "content_id": _text(part.content_id),
        "name": _text(part.name),
    }


def part_from_record(record: dict[str, Any]) -> PduPart:
    """Reconstrói a parte a partir do registro persistido."""

    def _raw(key: str) -> bytes | None:
        value = record.get(key)
        return None if value is None else value.encode("utf-8")

    return PduPart(
        content_type=record["content_type"].encode("ascii"),
        data=base64.b64decode(record.get("data", "")),
        charset=record.get("charset", 0),
        content_location=_raw("content_location"),
        content_id=_raw("content_id"),
        name=_raw("name"),
    )


class StorePduPersister:
    """Implementação de PduPersisterProtocol sobre MessageStoreProtocol.

    Args:
        store: Store de mensagens
        clock: Fonte de tempo em segundos (data padrão do registro)
    """

    def __init__(
        self,
        store: MessageStoreProtocol,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock

    async def persist(self, pdu: GenericPdu, msg_box: int) -> str:
        if isinstance(pdu, RetrieveConf):
            record = self._retrieve_conf_record(pdu)
        elif isinstance(pdu, NotificationInd):
            record = self._notification_record(pdu)
        else:
            raise ValueError(f"PDU não persistível: {type(pdu).__name__}")

        record[columns.MSG_BOX] = msg_box
        record[columns.THREAD_ID] = await self._store.get_or_create_thread_id(
            pdu.from_address or ""
        )
        uri = await self._store.insert(columns.TABLE_PDU, record)
        logger.info(
            "pdu_persisted",
            extra={"uri": uri, "message_type": pdu.message_type, "msg_box": msg_box},
        )
        return uri

    def _retrieve_conf_record(self, conf: RetrieveConf) -> Record:
        parts = [part_to_record(part) for part in conf.body] if conf.body else []
        return {
            columns.MESSAGE_TYPE: conf.message_type,
            columns.MESSAGE_ID: _text(conf.message_id),
            columns.TRANSACTION_ID: _text(conf.transaction_id),
            columns.DATE: conf.date if conf.date is not None else int(self._clock()),
            columns.FROM_ADDRESS: conf.from_address,
            columns.SUBJECT: conf.subject,
            columns.CONTENT_TYPE: conf.content_type.decode("ascii", errors="replace"),
            columns.PARTS: parts,
            columns.CONTENT_LOCATION: None,
            columns.LOCKED: False,
        }

    def _notification_record(self, notification: NotificationInd) -> Record:
        return {
            columns.MESSAGE_TYPE: notification.message_type,
            columns.TRANSACTION_ID: _text(notification.transaction_id),
            columns.CONTENT_LOCATION: _text(notification.content_location),
            columns.DATE: int(self._clock()),
            columns.FROM_ADDRESS: notification.from_address,
            columns.STATUS: columns.STATE_UNSTARTED,
            columns.RETRY_INDEX: 0,
            columns.LOCKED: False,
        }
