"""Construção e envio da M-Acknowledge.ind.

Sem X-Mms-Transaction-Id na M-Retrieve.conf o proxy-relay não
requer acknowledgement: no-op silencioso, não é erro.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain.pdu import CURRENT_MMS_VERSION, AcknowledgeInd
from config.logging import mask_address

if TYPE_CHECKING:
    from app.domain.pdu import RetrieveConf
    from app.protocols.pdu_codec import PduComposerProtocol
    from app.protocols.transport import MmsTransportProtocol

logger = logging.getLogger(__name__)


def build_acknowledge_ind(conf: RetrieveConf, local_number: str) -> AcknowledgeInd | None:
    """Monta a M-Acknowledge.ind, ou None quando não requerida.

    Args:
        conf: M-Retrieve.conf recebida
        local_number: Número da linha local (campo From)
    """
    if conf.transaction_id is None:
        return None

    return AcknowledgeInd(
        mms_version=CURRENT_MMS_VERSION,
        transaction_id=conf.transaction_id,
        from_address=local_number,
    )


async def send_acknowledge_ind(
    conf: RetrieveConf,
    *,
    composer: PduComposerProtocol,
    transport: MmsTransportProtocol,
    local_number: str,
    content_location: str,
    notify_wap_mmsc: bool = False,
) -> bool:
    """Envia a M-Acknowledge.ind ao MMSC se requerida.

    Com notify_wap_mmsc o envio vai para o content-location usado no
    download; caso contrário, para o endpoint padrão do transporte.
    Erros de compose/envio propagam para o caller.

    Returns:
        True se um acknowledgement foi enviado.
    """
    ack = build_acknowledge_ind(conf, local_number)
    if ack is None:
        logger.debug("acknowledge_not_required")
        return False

    pdu = composer.make(ack)
    if notify_wap_mmsc:
        await transport.send(pdu, content_location)
    else:
        await transport.send(pdu)

    logger.info(
        "acknowledge_sent",
        extra={
            "explicit_endpoint": notify_wap_mmsc,
            "from": mask_address(local_number),
            "size_bytes": len(pdu),
        },
    )
    return True
