"""Implementações MMS da camada infra (transporte HTTP e codec de PDU)."""

from app.infra.mms.http_transport import MmsHttpTransport
from app.infra.mms.pdu_composer import PduComposer
from app.infra.mms.pdu_parser import PduParser
from app.infra.mms.pdu_persister import StorePduPersister

__all__ = [
    "MmsHttpTransport",
    "PduComposer",
    "PduParser",
    "StorePduPersister",
]
