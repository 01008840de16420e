"""Protocolos e contratos do core da aplicação."""

from .message_store import MessageStoreProtocol, Record
from .observer import TransactionObserverProtocol
from .pdu_codec import PduComposerProtocol, PduParserProtocol, PduPersisterProtocol
from .retention import RetentionEnforcerProtocol
from .transport import MmsTransportProtocol

__all__ = [
    "MessageStoreProtocol",
    "MmsTransportProtocol",
    "PduComposerProtocol",
    "PduParserProtocol",
    "PduPersisterProtocol",
    "Record",
    "RetentionEnforcerProtocol",
    "TransactionObserverProtocol",
]
