"""Modelos de PDU MMS (OMA-MMS-ENC) usados pelo fluxo de retrieve.

Somente os tipos que o motor de retrieve consome ou produz:
- RetrieveConf (M-Retrieve.conf): mensagem completa vinda do MMSC
- AcknowledgeInd (M-Acknowledge.ind): confirmação de recebimento
- NotificationInd (M-Notification.ind): aviso de mensagem disponível

Partes (PduPart) são mutáveis: o normalizador de charset altera
dados e charset juntos via set_text().
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain import charsets

# X-Mms-Message-Type
MESSAGE_TYPE_SEND_REQ = 0x80
MESSAGE_TYPE_SEND_CONF = 0x81
MESSAGE_TYPE_NOTIFICATION_IND = 0x82
MESSAGE_TYPE_NOTIFYRESP_IND = 0x83
MESSAGE_TYPE_RETRIEVE_CONF = 0x84
MESSAGE_TYPE_ACKNOWLEDGE_IND = 0x85
MESSAGE_TYPE_DELIVERY_IND = 0x86

# X-Mms-MMS-Version: major nos 3 bits altos, minor nos 4 baixos
MMS_VERSION_1_0 = (1 << 4) | 0
MMS_VERSION_1_1 = (1 << 4) | 1
MMS_VERSION_1_2 = (1 << 4) | 2
CURRENT_MMS_VERSION = MMS_VERSION_1_2

TEXT_HTML = "text/html"
TEXT_PLAIN = "text/plain"
MULTIPART_RELATED = "application/vnd.wap.multipart.related"
MULTIPART_MIXED = "application/vnd.wap.multipart.mixed"


@dataclass(slots=True)
class PduPart:
    """Parte de conteúdo de uma mensagem (texto, imagem, SMIL...)."""

    content_type: bytes
    data: bytes = b""
    charset: int = charsets.ANY_CHARSET
    content_location: bytes | None = None
    content_id: bytes | None = None
    name: bytes | None = None

    @property
    def content_type_str(self) -> str:
        """Content-type decodificado (ASCII)."""
        return self.content_type.decode("ascii", errors="replace")

    def set_text(self, data: bytes, charset: int) -> None:
        """Atualiza payload e charset juntos."""
        self.data, self.charset = data, charset


@dataclass(slots=True)
class PduBody:
    """Corpo multipart da mensagem."""

    parts: list[PduPart] = field(default_factory=list)

    def add_part(self, part: PduPart) -> None:
        self.parts.append(part)

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self):
        return iter(self.parts)


@dataclass
class GenericPdu:
    """Campos de header comuns a todos os PDUs."""

    message_type: int
    mms_version: int = CURRENT_MMS_VERSION
    from_address: str | None = None


@dataclass
class NotificationInd(GenericPdu):
    """M-Notification.ind (push WAP com o content-location)."""

    message_type: int = MESSAGE_TYPE_NOTIFICATION_IND
    transaction_id: bytes | None = None
    content_location: bytes | None = None
    message_size: int | None = None
    expiry: int | None = None


@dataclass
class RetrieveConf(GenericPdu):
    """M-Retrieve.conf — mensagem completa devolvida pelo MMSC."""

    message_type: int = MESSAGE_TYPE_RETRIEVE_CONF
    message_id: bytes | None = None
    transaction_id: bytes | None = None
    date: int | None = None
    subject: str | None = None
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    content_type: bytes = MULTIPART_MIXED.encode("ascii")
    body: PduBody | None = None


@dataclass
class AcknowledgeInd(GenericPdu):
    """M-Acknowledge.ind enviado ao MMSC após o download."""

    message_type: int = MESSAGE_TYPE_ACKNOWLEDGE_IND
    transaction_id: bytes = b""
    report_allowed: bool | None = None
