"""Fakes in-memory do fluxo MMS para testes deterministas."""

from __future__ import annotations

from app.domain import columns
from app.domain.pdu import MESSAGE_TYPE_NOTIFICATION_IND, PduBody, PduPart, RetrieveConf
from app.infra.stores import MemoryMessageStore
from utils.errors import TransportError

CONTENT_LOCATION = "http://mmsc.example/retrieve/abc123"


class FakeTransport:
    """Transporte sem rede: devolve bytes fixos e grava envios."""

    def __init__(
        self,
        response: bytes = b"retrieve-conf",
        *,
        fetch_error: Exception | None = None,
        send_error: Exception | None = None,
    ) -> None:
        self._response = response
        self._fetch_error = fetch_error
        self._send_error = send_error
        self.fetched: list[str] = []
        self.sent: list[tuple[bytes, str | None]] = []

    async def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if self._fetch_error is not None:
            raise self._fetch_error
        return self._response

    async def send(self, pdu: bytes, url: str | None = None) -> bytes:
        self.sent.append((pdu, url))
        if self._send_error is not None:
            raise self._send_error
        return b""


class FakeParser:
    """Parser que devolve um PDU pré-montado (ou None)."""

    def __init__(self, pdu=None, error: Exception | None = None) -> None:
        self._pdu = pdu
        self._error = error

    def parse(self, data: bytes):
        if self._error is not None:
            raise self._error
        return self._pdu


class FakeComposer:
    def __init__(self) -> None:
        self.made: list = []

    def make(self, pdu) -> bytes:
        self.made.append(pdu)
        return b"ack:" + pdu.transaction_id


class FakeRetention:
    """Grava chamadas de enforce_limit com o estado do store no momento."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, int]] = []
        self._error = error

    async def enforce_limit(self, store: MemoryMessageStore, uri: str) -> None:
        self.calls.append((uri, store.count()))
        if self._error is not None:
            raise self._error


class RecordingObserver:
    """Observer que grava cada notificação recebida."""

    def __init__(self, error: Exception | None = None) -> None:
        self.updates: list = []
        self._error = error

    async def update(self, transaction) -> None:
        self.updates.append((transaction, transaction.status))
        if self._error is not None:
            raise self._error


def make_retrieve_conf(
    message_id: bytes | None = b"msg-001",
    transaction_id: bytes | None = b"T1",
    parts: list[PduPart] | None = None,
) -> RetrieveConf:
    """M-Retrieve.conf mínima com uma parte text/plain."""
    body = PduBody(parts or [PduPart(content_type=b"text/plain", data=b"oi", charset=0x6A)])
    return RetrieveConf(
        message_id=message_id,
        transaction_id=transaction_id,
        from_address="+5511999991234/TYPE=PLMN",
        date=1_700_000_000,
        body=body,
    )


async def insert_notification(
    store: MemoryMessageStore,
    content_location: str | None = CONTENT_LOCATION,
    locked: bool = False,
) -> str:
    """Insere uma M-Notification.ind pendente e retorna o locator."""
    return await store.insert(
        columns.TABLE_PDU,
        {
            columns.MESSAGE_TYPE: MESSAGE_TYPE_NOTIFICATION_IND,
            columns.CONTENT_LOCATION: content_location,
            columns.LOCKED: locked,
            columns.STATUS: columns.STATE_UNSTARTED,
            columns.THREAD_ID: 1,
        },
    )


def transport_error() -> TransportError:
    return TransportError("http_retryable_status", status_code=503, is_retryable=True)
