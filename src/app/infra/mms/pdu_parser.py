"""Parser de PDUs MMS binários (WSP) para os modelos de app.domain.pdu.

Suporta M-Retrieve.conf (com corpo multipart), M-Notification.ind e
M-Acknowledge.ind. Tipos não suportados retornam None; bytes
mal-formados levantam ParseError.
"""

from __future__ import annotations

import logging
from typing import Any

from app.domain import charsets
from app.domain.pdu import (
    MESSAGE_TYPE_ACKNOWLEDGE_IND,
    MESSAGE_TYPE_NOTIFICATION_IND,
    MESSAGE_TYPE_RETRIEVE_CONF,
    AcknowledgeInd,
    GenericPdu,
    NotificationInd,
    PduBody,
    PduPart,
    RetrieveConf,
)
from app.infra.mms import wsp
from app.infra.mms.wsp import WspReader
from utils.errors import CharsetError, ParseError

logger = logging.getLogger(__name__)

_OCTET_HEADERS = frozenset({
    wsp.DELIVERY_REPORT,
    wsp.PRIORITY,
    wsp.READ_REPORT,
    wsp.RESPONSE_STATUS,
    wsp.SENDER_VISIBILITY,
    wsp.STATUS,
    wsp.RETRIEVE_STATUS,
    wsp.READ_STATUS,
    wsp.REPORT_ALLOWED,
    wsp.REPLY_CHARGING,
    wsp.STORE,
    wsp.MM_STATE,
    wsp.STORE_STATUS,
    wsp.STORED,
    wsp.ATTRIBUTES,
    wsp.TOTALS,
    wsp.QUOTAS,
    wsp.DISTRIBUTION_INDICATOR,
    wsp.RECOMMENDED_RETRIEVAL_MODE,
    wsp.CONTENT_CLASS,
    wsp.DRM_CONTENT,
    wsp.ADAPTATION_ALLOWED,
    wsp.CANCEL_STATUS,
})
_TEXT_HEADERS = frozenset({
    wsp.TRANSACTION_ID,
    wsp.MESSAGE_ID,
    wsp.CONTENT_LOCATION,
    wsp.REPLY_CHARGING_ID,
    wsp.APPLIC_ID,
    wsp.REPLY_APPLIC_ID,
    wsp.AUX_APPLIC_ID,
    wsp.REPLACE_ID,
    wsp.CANCEL_ID,
})
_ENCODED_STRING_HEADERS = frozenset({
    wsp.SUBJECT,
    wsp.RESPONSE_TEXT,
    wsp.RETRIEVE_TEXT,
    wsp.STORE_STATUS_TEXT,
    wsp.RECOMMENDED_RETRIEVAL_MODE_TEXT,
    wsp.STATUS_TEXT,
})
_ADDRESS_LIST_HEADERS = frozenset({wsp.TO, wsp.CC, wsp.BCC})
_INTEGER_HEADERS = frozenset({wsp.MESSAGE_COUNT, wsp.START, wsp.LIMIT})
# valor composto precedido de value-length; só é pulado
_SKIPPED_VALUE_LENGTH_HEADERS = frozenset({
    wsp.PREVIOUSLY_SENT_BY,
    wsp.PREVIOUSLY_SENT_DATE,
    wsp.MM_FLAGS,
    wsp.MBOX_TOTALS,
    wsp.MBOX_QUOTAS,
    wsp.ELEMENT_DESCRIPTOR,
})


class ContentType:
    """Content-type decodificado com seus parâmetros."""

    __slots__ = ("media_type", "params")

    def __init__(self, media_type: str, params: dict[int | str, Any] | None = None) -> None:
        self.media_type = media_type
        self.params = params or {}

    @property
    def charset(self) -> int:
        return int(self.params.get(wsp.PARAM_CHARSET, charsets.ANY_CHARSET))

    @property
    def is_multipart(self) -> bool:
        return self.media_type.startswith(("application/vnd.wap.multipart.", "multipart/"))


class PduParser:
    """Implementação de PduParserProtocol para o encoding binário MMS."""

    def parse(self, data: bytes) -> GenericPdu | None:
        if not data:
            return None

        reader = WspReader(data)
        headers = _parse_headers(reader)
        message_type = headers.get(wsp.MESSAGE_TYPE)

        if message_type == MESSAGE_TYPE_RETRIEVE_CONF:
            return _build_retrieve_conf(headers, reader)
        if message_type == MESSAGE_TYPE_NOTIFICATION_IND:
            return _build_notification_ind(headers)
        if message_type == MESSAGE_TYPE_ACKNOWLEDGE_IND:
            return _build_acknowledge_ind(headers)

        logger.warning("pdu_type_unsupported", extra={"message_type": message_type})
        return None


def _parse_headers(reader: WspReader) -> dict[int, Any]:
    """Lê headers até o content-type (inclusive) ou fim do PDU."""
    headers: dict[int, Any] = {}
    while reader.remaining:
        if not reader.peek() & 0x80:
            # application-header: token-text + text-string
            reader.read_text_string()
            reader.read_text_string()
            continue

        field_code = reader.read_byte()

        if field_code == wsp.MESSAGE_TYPE:
            headers[field_code] = reader.read_byte()
        elif field_code == wsp.MMS_VERSION:
            headers[field_code] = reader.read_short_integer()
        elif field_code in _OCTET_HEADERS:
            headers[field_code] = reader.read_byte()
        elif field_code in _TEXT_HEADERS:
            headers[field_code] = reader.read_text_string()
        elif field_code in _ENCODED_STRING_HEADERS:
            headers[field_code] = _decode_encoded_string(*reader.read_encoded_string())
        elif field_code in _ADDRESS_LIST_HEADERS:
            headers.setdefault(field_code, []).append(
                _decode_encoded_string(*reader.read_encoded_string())
            )
        elif field_code in (wsp.DATE, wsp.MESSAGE_SIZE, wsp.REPLY_CHARGING_SIZE):
            headers[field_code] = reader.read_long_integer()
        elif field_code in _INTEGER_HEADERS:
            headers[field_code] = reader.read_integer_value()
        elif field_code in (wsp.EXPIRY, wsp.DELIVERY_TIME, wsp.REPLY_CHARGING_DEADLINE):
            headers[field_code] = _read_relative_or_absolute(reader)
        elif field_code in _SKIPPED_VALUE_LENGTH_HEADERS:
            length = reader.read_value_length()
            reader.skip_to(reader.position + length)
        elif field_code == wsp.FROM:
            headers[field_code] = _read_from(reader)
        elif field_code == wsp.MESSAGE_CLASS:
            if reader.peek() & 0x80:
                headers[field_code] = reader.read_byte()
            else:
                headers[field_code] = reader.read_text_string()
        elif field_code == wsp.CONTENT_TYPE:
            headers[field_code] = _read_content_type(reader)
            break
        else:
            raise ParseError(f"Header desconhecido: {field_code:#x}")
    return headers


def _read_relative_or_absolute(reader: WspReader) -> int:
    length = reader.read_value_length()
    end = reader.position + length
    reader.read_byte()  # token absoluto/relativo
    value = reader.read_long_integer()
    reader.skip_to(end)
    return value


def _read_from(reader: WspReader) -> str | None:
    length = reader.read_value_length()
    end = reader.position + length
    token = reader.read_byte()
    address: str | None = None
    if token == wsp.FROM_ADDRESS_PRESENT:
        address = _decode_encoded_string(*reader.read_encoded_string())
    elif token != wsp.FROM_INSERT_ADDRESS:
        raise ParseError(f"Token de From inválido: {token:#x}")
    reader.skip_to(end)
    return address


def _decode_encoded_string(value: bytes, charset: int) -> str:
    if charset in (charsets.ANY_CHARSET, charsets.US_ASCII):
        return value.decode("utf-8", errors="replace")
    try:
        return value.decode(charsets.get_mime_name(charset), errors="replace")
    except (KeyError, LookupError):
        return value.decode("utf-8", errors="replace")


def _read_media_type(reader: WspReader) -> str:
    if reader.peek() & 0x80:
        code = reader.read_short_integer()
        media_type = wsp.WELL_KNOWN_CONTENT_TYPES.get(code)
        if media_type is None:
            raise ParseError(f"Content-type bem conhecido não suportado: {code:#x}")
        return media_type
    return reader.read_text_string().decode("ascii", errors="replace")


def _read_content_type(reader: WspReader) -> ContentType:
    first = reader.peek()
    if first & 0x80 or first > wsp.LENGTH_QUOTE:
        return ContentType(_read_media_type(reader))

    length = reader.read_value_length()
    end = reader.position + length
    if reader.peek() <= wsp.SHORT_LENGTH_MAX:
        # well-known-media como long-integer
        code = reader.read_long_integer()
        media_type = wsp.WELL_KNOWN_CONTENT_TYPES.get(code, "application/octet-stream")
    else:
        media_type = _read_media_type(reader)
    params = _read_parameters(reader, end)
    reader.skip_to(end)
    return ContentType(media_type, params)


def _read_parameters(reader: WspReader, end: int) -> dict[int | str, Any]:
    params: dict[int | str, Any] = {}
    while reader.position < end:
        if reader.peek() & 0x80:
            name: int | str = reader.read_short_integer() | 0x80
        else:
            name = reader.read_text_string().decode("ascii", errors="replace")

        if name == wsp.PARAM_CHARSET:
            if reader.peek() > wsp.LENGTH_QUOTE and not reader.peek() & 0x80:
                mime = reader.read_text_string().decode("ascii", errors="replace")
                try:
                    params[name] = charsets.get_mib_enum(mime)
                except KeyError as exc:
                    raise CharsetError(f"Charset desconhecido: {mime}") from exc
            else:
                params[name] = reader.read_integer_value()
        elif name == wsp.PARAM_TYPE:
            if reader.peek() & 0x80:
                code = reader.read_short_integer()
                params[name] = wsp.WELL_KNOWN_CONTENT_TYPES.get(code, "")
            else:
                params[name] = reader.read_text_string().decode("ascii", errors="replace")
        else:
            params[name] = _read_untyped_value(reader)
    return params


def _read_untyped_value(reader: WspReader) -> int | bytes:
    first = reader.peek()
    if first & 0x80:
        return reader.read_short_integer()
    if first <= wsp.SHORT_LENGTH_MAX:
        return reader.read_long_integer()
    return reader.read_text_string()


def _read_part_headers(reader: WspReader, part: PduPart, end: int) -> None:
    while reader.position < end:
        field_code = reader.peek()
        if field_code == wsp.PART_CONTENT_LOCATION:
            reader.read_byte()
            part.content_location = reader.read_text_string()
        elif field_code == wsp.PART_CONTENT_ID:
            reader.read_byte()
            part.content_id = reader.read_text_string()
        elif not field_code & 0x80:
            reader.read_text_string()
            reader.read_text_string()
        else:
            # header sem decoder: o restante do bloco é ignorado
            break
    reader.skip_to(end)


def _parse_multipart(reader: WspReader) -> PduBody:
    body = PduBody()
    count = reader.read_uintvar()
    for _ in range(count):
        headers_length = reader.read_uintvar()
        data_length = reader.read_uintvar()
        headers_end = reader.position + headers_length

        content_type = _read_content_type(reader)
        part = PduPart(
            content_type=content_type.media_type.encode("ascii"),
            charset=content_type.charset,
        )
        name = content_type.params.get(wsp.PARAM_NAME) or content_type.params.get(wsp.PARAM_NAME_V14)
        if isinstance(name, bytes):
            part.name = name
        _read_part_headers(reader, part, headers_end)

        part.data = reader.read_bytes(data_length)
        body.add_part(part)
    return body


def _build_retrieve_conf(headers: dict[int, Any], reader: WspReader) -> RetrieveConf:
    content_type: ContentType | None = headers.get(wsp.CONTENT_TYPE)
    if content_type is None:
        raise ParseError("M-Retrieve.conf sem Content-Type")

    if content_type.is_multipart:
        body = _parse_multipart(reader)
    else:
        body = PduBody([
            PduPart(
                content_type=content_type.media_type.encode("ascii"),
                data=reader.read_rest(),
                charset=content_type.charset,
            )
        ])

    return RetrieveConf(
        mms_version=headers.get(wsp.MMS_VERSION, 0),
        from_address=headers.get(wsp.FROM),
        message_id=headers.get(wsp.MESSAGE_ID),
        transaction_id=headers.get(wsp.TRANSACTION_ID),
        date=headers.get(wsp.DATE),
        subject=headers.get(wsp.SUBJECT),
        to=headers.get(wsp.TO, []),
        cc=headers.get(wsp.CC, []),
        content_type=content_type.media_type.encode("ascii"),
        body=body,
    )


def _build_notification_ind(headers: dict[int, Any]) -> NotificationInd:
    content_location = headers.get(wsp.CONTENT_LOCATION)
    if not content_location:
        raise ParseError("M-Notification.ind sem Content-Location")
    return NotificationInd(
        mms_version=headers.get(wsp.MMS_VERSION, 0),
        from_address=headers.get(wsp.FROM),
        transaction_id=headers.get(wsp.TRANSACTION_ID),
        content_location=content_location,
        message_size=headers.get(wsp.MESSAGE_SIZE),
        expiry=headers.get(wsp.EXPIRY),
    )


def _build_acknowledge_ind(headers: dict[int, Any]) -> AcknowledgeInd:
    report_allowed = headers.get(wsp.REPORT_ALLOWED)
    return AcknowledgeInd(
        mms_version=headers.get(wsp.MMS_VERSION, 0),
        from_address=headers.get(wsp.FROM),
        transaction_id=headers.get(wsp.TRANSACTION_ID, b""),
        report_allowed=None if report_allowed is None else report_allowed == wsp.VALUE_YES,
    )
