"""Primitivas de encoding WSP/MMS (OMA-MMS-ENC, WAP-230-WSP).

Constantes de header e leitura/escrita dos tipos básicos:
uintvar, value-length, short/long integer, text-string e
encoded-string-value.
"""

from __future__ import annotations

from utils.errors import ParseError

# Campos de header da mensagem (já com o bit alto)
BCC = 0x81
CC = 0x82
CONTENT_LOCATION = 0x83
CONTENT_TYPE = 0x84
DATE = 0x85
DELIVERY_REPORT = 0x86
DELIVERY_TIME = 0x87
EXPIRY = 0x88
FROM = 0x89
MESSAGE_CLASS = 0x8A
MESSAGE_ID = 0x8B
MESSAGE_TYPE = 0x8C
MMS_VERSION = 0x8D
MESSAGE_SIZE = 0x8E
PRIORITY = 0x8F
READ_REPORT = 0x90
REPORT_ALLOWED = 0x91
RESPONSE_STATUS = 0x92
RESPONSE_TEXT = 0x93
SENDER_VISIBILITY = 0x94
STATUS = 0x95
SUBJECT = 0x96
TO = 0x97
TRANSACTION_ID = 0x98
RETRIEVE_STATUS = 0x99
RETRIEVE_TEXT = 0x9A
READ_STATUS = 0x9B

# MMS 1.1-1.3 (OMA-MMS-ENC)
REPLY_CHARGING = 0x9C
REPLY_CHARGING_DEADLINE = 0x9D
REPLY_CHARGING_ID = 0x9E
REPLY_CHARGING_SIZE = 0x9F
PREVIOUSLY_SENT_BY = 0xA0
PREVIOUSLY_SENT_DATE = 0xA1
STORE = 0xA2
MM_STATE = 0xA3
MM_FLAGS = 0xA4
STORE_STATUS = 0xA5
STORE_STATUS_TEXT = 0xA6
STORED = 0xA7
ATTRIBUTES = 0xA8
TOTALS = 0xA9
MBOX_TOTALS = 0xAA
QUOTAS = 0xAB
MBOX_QUOTAS = 0xAC
MESSAGE_COUNT = 0xAD
START = 0xAF
DISTRIBUTION_INDICATOR = 0xB1
ELEMENT_DESCRIPTOR = 0xB2
LIMIT = 0xB3
RECOMMENDED_RETRIEVAL_MODE = 0xB4
RECOMMENDED_RETRIEVAL_MODE_TEXT = 0xB5
STATUS_TEXT = 0xB6
APPLIC_ID = 0xB7
REPLY_APPLIC_ID = 0xB8
AUX_APPLIC_ID = 0xB9
CONTENT_CLASS = 0xBA
DRM_CONTENT = 0xBB
ADAPTATION_ALLOWED = 0xBC
REPLACE_ID = 0xBD
CANCEL_ID = 0xBE
CANCEL_STATUS = 0xBF

VALUE_YES = 0x80
VALUE_NO = 0x81

FROM_ADDRESS_PRESENT = 0x80
FROM_INSERT_ADDRESS = 0x81

# Campos de header das partes (WSP)
PART_CONTENT_LOCATION = 0x8E
PART_CONTENT_ID = 0xC0

# Parâmetros de content-type
PARAM_CHARSET = 0x81
PARAM_TYPE = 0x89
PARAM_START = 0x8A
PARAM_NAME = 0x85
PARAM_FILENAME = 0x86
PARAM_NAME_V14 = 0x97

QUOTE = 0x7F
QUOTED_STRING = 0x22
LENGTH_QUOTE = 0x1F
SHORT_LENGTH_MAX = 30
END_OF_STRING = 0x00

WELL_KNOWN_CONTENT_TYPES: dict[int, str] = {
    0x00: "*/*",
    0x01: "text/*",
    0x02: "text/html",
    0x03: "text/plain",
    0x06: "text/x-vCalendar",
    0x07: "text/x-vCard",
    0x08: "text/vnd.wap.wml",
    0x0C: "multipart/mixed",
    0x0F: "multipart/alternative",
    0x10: "application/*",
    0x1C: "image/*",
    0x1D: "image/gif",
    0x1E: "image/jpeg",
    0x1F: "image/tiff",
    0x20: "image/png",
    0x21: "image/vnd.wap.wbmp",
    0x22: "application/vnd.wap.multipart.*",
    0x23: "application/vnd.wap.multipart.mixed",
    0x26: "application/vnd.wap.multipart.alternative",
    0x27: "application/xml",
    0x28: "text/xml",
    0x33: "application/vnd.wap.multipart.related",
    0x3E: "application/vnd.wap.mms-message",
}
CONTENT_TYPE_CODES: dict[str, int] = {v: k for k, v in WELL_KNOWN_CONTENT_TYPES.items()}


class WspReader:
    """Cursor sobre bytes do wire; underflow levanta ParseError."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self._data = data
        self._pos = pos

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def peek(self) -> int:
        if self._pos >= len(self._data):
            raise ParseError("PDU truncado")
        return self._data[self._pos]

    def read_byte(self) -> int:
        value = self.peek()
        self._pos += 1
        return value

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise ParseError("PDU truncado")
        chunk = self._data[self._pos:self._pos + count]
        self._pos += count
        return chunk

    def read_rest(self) -> bytes:
        return self.read_bytes(self.remaining)

    def skip_to(self, position: int) -> None:
        if position < self._pos or position > len(self._data):
            raise ParseError("Offset fora do PDU")
        self._pos = position

    def read_uintvar(self) -> int:
        value = 0
        for _ in range(5):
            byte = self.read_byte()
            value = (value << 7) | (byte & 0x7F)
            if not byte & 0x80:
                return value
        raise ParseError("uintvar maior que 5 octetos")

    def read_value_length(self) -> int:
        first = self.read_byte()
        if first <= SHORT_LENGTH_MAX:
            return first
        if first == LENGTH_QUOTE:
            return self.read_uintvar()
        raise ParseError(f"value-length inválido: {first:#x}")

    def read_short_integer(self) -> int:
        value = self.read_byte()
        if not value & 0x80:
            raise ParseError(f"short-integer inválido: {value:#x}")
        return value & 0x7F

    def read_long_integer(self) -> int:
        length = self.read_byte()
        if length > SHORT_LENGTH_MAX:
            raise ParseError(f"long-integer com tamanho inválido: {length}")
        return int.from_bytes(self.read_bytes(length), "big")

    def read_integer_value(self) -> int:
        if self.peek() & 0x80:
            return self.read_short_integer()
        return self.read_long_integer()

    def read_text_string(self) -> bytes:
        if self.peek() in (QUOTE, QUOTED_STRING):
            self._pos += 1
        end = self._data.find(bytes([END_OF_STRING]), self._pos)
        if end < 0:
            raise ParseError("text-string sem terminador")
        value = self._data[self._pos:end]
        self._pos = end + 1
        return value

    def read_encoded_string(self) -> tuple[bytes, int]:
        """Retorna (texto, charset MIB); charset 0 quando ausente."""
        first = self.peek()
        if first > LENGTH_QUOTE:
            return self.read_text_string(), 0
        length = self.read_value_length()
        end = self._pos + length
        charset = self.read_integer_value()
        text = self.read_text_string()
        self.skip_to(max(end, self._pos))
        return text, charset


def encode_uintvar(value: int) -> bytes:
    if value < 0:
        raise ValueError("uintvar não aceita negativo")
    out = [value & 0x7F]
    value >>= 7
    while value:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(out))


def encode_value_length(length: int) -> bytes:
    if length <= SHORT_LENGTH_MAX:
        return bytes([length])
    return bytes([LENGTH_QUOTE]) + encode_uintvar(length)


def encode_short_integer(value: int) -> bytes:
    if not 0 <= value <= 0x7F:
        raise ValueError(f"short-integer fora do intervalo: {value}")
    return bytes([value | 0x80])


def encode_long_integer(value: int) -> bytes:
    size = max(1, (value.bit_length() + 7) // 8)
    return bytes([size]) + value.to_bytes(size, "big")


def encode_text_string(value: bytes) -> bytes:
    if value and value[0] & 0x80:
        return bytes([QUOTE]) + value + bytes([END_OF_STRING])
    return value + bytes([END_OF_STRING])
