"""Testes do parser WSP de PDUs MMS."""

from __future__ import annotations

import pytest

from app.domain import charsets
from app.domain.pdu import (
    MESSAGE_TYPE_RETRIEVE_CONF,
    MMS_VERSION_1_2,
    AcknowledgeInd,
    NotificationInd,
    RetrieveConf,
)
from app.infra.mms import PduParser
from utils.errors import CharsetError, ParseError


def _text(value: bytes) -> bytes:
    return value + b"\x00"


def _from(address: bytes) -> bytes:
    value = b"\x80" + _text(address)
    return bytes([len(value)]) + value


def _part(headers: bytes, data: bytes) -> bytes:
    return bytes([len(headers), len(data)]) + headers + data


RETRIEVE_CONF = (
    b"\x8c\x84"
    + b"\x98" + _text(b"T1")
    + b"\x8d\x92"
    + b"\x8b" + _text(b"msg-001")
    + b"\x85\x04\x65\x53\xf1\x00"
    + b"\x89" + _from(b"+5511999991234/TYPE=PLMN")
    + b"\x96" + _text(b"Oi")
    + b"\x97" + _text(b"+5511988887777/TYPE=PLMN")
    + b"\x84\xa3"
    + b"\x02"
    + _part(b"\x03\x83\x81\xea" + b"\x8e" + _text(b"text.txt"), "Olá".encode())
    + _part(b"\x9e" + b"\xc0\x22" + _text(b"<img>"), b"\xff\xd8\xff")
)

NOTIFICATION_IND = (
    b"\x8c\x82"
    + b"\x98" + _text(b"T9")
    + b"\x8d\x92"
    + b"\x89\x01\x81"
    + b"\x8a\x80"
    + b"\x8e\x02\x04\x00"
    + b"\x88\x03\x81\x01\x3c"
    + b"\x83" + _text(b"http://mmsc.example/abc")
)


class TestRetrieveConf:
    def test_parses_headers_and_multipart_body(self) -> None:
        pdu = PduParser().parse(RETRIEVE_CONF)

        assert isinstance(pdu, RetrieveConf)
        assert pdu.message_type == MESSAGE_TYPE_RETRIEVE_CONF
        assert pdu.mms_version == MMS_VERSION_1_2
        assert pdu.transaction_id == b"T1"
        assert pdu.message_id == b"msg-001"
        assert pdu.date == 1_700_000_000
        assert pdu.from_address == "+5511999991234/TYPE=PLMN"
        assert pdu.subject == "Oi"
        assert pdu.to == ["+5511988887777/TYPE=PLMN"]
        assert pdu.content_type == b"application/vnd.wap.multipart.mixed"

        text, image = pdu.body.parts
        assert text.content_type == b"text/plain"
        assert text.charset == charsets.UTF_8
        assert text.content_location == b"text.txt"
        assert text.data.decode("utf-8") == "Olá"
        assert image.content_type == b"image/jpeg"
        assert image.content_id == b"<img>"
        assert image.data == b"\xff\xd8\xff"

    def test_single_part_message(self) -> None:
        pdu = PduParser().parse(b"\x8c\x84\x8d\x92\x84\x83hello")

        assert len(pdu.body) == 1
        assert pdu.body.parts[0].content_type == b"text/plain"
        assert pdu.body.parts[0].data == b"hello"
        assert pdu.transaction_id is None

    def test_subject_with_charset(self) -> None:
        data = b"\x8c\x84\x96\x06\xea" + _text("Olá".encode()) + b"\x84\x83x"

        assert PduParser().parse(data).subject == "Olá"

    def test_related_multipart_with_parameters(self) -> None:
        content_type = b"\xb3\x8a" + _text(b"<smil>") + b"\x89" + _text(b"application/smil")
        data = (
            b"\x8c\x84\x84" + bytes([len(content_type)]) + content_type
            + b"\x01"
            + _part(_text(b"application/smil"), b"<smil/>")
        )

        pdu = PduParser().parse(data)

        assert pdu.content_type == b"application/vnd.wap.multipart.related"
        assert pdu.body.parts[0].content_type == b"application/smil"
        assert pdu.body.parts[0].data == b"<smil/>"

    def test_mms_1_2_optional_headers_are_accepted(self) -> None:
        data = (
            b"\x8c\x84"
            + b"\x98" + _text(b"T1")
            + b"\x9c\x81"
            + b"\x9d\x03\x81\x01\x3c"
            + b"\x9e" + _text(b"RC-1")
            + b"\x9f\x01\x10"
            + b"\xa0\x04\x81" + _text(b"ab")
            + b"\xa1\x03\x81\x01\x2a"
            + b"\xba\x80"
            + b"\xbb\x81"
            + b"\x84\x83x"
        )

        pdu = PduParser().parse(data)

        assert isinstance(pdu, RetrieveConf)
        assert pdu.transaction_id == b"T1"
        assert pdu.body.parts[0].data == b"x"

    def test_missing_content_type_raises(self) -> None:
        with pytest.raises(ParseError):
            PduParser().parse(b"\x8c\x84\x8d\x92")

    def test_unknown_text_charset_raises_charset_error(self) -> None:
        content_type = b"\x83\x81" + _text(b"x-unknown")
        data = b"\x8c\x84\x84" + bytes([len(content_type)]) + content_type + b"x"

        with pytest.raises(CharsetError):
            PduParser().parse(data)


class TestOtherPdus:
    def test_notification_ind(self) -> None:
        pdu = PduParser().parse(NOTIFICATION_IND)

        assert isinstance(pdu, NotificationInd)
        assert pdu.transaction_id == b"T9"
        assert pdu.content_location == b"http://mmsc.example/abc"
        assert pdu.message_size == 1024
        assert pdu.expiry == 60
        assert pdu.from_address is None

    def test_acknowledge_ind(self) -> None:
        pdu = PduParser().parse(b"\x8c\x85\x98T1\x00\x8d\x92\x91\x80")

        assert isinstance(pdu, AcknowledgeInd)
        assert pdu.transaction_id == b"T1"
        assert pdu.report_allowed is True

    @pytest.mark.parametrize("data", [b"", b"\x8c\x80\x8d\x92"])
    def test_empty_or_unsupported_returns_none(self, data: bytes) -> None:
        assert PduParser().parse(data) is None

    @pytest.mark.parametrize(
        "data",
        [
            b"\x8c\x84\x98T1",
            b"\x8c\x84\xff\x00",
            b"\x8c\x84\x84\xa3\x02\x03\x05\x83",
        ],
    )
    def test_malformed_raises(self, data: bytes) -> None:
        with pytest.raises(ParseError):
            PduParser().parse(data)
