"""Composer de PDUs MMS de saída do fluxo de retrieve.

Só a M-Acknowledge.ind é composta aqui; M-Send.req fica fora do escopo.
"""

from __future__ import annotations

from app.domain.pdu import AcknowledgeInd, GenericPdu
from app.infra.mms import wsp


class PduComposer:
    """Implementação de PduComposerProtocol (encoding binário MMS)."""

    def make(self, pdu: GenericPdu) -> bytes:
        if isinstance(pdu, AcknowledgeInd):
            return _make_acknowledge_ind(pdu)
        raise ValueError(f"PDU não suportado pelo composer: {type(pdu).__name__}")


def _make_acknowledge_ind(pdu: AcknowledgeInd) -> bytes:
    if not pdu.transaction_id:
        raise ValueError("M-Acknowledge.ind requer X-Mms-Transaction-Id")

    out = bytearray()
    out += bytes([wsp.MESSAGE_TYPE, pdu.message_type])
    out += bytes([wsp.TRANSACTION_ID]) + wsp.encode_text_string(pdu.transaction_id)
    out += bytes([wsp.MMS_VERSION]) + wsp.encode_short_integer(pdu.mms_version)
    out += bytes([wsp.FROM]) + _encode_from(pdu.from_address)
    if pdu.report_allowed is not None:
        out += bytes([
            wsp.REPORT_ALLOWED,
            wsp.VALUE_YES if pdu.report_allowed else wsp.VALUE_NO,
        ])
    return bytes(out)


def _encode_from(address: str | None) -> bytes:
    """From: value-length + (address-present + texto | insert-address)."""
    if not address:
        # o proxy-relay preenche o endereço
        value = bytes([wsp.FROM_INSERT_ADDRESS])
    else:
        value = bytes([wsp.FROM_ADDRESS_PRESENT]) + wsp.encode_text_string(
            address.encode("utf-8")
        )
    return wsp.encode_value_length(len(value)) + value
