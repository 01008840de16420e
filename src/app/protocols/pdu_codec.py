"""Protocolos do codec de PDU (parse, compose e persistência)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.pdu import GenericPdu


class PduParserProtocol(Protocol):
    """Converte bytes do wire em PDU estruturado.

    Retorna None (ou levanta ParseError) para dados mal-formados.
    """

    def parse(self, data: bytes) -> GenericPdu | None: ...


class PduComposerProtocol(Protocol):
    """Converte PDU estruturado em bytes do wire."""

    def make(self, pdu: GenericPdu) -> bytes: ...


class PduPersisterProtocol(Protocol):
    """Grava um PDU no store e devolve o locator do novo registro."""

    async def persist(self, pdu: GenericPdu, msg_box: int) -> str: ...
