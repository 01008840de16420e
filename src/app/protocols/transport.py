"""Protocolo de transporte HTTP com o MMSC.

Evita dependência direta da camada infra.
"""

from __future__ import annotations

from typing import Protocol


class MmsTransportProtocol(Protocol):
    """Contrato mínimo de troca de PDUs com o MMSC.

    Falhas de rede ou status HTTP de erro levantam TransportError.
    Política de timeout pertence ao transporte.
    """

    async def fetch(self, url: str) -> bytes:
        """GET no content-location; retorna o PDU cru."""
        ...

    async def send(self, pdu: bytes, url: str | None = None) -> bytes:
        """POST do PDU; sem url, usa o endpoint padrão do MMSC."""
        ...
