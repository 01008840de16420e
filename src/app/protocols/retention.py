"""Protocolo do aplicador de limite de retenção por conversa."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.protocols.message_store import MessageStoreProtocol


class RetentionEnforcerProtocol(Protocol):
    """Remove mensagens antigas da conversa da mensagem informada.

    Best-effort: não deve levantar exceção.
    """

    async def enforce_limit(self, store: MessageStoreProtocol, uri: str) -> None: ...
