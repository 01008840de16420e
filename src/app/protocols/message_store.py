"""Protocolo do store de registros MMS (notificações e mensagens).

Registros são dicts com as colunas de app.domain.columns.
Escritas conflitantes são serializadas pelo próprio store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Record = dict[str, Any]


class MessageStoreProtocol(ABC):
    """Contrato assíncrono do store de mensagens."""

    @abstractmethod
    async def get(self, uri: str) -> Record | None:
        """Carrega o registro apontado pelo locator (None se não existe)."""

    @abstractmethod
    async def find_one(self, table: str, filters: dict[str, Any]) -> Record | None:
        """Primeiro registro cujas colunas batem com todos os filtros."""

    @abstractmethod
    async def find(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        """Todos os registros que batem com os filtros, opcionalmente ordenados."""

    @abstractmethod
    async def insert(self, table: str, record: Record) -> str:
        """Insere registro e retorna seu locator."""

    @abstractmethod
    async def update(self, uri: str, fields: dict[str, Any]) -> int:
        """Atualiza colunas; retorna quantidade de registros afetados (0 ou 1)."""

    @abstractmethod
    async def delete(self, uri: str) -> int:
        """Remove registro; retorna quantidade de registros afetados (0 ou 1)."""

    @abstractmethod
    async def get_or_create_thread_id(self, address: str) -> int:
        """Thread (conversa) associada ao endereço, criando se necessário."""
