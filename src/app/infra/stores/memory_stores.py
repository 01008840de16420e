"""Store de mensagens em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

from app.domain import columns
from app.domain.locator import build_locator, parse_locator
from app.protocols.message_store import MessageStoreProtocol, Record


def _matches(record: Record, filters: dict[str, Any]) -> bool:
    return all(record.get(key) == value for key, value in filters.items())


class MemoryMessageStore(MessageStoreProtocol):
    """Store de registros MMS em memória — apenas para dev/test.

    Ids são sequenciais e nunca reutilizados; o locator de cada
    registro é content://mms/<id>. Escritas são serializadas por lock.
    """

    def __init__(self) -> None:
        self._records: dict[int, tuple[str, Record]] = {}  # id -> (tabela, registro)
        self._threads: dict[str, int] = {}  # endereço -> thread_id
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def get(self, uri: str) -> Record | None:
        entry = self._records.get(parse_locator(uri))
        return None if entry is None else copy.deepcopy(entry[1])

    async def find_one(self, table: str, filters: dict[str, Any]) -> Record | None:
        found = await self.find(table, filters, order_by=columns.ID)
        return found[0] if found else None

    async def find(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        found = [
            copy.deepcopy(record)
            for record_table, record in self._records.values()
            if record_table == table and _matches(record, filters)
        ]
        if order_by is not None:
            found.sort(
                key=lambda r: (r.get(order_by) is None, r.get(order_by) or 0, r[columns.ID]),
                reverse=descending,
            )
        return found

    async def insert(self, table: str, record: Record) -> str:
        async with self._lock:
            record_id = self._next_id
            self._next_id += 1
            stored = copy.deepcopy(record)
            stored[columns.ID] = record_id
            self._records[record_id] = (table, stored)
        return build_locator(record_id)

    async def update(self, uri: str, fields: dict[str, Any]) -> int:
        record_id = parse_locator(uri)
        async with self._lock:
            entry = self._records.get(record_id)
            if entry is None:
                return 0
            entry[1].update(copy.deepcopy(fields))
            entry[1][columns.ID] = record_id
        return 1

    async def delete(self, uri: str) -> int:
        record_id = parse_locator(uri)
        async with self._lock:
            return 1 if self._records.pop(record_id, None) is not None else 0

    async def get_or_create_thread_id(self, address: str) -> int:
        async with self._lock:
            if address not in self._threads:
                self._threads[address] = len(self._threads) + 1
            return self._threads[address]

    def count(self, table: str = columns.TABLE_PDU) -> int:
        """Quantidade de registros na tabela (apenas para testes)."""
        return sum(1 for record_table, _ in self._records.values() if record_table == table)
