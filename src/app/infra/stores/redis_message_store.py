"""Redis Message Store — registros MMS em Redis (Upstash compatível).

Contrato de Keys:
    {prefix}:seq              contador de ids (INCR)
    {prefix}:record:{id}      JSON {"table": ..., "record": {...}}
    {prefix}:table:{table}    SET de ids da tabela
    {prefix}:threads          HASH endereço -> thread_id
    {prefix}:thread_seq       contador de threads (INCR)

Registros são serializados em JSON; filtros de find() são aplicados
no cliente sobre os ids da tabela.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from app.domain import columns
from app.domain.locator import build_locator, parse_locator
from app.protocols.message_store import MessageStoreProtocol, Record
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "mms"


class RedisMessageStore(MessageStoreProtocol):
    """Store de mensagens usando Redis assíncrono.

    Args:
        async_redis_client: Cliente redis.asyncio
        key_prefix: Namespace das chaves
    """

    def __init__(
        self,
        async_redis_client: AsyncRedis[bytes],
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ) -> None:
        self._redis = async_redis_client
        self._prefix = key_prefix

    def _record_key(self, record_id: int) -> str:
        return f"{self._prefix}:record:{record_id}"

    def _table_key(self, table: str) -> str:
        return f"{self._prefix}:table:{table}"

    async def get(self, uri: str) -> Record | None:
        record_id = parse_locator(uri)
        try:
            raw = await self._redis.get(self._record_key(record_id))
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler registro no Redis") from exc
        if raw is None:
            return None
        return json.loads(raw)["record"]

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
        try:
            ids = await self._redis.smembers(self._table_key(table))
            if not ids:
                return []
            keys = [self._record_key(int(record_id)) for record_id in ids]
            raws = await self._redis.mget(keys)
        except Exception as exc:
            raise RedisConnectionError("Falha ao consultar registros no Redis") from exc

        found: list[Record] = []
        for raw in raws:
            if raw is None:
                continue
            record = json.loads(raw)["record"]
            if all(record.get(key) == value for key, value in filters.items()):
                found.append(record)

        if order_by is not None:
            found.sort(
                key=lambda r: (r.get(order_by) is None, r.get(order_by) or 0, r[columns.ID]),
                reverse=descending,
            )
        return found

    async def insert(self, table: str, record: Record) -> str:
        try:
            record_id = int(await self._redis.incr(f"{self._prefix}:seq"))
            stored = {**record, columns.ID: record_id}
            pipeline = self._redis.pipeline()
            pipeline.set(self._record_key(record_id), json.dumps({"table": table, "record": stored}))
            pipeline.sadd(self._table_key(table), record_id)
            await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao inserir registro no Redis") from exc

        logger.debug("redis_record_inserted", extra={"table": table, "record_id": record_id})
        return build_locator(record_id)

    async def update(self, uri: str, fields: dict[str, Any]) -> int:
        record_id = parse_locator(uri)
        key = self._record_key(record_id)
        try:
            raw = await self._redis.get(key)
            if raw is None:
                return 0
            entry = json.loads(raw)
            entry["record"].update(fields)
            entry["record"][columns.ID] = record_id
            await self._redis.set(key, json.dumps(entry), xx=True)
        except Exception as exc:
            raise RedisConnectionError("Falha ao atualizar registro no Redis") from exc
        return 1

    async def delete(self, uri: str) -> int:
        record_id = parse_locator(uri)
        key = self._record_key(record_id)
        try:
            raw = await self._redis.get(key)
            if raw is None:
                return 0
            table = json.loads(raw)["table"]
            pipeline = self._redis.pipeline()
            pipeline.delete(key)
            pipeline.srem(self._table_key(table), record_id)
            deleted, _ = await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao remover registro no Redis") from exc
        return int(deleted)

    async def get_or_create_thread_id(self, address: str) -> int:
        threads_key = f"{self._prefix}:threads"
        try:
            existing = await self._redis.hget(threads_key, address)
            if existing is not None:
                return int(existing)
            candidate = int(await self._redis.incr(f"{self._prefix}:thread_seq"))
            if await self._redis.hsetnx(threads_key, address, candidate):
                return candidate
            # outra task criou a thread primeiro
            return int(await self._redis.hget(threads_key, address))
        except Exception as exc:
            raise RedisConnectionError("Falha ao resolver thread no Redis") from exc
