"""Testes do RedisMessageStore com mock."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain import columns
from app.infra.stores import RedisMessageStore
from utils.errors import InvalidReferenceError, RedisConnectionError


def _entry(record_id: int, table: str = columns.TABLE_PDU, **fields) -> bytes:
    return json.dumps({"table": table, "record": {columns.ID: record_id, **fields}}).encode()


def _redis() -> MagicMock:
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.incr = AsyncMock(return_value=1)
    redis.smembers = AsyncMock(return_value=set())
    redis.mget = AsyncMock(return_value=[])
    redis.hget = AsyncMock(return_value=None)
    redis.hsetnx = AsyncMock(return_value=True)
    pipeline = MagicMock()
    pipeline.execute = AsyncMock(return_value=[1, 1])
    redis.pipeline.return_value = pipeline
    return redis


class TestRedisMessageStore:
    @pytest.mark.asyncio
    async def test_insert_writes_record_and_table_index(self) -> None:
        redis = _redis()
        redis.incr.return_value = 5
        store = RedisMessageStore(redis)

        uri = await store.insert(columns.TABLE_PDU, {columns.SUBJECT: "oi"})

        assert uri == "content://mms/5"
        redis.incr.assert_awaited_once_with("mms:seq")
        pipeline = redis.pipeline.return_value
        key, payload = pipeline.set.call_args[0]
        assert key == "mms:record:5"
        assert json.loads(payload) == {
            "table": "pdu",
            "record": {columns.SUBJECT: "oi", columns.ID: 5},
        }
        pipeline.sadd.assert_called_once_with("mms:table:pdu", 5)

    @pytest.mark.asyncio
    async def test_get_decodes_record(self) -> None:
        redis = _redis()
        redis.get.return_value = _entry(3, **{columns.LOCKED: True})
        store = RedisMessageStore(redis, key_prefix="test")

        record = await store.get("content://mms/3")

        assert record == {columns.ID: 3, columns.LOCKED: True}
        redis.get.assert_awaited_once_with("test:record:3")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        assert await RedisMessageStore(_redis()).get("content://mms/3") is None

    @pytest.mark.asyncio
    async def test_find_filters_and_orders_client_side(self) -> None:
        redis = _redis()
        redis.smembers.return_value = {b"1", b"2", b"3"}
        redis.mget.return_value = [
            _entry(1, **{columns.THREAD_ID: 1, columns.DATE: 300}),
            None,
            _entry(3, **{columns.THREAD_ID: 1, columns.DATE: 100}),
        ]
        store = RedisMessageStore(redis)

        found = await store.find(columns.TABLE_PDU, {columns.THREAD_ID: 1}, order_by=columns.DATE)

        assert [r[columns.ID] for r in found] == [3, 1]

    @pytest.mark.asyncio
    async def test_update_missing_record_returns_zero(self) -> None:
        redis = _redis()
        store = RedisMessageStore(redis)

        assert await store.update("content://mms/8", {columns.LOCKED: True}) == 0
        redis.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rewrites_record(self) -> None:
        redis = _redis()
        redis.get.return_value = _entry(8)
        store = RedisMessageStore(redis)

        assert await store.update("content://mms/8", {columns.LOCKED: True}) == 1

        key, payload = redis.set.call_args[0]
        assert key == "mms:record:8"
        assert json.loads(payload)["record"][columns.LOCKED] is True
        assert redis.set.call_args[1] == {"xx": True}

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_index(self) -> None:
        redis = _redis()
        redis.get.return_value = _entry(4)
        store = RedisMessageStore(redis)

        assert await store.delete("content://mms/4") == 1

        pipeline = redis.pipeline.return_value
        pipeline.delete.assert_called_once_with("mms:record:4")
        pipeline.srem.assert_called_once_with("mms:table:pdu", 4)

    @pytest.mark.asyncio
    async def test_thread_id_created_once(self) -> None:
        redis = _redis()
        redis.incr.return_value = 3
        store = RedisMessageStore(redis)

        assert await store.get_or_create_thread_id("+5511") == 3
        redis.hsetnx.assert_awaited_once_with("mms:threads", "+5511", 3)

        redis.hget.return_value = b"7"
        assert await store.get_or_create_thread_id("+5511") == 7

    @pytest.mark.asyncio
    async def test_client_failures_are_wrapped(self) -> None:
        redis = _redis()
        redis.get.side_effect = ConnectionError("down")
        store = RedisMessageStore(redis)

        with pytest.raises(RedisConnectionError):
            await store.get("content://mms/1")

    @pytest.mark.asyncio
    async def test_invalid_locator_is_not_wrapped(self) -> None:
        redis = _redis()

        with pytest.raises(InvalidReferenceError):
            await RedisMessageStore(redis).delete("content://sms/1")
        redis.get.assert_not_awaited()
