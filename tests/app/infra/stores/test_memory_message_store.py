"""Testes do MemoryMessageStore."""

from __future__ import annotations

import pytest

from app.domain import columns
from app.infra.stores import MemoryMessageStore
from utils.errors import InvalidReferenceError


class TestMemoryMessageStore:
    @pytest.mark.asyncio
    async def test_insert_assigns_sequential_locators(self) -> None:
        store = MemoryMessageStore()

        first = await store.insert(columns.TABLE_PDU, {columns.SUBJECT: "a"})
        second = await store.insert(columns.TABLE_PDU, {columns.SUBJECT: "b"})

        assert (first, second) == ("content://mms/1", "content://mms/2")
        assert (await store.get(second))[columns.ID] == 2

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self) -> None:
        store = MemoryMessageStore()
        uri = await store.insert(columns.TABLE_PDU, {columns.PARTS: [{"data": "x"}]})

        record = await store.get(uri)
        record[columns.PARTS].append({"data": "y"})

        assert len((await store.get(uri))[columns.PARTS]) == 1

    @pytest.mark.asyncio
    async def test_find_filters_and_orders(self) -> None:
        store = MemoryMessageStore()
        await store.insert(columns.TABLE_PDU, {columns.THREAD_ID: 1, columns.DATE: 300})
        await store.insert(columns.TABLE_PDU, {columns.THREAD_ID: 2, columns.DATE: 100})
        await store.insert(columns.TABLE_PDU, {columns.THREAD_ID: 1, columns.DATE: 200})
        await store.insert("other", {columns.THREAD_ID: 1, columns.DATE: 50})

        found = await store.find(columns.TABLE_PDU, {columns.THREAD_ID: 1}, order_by=columns.DATE)
        newest_first = await store.find(
            columns.TABLE_PDU, {columns.THREAD_ID: 1}, order_by=columns.DATE, descending=True
        )

        assert [r[columns.DATE] for r in found] == [200, 300]
        assert [r[columns.DATE] for r in newest_first] == [300, 200]
        assert (await store.find_one(columns.TABLE_PDU, {columns.THREAD_ID: 2}))[columns.ID] == 2
        assert await store.find_one(columns.TABLE_PDU, {columns.THREAD_ID: 9}) is None

    @pytest.mark.asyncio
    async def test_update_and_delete_report_affected_rows(self) -> None:
        store = MemoryMessageStore()
        uri = await store.insert(columns.TABLE_PDU, {columns.LOCKED: False})

        assert await store.update(uri, {columns.LOCKED: True, columns.ID: 99}) == 1
        assert (await store.get(uri))[columns.LOCKED] is True
        assert (await store.get(uri))[columns.ID] == 1
        assert await store.delete(uri) == 1
        assert await store.delete(uri) == 0
        assert await store.update(uri, {columns.LOCKED: False}) == 0

    @pytest.mark.asyncio
    async def test_thread_ids_are_stable_per_address(self) -> None:
        store = MemoryMessageStore()

        first = await store.get_or_create_thread_id("+5511")
        second = await store.get_or_create_thread_id("+5522")

        assert first != second
        assert await store.get_or_create_thread_id("+5511") == first

    @pytest.mark.asyncio
    async def test_invalid_locator_raises(self) -> None:
        with pytest.raises(InvalidReferenceError):
            await MemoryMessageStore().get("sms/1")
