"""Testes da RetrieveTransaction (fluxo completo com store em memória)."""

from __future__ import annotations

import base64

import pytest

from app.domain import charsets, columns
from app.domain.pdu import MESSAGE_TYPE_RETRIEVE_CONF, NotificationInd, PduPart
from app.infra.mms import StorePduPersister
from app.infra.stores import MemoryMessageStore
from app.use_cases.mms import RetrieveTransaction, active_transaction_count, drain_transactions
from app.use_cases.mms import retrieve_transaction as retrieve_transaction_module
from config.settings import MmsSettings
from fsm.states import TransactionState
from tests.fakes.fake_mms import (
    CONTENT_LOCATION,
    FakeComposer,
    FakeParser,
    FakeRetention,
    FakeTransport,
    RecordingObserver,
    insert_notification,
    make_retrieve_conf,
    transport_error,
)
from utils.errors import (
    ConstructionError,
    InvalidReferenceError,
    MissingContentLocationError,
    PersistError,
)

LOCAL_NUMBER = "+5511988887777"


class FailingPersister:
    async def persist(self, pdu, msg_box: int) -> str:
        raise PersistError("disk full")


class LockedUpdateFailingStore(MemoryMessageStore):
    """Falha só na cópia de locked/content_location para a mensagem nova."""

    async def update(self, uri: str, fields: dict) -> int:
        if columns.LOCKED in fields:
            raise RuntimeError("store read-only")
        return await super().update(uri, fields)


class DeleteFailingStore(MemoryMessageStore):
    async def delete(self, uri: str) -> int:
        raise RuntimeError("store read-only")


async def _create(
    store: MemoryMessageStore,
    uri: str,
    *,
    transport: FakeTransport | None = None,
    parser: FakeParser | None = None,
    persister=None,
    retention: FakeRetention | None = None,
    settings: MmsSettings | None = None,
    observer: RecordingObserver | None = None,
) -> RetrieveTransaction:
    return await RetrieveTransaction.create(
        uri,
        store=store,
        transport=transport or FakeTransport(),
        parser=parser or FakeParser(make_retrieve_conf()),
        composer=FakeComposer(),
        persister=persister or StorePduPersister(store),
        retention=retention or FakeRetention(),
        settings=settings or MmsSettings(local_number=LOCAL_NUMBER),
        retry_scheduler=observer,
    )


async def _retrieve_confs(store: MemoryMessageStore) -> list[dict]:
    return await store.find(
        columns.TABLE_PDU,
        {columns.MESSAGE_TYPE: MESSAGE_TYPE_RETRIEVE_CONF},
    )


class TestConstruction:
    """Falhas de construção são síncronas ao caller e nada executa."""

    @pytest.mark.asyncio
    async def test_invalid_locator_raises_invalid_reference(self) -> None:
        store = MemoryMessageStore()
        with pytest.raises(InvalidReferenceError):
            await _create(store, "http://mmsc.example/1")

    @pytest.mark.asyncio
    async def test_missing_record_raises_missing_content_location(self) -> None:
        store = MemoryMessageStore()
        with pytest.raises(MissingContentLocationError):
            await _create(store, "content://mms/99")

    @pytest.mark.asyncio
    async def test_empty_content_location_is_construction_error(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store, content_location="")
        transport = FakeTransport()

        with pytest.raises(ConstructionError):
            await _create(store, uri, transport=transport)

        assert transport.fetched == []
        assert await store.get(uri) is not None

    @pytest.mark.asyncio
    async def test_created_transaction_is_initialized_with_scheduler_attached(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store, locked=True)
        observer = RecordingObserver()

        transaction = await _create(store, uri, observer=observer)

        assert transaction.state is TransactionState.INITIALIZED
        assert transaction.transaction_id == CONTENT_LOCATION
        assert transaction.locked is True
        assert transaction.observers == (observer,)
        assert observer.updates == []


class TestSuccessfulRetrieve:
    """Mensagem nova: persistida uma vez, notificação removida, ack enviado."""

    @pytest.mark.asyncio
    async def test_success_persists_exactly_one_message(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store, locked=True)
        transport = FakeTransport()
        retention = FakeRetention()
        observer = RecordingObserver()

        transaction = await _create(
            store, uri, transport=transport, retention=retention, observer=observer
        )
        await transaction.start()

        status = transaction.status
        assert status.state is TransactionState.SUCCESS
        assert status.content_uri != uri

        assert await store.get(uri) is None
        messages = await _retrieve_confs(store)
        assert len(messages) == 1
        message = await store.get(status.content_uri)
        assert message[columns.MESSAGE_ID] == "msg-001"
        assert message[columns.LOCKED] is True
        assert message[columns.CONTENT_LOCATION] == CONTENT_LOCATION
        assert message[columns.MSG_BOX] == columns.MESSAGE_BOX_INBOX

        assert transport.fetched == [CONTENT_LOCATION]
        assert transport.sent == [(b"ack:T1", None)]
        assert len(observer.updates) == 1

    @pytest.mark.asyncio
    async def test_retention_runs_after_notification_delete(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        retention = FakeRetention()

        transaction = await _create(store, uri, retention=retention)
        await transaction.start()

        # só a mensagem nova existe quando a retenção roda
        assert retention.calls == [(transaction.status.content_uri, 1)]

    @pytest.mark.asyncio
    async def test_shift_jis_parts_are_stored_as_utf8(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        part = PduPart(
            content_type=b"text/plain",
            data="あ".encode("shift_jis"),
            charset=charsets.SHIFT_JIS,
        )
        parser = FakeParser(make_retrieve_conf(parts=[part]))

        transaction = await _create(store, uri, parser=parser)
        await transaction.start()

        stored_part = (await store.get(transaction.status.content_uri))[columns.PARTS][0]
        assert stored_part["charset"] == charsets.UTF_8
        assert base64.b64decode(stored_part["data"]).decode("utf-8") == "あ"

    @pytest.mark.asyncio
    async def test_ack_failure_never_downgrades_success(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport(send_error=transport_error())

        transaction = await _create(store, uri, transport=transport)
        await transaction.start()

        assert transaction.state is TransactionState.SUCCESS
        assert len(transport.sent) == 1

    @pytest.mark.asyncio
    async def test_no_transaction_id_sends_nothing(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport()
        parser = FakeParser(make_retrieve_conf(transaction_id=None))

        transaction = await _create(store, uri, transport=transport, parser=parser)
        await transaction.start()

        assert transaction.state is TransactionState.SUCCESS
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_notify_wap_mmsc_sends_ack_to_content_location(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport()
        settings = MmsSettings(local_number=LOCAL_NUMBER, notify_wap_mmsc=True)

        transaction = await _create(store, uri, transport=transport, settings=settings)
        await transaction.start()

        assert transport.sent == [(b"ack:T1", CONTENT_LOCATION)]

    @pytest.mark.asyncio
    async def test_update_of_new_message_is_best_effort(self) -> None:
        store = LockedUpdateFailingStore()
        uri = await insert_notification(store, locked=True)
        transport = FakeTransport()

        transaction = await _create(store, uri, transport=transport)
        await transaction.start()

        assert transaction.state is TransactionState.SUCCESS
        assert transport.sent == [(b"ack:T1", None)]
        assert await store.get(uri) is None
        assert len(await _retrieve_confs(store)) == 1

    @pytest.mark.asyncio
    async def test_retention_failure_is_best_effort(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport()
        retention = FakeRetention(error=RuntimeError("boom"))

        transaction = await _create(store, uri, transport=transport, retention=retention)
        await transaction.start()

        assert transaction.state is TransactionState.SUCCESS
        assert len(transport.sent) == 1


class TestDuplicateRetrieve:
    """Message-ID já recebido: FAILED sem segunda cópia."""

    @pytest.mark.asyncio
    async def test_duplicate_fails_without_second_copy(self) -> None:
        store = MemoryMessageStore()
        await store.insert(
            columns.TABLE_PDU,
            {columns.MESSAGE_ID: "msg-001", columns.MESSAGE_TYPE: MESSAGE_TYPE_RETRIEVE_CONF},
        )
        uri = await insert_notification(store)
        retention = FakeRetention()
        transport = FakeTransport()
        observer = RecordingObserver()

        transaction = await _create(
            store, uri, transport=transport, retention=retention, observer=observer
        )
        await transaction.start()

        assert transaction.status.state is TransactionState.FAILED
        assert transaction.status.content_uri == uri
        assert len(await _retrieve_confs(store)) == 1
        assert await store.get(uri) is None
        assert retention.calls == []
        assert len(transport.sent) == 1
        assert len(observer.updates) == 1
        assert transaction.duplicate is True

    @pytest.mark.asyncio
    async def test_duplicate_is_reported_even_when_delete_fails(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store = DeleteFailingStore()
        await store.insert(
            columns.TABLE_PDU,
            {columns.MESSAGE_ID: "msg-001", columns.MESSAGE_TYPE: MESSAGE_TYPE_RETRIEVE_CONF},
        )
        uri = await insert_notification(store)
        outcomes: list[dict] = []
        monkeypatch.setattr(
            retrieve_transaction_module,
            "record_transaction_outcome",
            lambda *args, **kwargs: outcomes.append(kwargs),
        )

        transaction = await _create(store, uri)
        await transaction.start()

        assert transaction.state is TransactionState.FAILED
        assert outcomes[0]["duplicate"] is True


class TestFailedRetrieve:
    """Erros de transporte/parse/persistência terminam em FAILED."""

    @pytest.mark.asyncio
    async def test_transport_error_fails_with_notification_locator(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport(fetch_error=transport_error())
        retention = FakeRetention()
        observer = RecordingObserver()

        transaction = await _create(
            store, uri, transport=transport, retention=retention, observer=observer
        )
        await transaction.start()

        assert transaction.status.state is TransactionState.FAILED
        assert transaction.status.content_uri == uri
        assert transport.sent == []
        assert retention.calls == []
        assert len(observer.updates) == 1
        _, seen_status = observer.updates[0]
        assert seen_status.state is TransactionState.FAILED

        notification = await store.get(uri)
        assert notification[columns.STATUS] == columns.STATE_DOWNLOADING

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "parser",
        [
            FakeParser(None),
            FakeParser(NotificationInd(content_location=b"http://x")),
            FakeParser(error=ValueError("bad pdu")),
        ],
    )
    async def test_unparseable_response_fails(self, parser: FakeParser) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)

        transaction = await _create(store, uri, parser=parser)
        await transaction.start()

        assert transaction.status.state is TransactionState.FAILED
        assert transaction.status.content_uri == uri
        assert await store.get(uri) is not None
        assert await _retrieve_confs(store) == []

    @pytest.mark.asyncio
    async def test_persist_error_fails(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transport = FakeTransport()

        transaction = await _create(store, uri, transport=transport, persister=FailingPersister())
        await transaction.start()

        assert transaction.state is TransactionState.FAILED
        assert transport.sent == []


class TestObserversAndTasks:
    """Notificação única de observers e ciclo de vida da task."""

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_block_others(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        failing = RecordingObserver(error=RuntimeError("observer down"))
        healthy = RecordingObserver()

        transaction = await _create(store, uri, observer=failing)
        transaction.attach(healthy)
        await transaction.start()

        assert len(failing.updates) == 1
        assert len(healthy.updates) == 1

    @pytest.mark.asyncio
    async def test_metrics_failure_does_not_skip_observers(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_metric(*args, **kwargs) -> None:
            raise RuntimeError("metrics down")

        monkeypatch.setattr(retrieve_transaction_module, "record_latency", broken_metric)
        monkeypatch.setattr(
            retrieve_transaction_module, "record_transaction_outcome", broken_metric
        )
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        observer = RecordingObserver()

        transaction = await _create(store, uri, observer=observer)
        await transaction.start()

        assert transaction.state is TransactionState.SUCCESS
        assert len(observer.updates) == 1

    @pytest.mark.asyncio
    async def test_detached_observer_is_not_notified(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        observer = RecordingObserver()

        transaction = await _create(store, uri, observer=observer)
        transaction.detach(observer)
        await transaction.start()

        assert observer.updates == []

    @pytest.mark.asyncio
    async def test_start_twice_raises(self) -> None:
        store = MemoryMessageStore()
        uri = await insert_notification(store)
        transaction = await _create(store, uri)

        task = transaction.start()
        with pytest.raises(RuntimeError):
            transaction.process()
        await task

    @pytest.mark.asyncio
    async def test_drain_waits_for_active_transactions(self) -> None:
        store = MemoryMessageStore()
        first = await _create(store, await insert_notification(store))
        second = await _create(
            store,
            await insert_notification(store),
            parser=FakeParser(make_retrieve_conf(message_id=b"msg-002")),
        )

        first.start()
        second.start()
        await drain_transactions(timeout_seconds=5.0)

        assert active_transaction_count() == 0
        assert first.state is TransactionState.SUCCESS
        assert second.state is TransactionState.SUCCESS
        assert len(await _retrieve_confs(store)) == 2
