"""RetrieveTransaction: download de uma M-Retrieve.conf notificada.

Fluxo (dentro da task):
1. DOWNLOADING + marca status da notificação no store
2. GET no content-location
3. Parse para RetrieveConf
4. Duplicata (mesmo Message-ID) → FAILED, sem persistir
5. Normaliza charset, persiste na inbox → SUCCESS com o novo locator
6. Remove a notificação; aplica retenção da thread
7. Envia M-Acknowledge.ind (falha só é logada)
8. Finaliza: tudo que não é SUCCESS vira FAILED; notifica observers

Nenhuma exceção escapa da task. Em erro, o estado final é FAILED
com o locator da notificação original.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from app.domain import columns
from app.domain.locator import parse_locator
from app.domain.notification import NotificationRecord
from app.domain.pdu import RetrieveConf
from app.observability import (
    get_correlation_id,
    record_latency,
    record_transaction_outcome,
    reset_correlation_id,
    set_correlation_id,
)
from app.services.acknowledgement import send_acknowledge_ind
from app.services.charset_normalizer import normalize_body
from app.services.download_manager import mark_state
from app.services.duplicate_detector import is_duplicate_message
from app.use_cases.mms.transaction import RETRIEVE_TRANSACTION, Transaction
from config.logging import log_best_effort_failure
from fsm.states import TransactionState
from utils.errors import MissingContentLocationError, ParseError, PersistError

if TYPE_CHECKING:
    from app.protocols.message_store import MessageStoreProtocol
    from app.protocols.observer import TransactionObserverProtocol
    from app.protocols.pdu_codec import (
        PduComposerProtocol,
        PduParserProtocol,
        PduPersisterProtocol,
    )
    from app.protocols.retention import RetentionEnforcerProtocol
    from app.protocols.transport import MmsTransportProtocol
    from config.settings import MmsSettings

logger = logging.getLogger(__name__)


class RetrieveTransaction(Transaction):
    """Baixa, persiste e confirma uma mensagem MMS notificada.

    Use RetrieveTransaction.create() para construir: a leitura da
    notificação no store é assíncrona e pode falhar.
    """

    transaction_type = RETRIEVE_TRANSACTION

    def __init__(
        self,
        notification: NotificationRecord,
        *,
        store: MessageStoreProtocol,
        transport: MmsTransportProtocol,
        parser: PduParserProtocol,
        composer: PduComposerProtocol,
        persister: PduPersisterProtocol,
        retention: RetentionEnforcerProtocol,
        settings: MmsSettings,
    ) -> None:
        super().__init__(notification.content_location)
        self._notification = notification
        self._store = store
        self._transport = transport
        self._parser = parser
        self._composer = composer
        self._persister = persister
        self._retention = retention
        self._settings = settings
        self._duplicate = False

    @classmethod
    async def create(
        cls,
        uri: str,
        *,
        store: MessageStoreProtocol,
        transport: MmsTransportProtocol,
        parser: PduParserProtocol,
        composer: PduComposerProtocol,
        persister: PduPersisterProtocol,
        retention: RetentionEnforcerProtocol,
        settings: MmsSettings,
        retry_scheduler: TransactionObserverProtocol | None = None,
    ) -> RetrieveTransaction:
        """Carrega a notificação em `uri` e monta a transação.

        Raises:
            InvalidReferenceError: `uri` não é um locator válido.
            MissingContentLocationError: Notificação ausente ou sem content-location.
        """
        parse_locator(uri)

        record = await store.get(uri)
        if record is None or not record.get(columns.CONTENT_LOCATION):
            raise MissingContentLocationError(f"Notificação sem content-location: {uri}")

        transaction = cls(
            NotificationRecord.from_record(uri, record),
            store=store,
            transport=transport,
            parser=parser,
            composer=composer,
            persister=persister,
            retention=retention,
            settings=settings,
        )
        if retry_scheduler is not None:
            transaction.attach(retry_scheduler)
        return transaction

    @property
    def uri(self) -> str:
        """Locator da notificação que originou a transação."""
        return self._notification.uri

    @property
    def content_location(self) -> str:
        return self._notification.content_location

    @property
    def locked(self) -> bool:
        return self._notification.locked

    @property
    def duplicate(self) -> bool:
        """True quando o Message-ID já tinha sido recebido."""
        return self._duplicate

    async def run(self) -> None:
        token = set_correlation_id()
        started = time.perf_counter()
        try:
            await self._retrieve()
        except Exception as exc:
            logger.error(
                "retrieve_failed",
                extra={
                    "uri": self.uri,
                    "state": self.state.name,
                    "error_type": type(exc).__name__,
                },
            )
        finally:
            self._finalize()
            try:
                await self.notify_observers()
            finally:
                self._record_metrics((time.perf_counter() - started) * 1000)
                reset_correlation_id(token)

    async def _retrieve(self) -> None:
        """Executa os passos 1 a 7."""
        self._transition(TransactionState.DOWNLOADING, "download_started")
        await mark_state(self._store, self.uri, columns.STATE_DOWNLOADING)

        response = await self._transport.fetch(self.content_location)
        conf = self._parse(response)

        message_uri: str | None = None
        self._duplicate = await is_duplicate_message(self._store, conf)
        if self._duplicate:
            self._transition(
                TransactionState.FAILED, "duplicate_detected", content_uri=self.uri
            )
        else:
            converted = normalize_body(conf.body)
            logger.debug("retrieve_parts_normalized", extra={"converted_parts": converted})
            message_uri = await self._persist(conf)
            self._transition(
                TransactionState.SUCCESS, "message_persisted", content_uri=message_uri
            )
            await self._update_persisted_message(message_uri)

        await self._store.delete(self.uri)

        if message_uri is not None:
            try:
                await self._retention.enforce_limit(self._store, message_uri)
            except Exception as exc:
                log_best_effort_failure(logger, "enforce_retention_limit", exc, uri=message_uri)

        await self._acknowledge(conf)

    def _parse(self, data: bytes) -> RetrieveConf:
        try:
            pdu = self._parser.parse(data)
        except ParseError:
            raise
        except Exception as exc:
            raise ParseError("Falha no parse da M-Retrieve.conf") from exc

        if not isinstance(pdu, RetrieveConf):
            raise ParseError("Invalid M-Retrieve.conf PDU.")
        return pdu

    async def _persist(self, conf: RetrieveConf) -> str:
        try:
            return await self._persister.persist(conf, columns.MESSAGE_BOX_INBOX)
        except PersistError:
            raise
        except Exception as exc:
            raise PersistError("Falha ao persistir M-Retrieve.conf") from exc

    async def _update_persisted_message(self, message_uri: str) -> None:
        fields = {
            columns.CONTENT_LOCATION: self.content_location,
            columns.LOCKED: self.locked,
        }
        try:
            await self._store.update(message_uri, fields)
        except Exception as exc:
            log_best_effort_failure(logger, "update_content_location", exc, uri=message_uri)

    async def _acknowledge(self, conf: RetrieveConf) -> None:
        try:
            await send_acknowledge_ind(
                conf,
                composer=self._composer,
                transport=self._transport,
                local_number=self._settings.local_number,
                content_location=self.content_location,
                notify_wap_mmsc=self._settings.notify_wap_mmsc,
            )
        except Exception as exc:
            log_best_effort_failure(logger, "send_acknowledge_ind", exc, uri=self.uri)

    def _transition(
        self,
        target: TransactionState,
        trigger: str,
        content_uri: str | None = None,
    ) -> None:
        result = self.state_machine.transition(target, trigger, content_uri=content_uri)
        if not result.success:
            raise RuntimeError(result.error_reason)
        logger.info(
            "retrieve_state_changed",
            extra={"uri": self.uri, "trigger": trigger, "state": target.name},
        )

    def _record_metrics(self, latency_ms: float) -> None:
        correlation_id = get_correlation_id()
        try:
            record_latency(
                "retrieve_transaction", "run", latency_ms, correlation_id=correlation_id
            )
            record_transaction_outcome(
                self.transaction_type,
                self.state.name,
                duplicate=self._duplicate,
                correlation_id=correlation_id,
            )
        except Exception as exc:
            log_best_effort_failure(logger, "record_metrics", exc, uri=self.uri)

    def _finalize(self) -> None:
        state = self.state
        if state is TransactionState.SUCCESS:
            return
        if state is not TransactionState.FAILED:
            result = self.state_machine.transition(
                TransactionState.FAILED, "retrieve_failed", content_uri=self.uri
            )
            if not result.success:
                logger.error(
                    "retrieve_finalize_rejected",
                    extra={"uri": self.uri, "reason": result.error_reason},
                )
                return
        logger.warning("retrieve_finalized_failed", extra={"uri": self.uri})
