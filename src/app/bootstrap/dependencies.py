"""Factories de dependências — criação de implementações concretas.

Centraliza o wiring do motor de retrieve a partir das settings de
ambiente. Cada factory aceita overrides para testes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.bootstrap.clients import create_async_redis_client
from app.infra.mms import MmsHttpTransport, PduComposer, PduParser, StorePduPersister
from app.infra.stores import MemoryMessageStore, RedisMessageStore
from app.services import MmsRecycler, RetryScheduler
from app.use_cases.mms import RetrieveTransaction
from config.settings import (
    get_mms_settings,
    get_retention_settings,
    get_retry_settings,
    get_store_settings,
)

if TYPE_CHECKING:
    from app.protocols.message_store import MessageStoreProtocol
    from app.protocols.transport import MmsTransportProtocol
    from config.settings import MmsSettings

logger = logging.getLogger(__name__)


def create_message_store() -> MessageStoreProtocol:
    """Cria store de mensagens conforme MMS_STORE_BACKEND."""
    settings = get_store_settings()
    if settings.backend == "redis":
        logger.info("message_store_created", extra={"backend": "redis"})
        return RedisMessageStore(create_async_redis_client(), key_prefix=settings.key_prefix)

    logger.info("message_store_created", extra={"backend": "memory"})
    return MemoryMessageStore()


def create_transport(settings: MmsSettings | None = None) -> MmsTransportProtocol:
    """Cria transporte HTTP com o MMSC."""
    return MmsHttpTransport(settings or get_mms_settings())


def create_retry_scheduler(store: MessageStoreProtocol) -> RetryScheduler:
    return RetryScheduler(store, get_retry_settings())


async def create_retrieve_transaction(
    uri: str,
    *,
    store: MessageStoreProtocol,
    transport: MmsTransportProtocol | None = None,
    settings: MmsSettings | None = None,
    retry_scheduler: RetryScheduler | None = None,
) -> RetrieveTransaction:
    """Monta RetrieveTransaction com as implementações padrão.

    Raises:
        ConstructionError: Notificação inválida ou ausente.
    """
    mms_settings = settings or get_mms_settings()
    return await RetrieveTransaction.create(
        uri,
        store=store,
        transport=transport or create_transport(mms_settings),
        parser=PduParser(),
        composer=PduComposer(),
        persister=StorePduPersister(store),
        retention=MmsRecycler(get_retention_settings()),
        settings=mms_settings,
        retry_scheduler=retry_scheduler or create_retry_scheduler(store),
    )
