"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings
e conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_message_store

    # Na inicialização do serviço
    initialize_app()

    store = get_message_store()
    transaction = await create_retrieve_transaction(uri, store=store)
    transaction.start()
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.bootstrap.dependencies import (
    create_message_store,
    create_retrieve_transaction,
    create_retry_scheduler,
    create_transport,
)
from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_mms_settings,
    get_retention_settings,
    get_retry_settings,
    get_store_settings,
)

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.

    Configura:
    - Logging estruturado JSON com correlation_id
    - Validação de settings (estrita em staging/production)
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
    )
    validate_runtime_settings()


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{get_base_settings().service_name}_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.

    Raises:
        RuntimeError: Configuração inválida em ambiente estrito.
    """
    base = get_base_settings()
    strict_mode = base.environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"store: {error}" for error in get_store_settings().validate(base))
    errors.extend(f"mms: {error}" for error in get_mms_settings().validate())
    errors.extend(f"retention: {error}" for error in get_retention_settings().validate())
    errors.extend(f"retry: {error}" for error in get_retry_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")


@lru_cache(maxsize=1)
def get_message_store():
    """Obtém store de mensagens (singleton).

    Returns:
        MessageStoreProtocol configurado conforme env
    """
    return create_message_store()


__all__ = [
    "create_message_store",
    "create_retrieve_transaction",
    "create_retry_scheduler",
    "create_transport",
    "get_message_store",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]
