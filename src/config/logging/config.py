"""Configuração centralizada de logging.

Logging estruturado JSON com campos obrigatórios (correlation_id,
service, level, logger, message) e helpers para os pontos do fluxo
MMS que falham sem derrubar a transação.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="mms_retriever")

    logger = get_logger(__name__)
    logger.info("retrieve_started", extra={"transaction_id": "..."})

Regra: nunca logar payload de PDU nem números de telefone em claro.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "mms_retriever"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez na inicialização (app/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id do
            contexto atual (ex: app.observability.get_correlation_id).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substitui handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo (o filter injeta service e correlation_id)."""
    return logging.getLogger(name)


def mask_address(address: str | None) -> str:
    """Mascara número/endereço para logs, mantendo só os 4 últimos dígitos.

    Exemplo:
        mask_address("+5511999991234") -> "***1234"
    """
    if not address:
        return ""
    return f"***{address[-4:]}" if len(address) > 4 else "***"


def log_best_effort_failure(
    logger: logging.Logger,
    step: str,
    exc: BaseException,
    **context: object,
) -> None:
    """Loga falha de efeito colateral best-effort (não altera o resultado).

    Args:
        logger: Logger instance.
        step: Etapa que falhou (ex: "update_content_location").
        exc: Exceção capturada (só o tipo vai para o log).
        context: Campos extras sem PII (ex: transaction_id).
    """
    logger.warning(
        "best_effort_step_failed",
        extra={
            "step": step,
            "error_type": type(exc).__name__,
            **context,
        },
    )
