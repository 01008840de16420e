"""Métricas via structured logging.

Registradas como logs estruturados para agregação posterior.

Uso:
    start = time.perf_counter()
    # ... transação ...
    record_latency("retrieve_transaction", "run", (time.perf_counter() - start) * 1000)
    record_transaction_outcome("retrieve", "SUCCESS", duplicate=False)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "retrieve_transaction")
        operation: Nome da operação (ex: "run", "fetch")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_transaction_outcome(
    transaction_type: str,
    final_state: str,
    duplicate: bool = False,
    correlation_id: str | None = None,
) -> None:
    """Registra counter de desfecho de transação (estado terminal)."""
    logger.info(
        "metric_transaction_outcome",
        extra={
            "metric_type": "counter",
            "transaction_type": transaction_type,
            "final_state": final_state,
            "duplicate": duplicate,
            "correlation_id": correlation_id,
        },
    )
