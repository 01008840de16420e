"""Settings do store de mensagens.

Seleciona o backend onde notificações e mensagens são persistidas.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StoreBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class StoreSettings:
    """Configurações do store de mensagens.

    Attributes:
        backend: Backend do store (memory|redis)
        key_prefix: Namespace das chaves no Redis
    """

    backend: StoreBackend = "memory"
    key_prefix: str = "mms"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações do store.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in ("memory", "redis"):
            errors.append(f"MMS_STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append("MMS_STORE_BACKEND=memory proibido em staging/production")

        if self.backend == "redis" and not base.redis_url:
            errors.append("MMS_STORE_BACKEND=redis requer REDIS_URL configurado")

        if not self.key_prefix:
            errors.append("MMS_STORE_KEY_PREFIX não pode ser vazio")

        return errors


def _load_store_from_env() -> StoreSettings:
    """Carrega StoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("MMS_STORE_BACKEND", "memory").lower()
    backend: StoreBackend = backend_str if backend_str in ("memory", "redis") else "memory"
    return StoreSettings(
        backend=backend,
        key_prefix=os.getenv("MMS_STORE_KEY_PREFIX", "mms"),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Retorna instância cacheada de StoreSettings."""
    return _load_store_from_env()
