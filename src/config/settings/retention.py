"""Settings de retenção (auto-delete) e de retry de downloads."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Esquema padrão de retry: imediato, 1min, 5min, 10min, 30min
DEFAULT_RETRY_SCHEME_SECONDS: tuple[int, ...] = (0, 60, 300, 600, 1800)


@dataclass(frozen=True)
class RetentionSettings:
    """Limite de mensagens MMS por conversa.

    Attributes:
        auto_delete: Habilita a remoção das mensagens mais antigas
        mms_limit_per_thread: Máximo de mensagens por thread
    """

    auto_delete: bool = True
    mms_limit_per_thread: int = 20

    def validate(self) -> list[str]:
        """Valida configurações de retenção."""
        errors: list[str] = []
        if self.mms_limit_per_thread < 1:
            errors.append("MMS_LIMIT_PER_THREAD deve ser >= 1")
        return errors


@dataclass(frozen=True)
class RetrySettings:
    """Esquema de retry de downloads falhos.

    Attributes:
        scheme_seconds: Atraso (s) antes de cada nova tentativa
    """

    scheme_seconds: tuple[int, ...] = DEFAULT_RETRY_SCHEME_SECONDS

    @property
    def max_retries(self) -> int:
        """Quantidade de tentativas permitidas pelo esquema."""
        return len(self.scheme_seconds)

    def validate(self) -> list[str]:
        """Valida esquema de retry."""
        errors: list[str] = []
        if not self.scheme_seconds:
            errors.append("MMS_RETRY_SCHEME_SECONDS não pode ser vazio")
        if any(delay < 0 for delay in self.scheme_seconds):
            errors.append("MMS_RETRY_SCHEME_SECONDS não aceita atrasos negativos")
        return errors


def _parse_scheme(raw: str) -> tuple[int, ...]:
    """Converte "0,60,300" em tupla de inteiros."""
    if not raw.strip():
        return DEFAULT_RETRY_SCHEME_SECONDS
    return tuple(int(item) for item in raw.split(",") if item.strip())


@lru_cache(maxsize=1)
def get_retention_settings() -> RetentionSettings:
    """Retorna instância cacheada de RetentionSettings."""
    return RetentionSettings(
        auto_delete=os.getenv("MMS_AUTO_DELETE", "true").lower() in ("true", "1", "yes"),
        mms_limit_per_thread=int(os.getenv("MMS_LIMIT_PER_THREAD", "20")),
    )


@lru_cache(maxsize=1)
def get_retry_settings() -> RetrySettings:
    """Retorna instância cacheada de RetrySettings."""
    return RetrySettings(scheme_seconds=_parse_scheme(os.getenv("MMS_RETRY_SCHEME_SECONDS", "")))
