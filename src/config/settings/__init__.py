"""Agregador de settings do serviço de retrieve MMS.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    StoreBackend,
    StoreSettings,
    get_base_settings,
    get_store_settings,
)
from config.settings.mms import (
    MmsSettings,
    get_mms_settings,
)
from config.settings.retention import (
    DEFAULT_RETRY_SCHEME_SECONDS,
    RetentionSettings,
    RetrySettings,
    get_retention_settings,
    get_retry_settings,
)

__all__ = [
    "DEFAULT_RETRY_SCHEME_SECONDS",
    "BaseSettings",
    "Environment",
    "MmsSettings",
    "RetentionSettings",
    "RetrySettings",
    "StoreBackend",
    "StoreSettings",
    "get_base_settings",
    "get_mms_settings",
    "get_retention_settings",
    "get_retry_settings",
    "get_store_settings",
]
