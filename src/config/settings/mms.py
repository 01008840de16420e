"""Settings do canal MMS (MMSC, proxy WAP e acknowledgement).

Equivalente às configurações de APN/MMSC da operadora.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_USER_AGENT = "mms-retriever/1.0"
DEFAULT_MAX_MESSAGE_SIZE_BYTES = 300 * 1024


@dataclass(frozen=True)
class MmsSettings:
    """Configurações do canal MMS.

    Attributes:
        mmsc_url: Endpoint padrão do MMSC (destino de POSTs sem URL explícita)
        proxy_host: Host do proxy WAP (vazio = sem proxy)
        proxy_port: Porta do proxy WAP
        notify_wap_mmsc: Envia M-Acknowledge.ind ao content-location em vez do MMSC padrão
        local_number: Número da linha local (campo From do acknowledgement)
        user_agent: User-Agent das requisições HTTP
        ua_prof_url: URL do perfil UAProf (header x-wap-profile)
        request_timeout_seconds: Timeout para requisições HTTP
        max_retries: Tentativas extras em erros retryable (429/5xx/conexão)
        max_message_size_bytes: Tamanho máximo aceito para M-Retrieve.conf
    """

    mmsc_url: str = ""
    proxy_host: str = ""
    proxy_port: int = 80

    notify_wap_mmsc: bool = False
    local_number: str = ""

    user_agent: str = DEFAULT_USER_AGENT
    ua_prof_url: str = ""

    request_timeout_seconds: float = 60.0
    max_retries: int = 1
    max_message_size_bytes: int = DEFAULT_MAX_MESSAGE_SIZE_BYTES

    @property
    def proxy_url(self) -> str | None:
        """URL do proxy WAP ou None quando não configurado."""
        if not self.proxy_host:
            return None
        return f"http://{self.proxy_host}:{self.proxy_port}"

    def validate(self) -> list[str]:
        """Valida configurações mínimas de MMS.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.mmsc_url:
            errors.append("MMSC_URL não configurado")
        elif not self.mmsc_url.startswith(("http://", "https://")):
            errors.append("MMSC_URL deve ser http(s)")

        if self.proxy_host and not 0 < self.proxy_port < 65536:
            errors.append("MMS_PROXY_PORT fora do intervalo 1-65535")

        if self.request_timeout_seconds <= 0:
            errors.append("MMS_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("MMS_MAX_RETRIES deve ser >= 0")

        if self.max_message_size_bytes <= 0:
            errors.append("MMS_MAX_MESSAGE_SIZE_BYTES deve ser > 0")

        return errors


def _load_mms_from_env() -> MmsSettings:
    """Carrega MmsSettings de variáveis de ambiente."""
    return MmsSettings(
        mmsc_url=os.getenv("MMSC_URL", ""),
        proxy_host=os.getenv("MMS_PROXY_HOST", ""),
        proxy_port=int(os.getenv("MMS_PROXY_PORT", "80")),
        notify_wap_mmsc=os.getenv("MMS_NOTIFY_WAP_MMSC", "").lower() in ("true", "1", "yes"),
        local_number=os.getenv("MMS_LOCAL_NUMBER", ""),
        user_agent=os.getenv("MMS_USER_AGENT", DEFAULT_USER_AGENT),
        ua_prof_url=os.getenv("MMS_UA_PROF_URL", ""),
        request_timeout_seconds=float(os.getenv("MMS_REQUEST_TIMEOUT_SECONDS", "60")),
        max_retries=int(os.getenv("MMS_MAX_RETRIES", "1")),
        max_message_size_bytes=int(
            os.getenv("MMS_MAX_MESSAGE_SIZE_BYTES", str(DEFAULT_MAX_MESSAGE_SIZE_BYTES))
        ),
    )


@lru_cache(maxsize=1)
def get_mms_settings() -> MmsSettings:
    """Retorna instância cacheada de MmsSettings."""
    return _load_mms_from_env()
