"""Transporte HTTP com o MMSC (GET do content-location, POST de PDUs).

Todas as requisições passam pelo proxy WAP da operadora quando
configurado e carregam os headers WAP esperados pelo MMSC.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.infra.http import HttpClient, HttpClientConfig
from utils.errors import TransportError

if TYPE_CHECKING:
    import httpx

    from config.settings import MmsSettings

logger = logging.getLogger(__name__)

MMS_MESSAGE_CONTENT_TYPE = "application/vnd.wap.mms-message"
ACCEPT_HEADER = "*/*, application/vnd.wap.mms-message, application/vnd.wap.sic"
ACCEPT_LANGUAGE_HEADER = "en-US"


def build_wap_headers(settings: MmsSettings) -> dict[str, str]:
    """Headers comuns de toda requisição ao MMSC."""
    headers = {
        "Accept": ACCEPT_HEADER,
        "Accept-Language": ACCEPT_LANGUAGE_HEADER,
        "User-Agent": settings.user_agent,
    }
    if settings.ua_prof_url:
        headers["x-wap-profile"] = settings.ua_prof_url
    return headers


class MmsHttpTransport:
    """Implementação de MmsTransportProtocol sobre httpx.

    Args:
        settings: Configuração do MMSC/proxy
        http_client: Cliente HTTP (criado a partir de settings se None)
    """

    def __init__(self, settings: MmsSettings, http_client: HttpClient | None = None) -> None:
        self._settings = settings
        self._http = http_client or HttpClient(
            HttpClientConfig(
                timeout_seconds=settings.request_timeout_seconds,
                max_retries=settings.max_retries,
                default_headers=build_wap_headers(settings),
                proxy_url=settings.proxy_url,
            )
        )

    async def fetch(self, url: str) -> bytes:
        response = await self._http.get(url)
        self._check_size(response)
        logger.info(
            "mms_fetch_completed",
            extra={"status_code": response.status_code, "size_bytes": len(response.content)},
        )
        return response.content

    async def send(self, pdu: bytes, url: str | None = None) -> bytes:
        target = url or self._settings.mmsc_url
        if not target:
            raise TransportError("mmsc_url_not_configured")

        response = await self._http.post(
            target,
            content=pdu,
            headers={"Content-Type": MMS_MESSAGE_CONTENT_TYPE},
        )
        logger.info(
            "mms_send_completed",
            extra={
                "status_code": response.status_code,
                "explicit_endpoint": url is not None,
                "size_bytes": len(pdu),
            },
        )
        return response.content

    def _check_size(self, response: httpx.Response) -> None:
        limit = self._settings.max_message_size_bytes
        content_length = response.headers.get("content-length")
        declared = int(content_length) if content_length and content_length.isdigit() else 0
        if max(declared, len(response.content)) > limit:
            raise TransportError("mms_message_too_large", status_code=response.status_code)
