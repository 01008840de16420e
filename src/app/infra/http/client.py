"""Cliente HTTP assíncrono com retry/backoff para o MMSC."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

import httpx

from utils.errors import TransportError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429})


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 60.0
    max_retries: int = 1
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 30.0
    default_headers: dict[str, str] = field(default_factory=dict)
    proxy_url: str | None = None
    verify_ssl: bool = True


class HttpClient:
    """Cliente HTTP simples para GET/POST de bytes.

    Status 429/5xx e erros de conexão/timeout são retentados com
    backoff exponencial. Qualquer falha final vira TransportError.

    Args:
        config: Configuração do cliente
        transport: Transporte httpx alternativo (ex.: MockTransport em testes)
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._transport = transport

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    async def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        return await self._request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        content: bytes,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self._request("POST", url, content=content, headers=headers)

    async def _request(
        self,
        method: str,
        url: str,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        merged_headers = {**self._config.default_headers, **(headers or {})}
        for attempt in range(self._config.max_retries + 1):
            try:
                async with self._client() as client:
                    response = await client.request(
                        method,
                        url,
                        content=content,
                        headers=merged_headers,
                        timeout=self._config.timeout_seconds,
                    )
                _raise_for_status(response)
                return response
            except TransportError as exc:
                if not exc.is_retryable or attempt >= self._config.max_retries:
                    raise
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if attempt >= self._config.max_retries:
                    raise TransportError("http_connection_error", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except httpx.HTTPError as exc:
                raise TransportError("http_request_error") from exc
        raise TransportError("http_retry_exhausted", is_retryable=True)

    def _client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(transport=self._transport)
        return httpx.AsyncClient(proxy=self._config.proxy_url, verify=self._config.verify_ssl)


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status in RETRYABLE_STATUS_CODES or status >= 500:
        raise TransportError("http_retryable_status", status_code=status, is_retryable=True)
    if status >= 400:
        raise TransportError("http_error_status", status_code=status)


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
