"""Exceções de domínio e de infraestrutura do motor de retrieve MMS."""

from __future__ import annotations


class MmsError(Exception):
    """Base para erros do fluxo MMS."""


class ConstructionError(MmsError):
    """Transação não pode ser construída (fatal, síncrono)."""


class InvalidReferenceError(ConstructionError):
    """Referência não é um locator válido do store local."""


class MissingContentLocationError(ConstructionError):
    """Notificação inexistente ou sem X-Mms-Content-Location."""


class TransportError(MmsError):
    """Falha de troca HTTP com o MMSC, sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


class ParseError(MmsError):
    """PDU mal-formado ou de tipo inesperado."""


class CharsetError(ParseError):
    """Charset de parte sem codec conhecido."""


class PersistError(MmsError):
    """Falha ao gravar a mensagem no store."""


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""
