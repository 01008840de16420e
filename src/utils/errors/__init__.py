"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    CharsetError,
    ConstructionError,
    InfrastructureError,
    InvalidReferenceError,
    MissingContentLocationError,
    MmsError,
    ParseError,
    PersistError,
    RedisConnectionError,
    TransportError,
)

__all__ = [
    "CharsetError",
    "ConstructionError",
    "InfrastructureError",
    "InvalidReferenceError",
    "MissingContentLocationError",
    "MmsError",
    "ParseError",
    "PersistError",
    "RedisConnectionError",
    "TransportError",
]
