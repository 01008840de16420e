"""Locators de registros do store local (``content://mms/<id>``)."""

from __future__ import annotations

from utils.errors import InvalidReferenceError

CONTENT_SCHEME = "content://"
MMS_AUTHORITY = "mms"
MMS_CONTENT_URI = f"{CONTENT_SCHEME}{MMS_AUTHORITY}"


def build_locator(record_id: int) -> str:
    """Monta locator a partir do id do registro."""
    return f"{MMS_CONTENT_URI}/{record_id}"


def parse_locator(uri: str) -> int:
    """Extrai o id do registro de um locator.

    Raises:
        InvalidReferenceError: Se o uri não é um locator do store local.
    """
    if not isinstance(uri, str) or not uri.startswith(CONTENT_SCHEME):
        raise InvalidReferenceError(f"Locator fora do store local: {uri!r}")

    authority, _, tail = uri[len(CONTENT_SCHEME):].partition("/")
    if authority != MMS_AUTHORITY or not tail:
        raise InvalidReferenceError(f"Locator inválido: {uri!r}")

    record_id = tail.rsplit("/", 1)[-1]
    if not record_id.isdigit():
        raise InvalidReferenceError(f"Locator sem id numérico: {uri!r}")
    return int(record_id)
