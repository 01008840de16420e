"""Registro de notificação pendente de download."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain import columns


class NotificationRecord(BaseModel):
    """M-Notification.ind persistida, antes do download.

    Lida uma vez na construção da transação; imutável depois disso.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    uri: str = Field(..., description="Locator da notificação no store.")
    content_location: str = Field(..., min_length=1, description="X-Mms-Content-Location.")
    locked: bool = Field(default=False, description="Fixada pelo usuário contra auto-delete.")

    @classmethod
    def from_record(cls, uri: str, record: dict[str, Any]) -> NotificationRecord:
        """Constrói a partir de um registro cru do store."""
        return cls(
            uri=uri,
            content_location=record.get(columns.CONTENT_LOCATION) or "",
            locked=bool(record.get(columns.LOCKED, False)),
        )
