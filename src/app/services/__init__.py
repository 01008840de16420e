"""Serviços de aplicação do fluxo de retrieve MMS.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.acknowledgement import build_acknowledge_ind, send_acknowledge_ind
from app.services.charset_normalizer import (
    decode_shift_jis,
    normalize_body,
    normalize_part,
    normalize_part_data,
    remap_glyph,
    to_unicode_softbank_glyph,
)
from app.services.download_manager import mark_state
from app.services.duplicate_detector import is_duplicate_message
from app.services.recycler import MmsRecycler
from app.services.retry_scheduler import RetryScheduler

__all__ = [
    "MmsRecycler",
    "RetryScheduler",
    "build_acknowledge_ind",
    "decode_shift_jis",
    "is_duplicate_message",
    "mark_state",
    "normalize_body",
    "normalize_part",
    "normalize_part_data",
    "remap_glyph",
    "send_acknowledge_ind",
    "to_unicode_softbank_glyph",
]
