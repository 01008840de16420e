"""Normalização de charset das partes de uma M-Retrieve.conf.

Converte o texto de cada parte para UTF-8, remapeando os glyphs
legados (emoji de operadora japonesa) codificados na área definida
pelo usuário do Shift-JIS para a faixa Unicode PUA correspondente.

Regras (em ordem):
1. charset SHIFT_JIS, ou charset não especificado com text/html:
   decodifica como Windows-31J, remapeia glyphs, grava UTF-8.
2. charset ISO-2022-JP (39): decodifica e grava UTF-8.
3. text/html com charset diferente de UTF-8: decodifica pelo nome
   MIME do charset e grava UTF-8.
4. Demais partes ficam intactas.
"""

from __future__ import annotations

import codecs
import logging
from typing import TYPE_CHECKING

from app.domain import charsets
from app.domain.pdu import TEXT_HTML
from utils.errors import CharsetError

if TYPE_CHECKING:
    from app.domain.pdu import PduBody, PduPart

logger = logging.getLogger(__name__)

ISO_2022_JP_CODEC = "iso2022_jp"

# primeiro byte -> (base quando segundo < 0xA0, base caso contrário)
_GLYPH_BASES: dict[int, tuple[int, int]] = {
    0xF7: (0xE100, 0xE200),
    0xF9: (0xE000, 0xE300),
    0xFB: (0xE400, 0xE500),
}


def remap_glyph(first: int, second: int) -> int | None:
    """Code point PUA para o par de bytes legado, ou None se não é glyph."""
    bases = _GLYPH_BASES.get(first)
    if bases is None:
        return None

    base = bases[0] if second < 0xA0 else bases[1]
    if second < 0x80:
        return base + (second - 0x40)
    if second > 0xA0:
        return base + (second - 0xA0)
    return base + (second - 0x41)


def _is_lead_byte(byte: int) -> bool:
    return 0x81 <= byte <= 0x9F or 0xE0 <= byte <= 0xFC


def _is_trail_byte(byte: int) -> bool:
    return 0x40 <= byte <= 0xFC and byte != 0x7F


def _build_glyph_table() -> dict[str, int]:
    """Caractere decodificado de cada par legado -> code point PUA."""
    table: dict[str, int] = {}
    for first in _GLYPH_BASES:
        for second in range(0x40, 0xFD):
            if not _is_trail_byte(second):
                continue
            try:
                char = bytes([first, second]).decode(charsets.SHIFT_JIS_VARIANT_CODEC)
            except UnicodeDecodeError:
                continue
            table.setdefault(char, remap_glyph(first, second))
    return table


# o encoder cp932 devolve as linhas IBM (0xFA-0xFC) pelos bytes NEC
# (0xED/0xEE), então o par original não é recuperável por re-encode
_GLYPH_CHARS = _build_glyph_table()


def to_unicode_softbank_glyph(char: str) -> int:
    """Code point remapeado do caractere, ou -1 se não aplicável."""
    return _GLYPH_CHARS.get(char, -1)


def remap_glyphs(text: str) -> str:
    """Aplica o remap caractere a caractere sobre a string inteira."""
    out: list[str] = []
    for char in text:
        code_point = to_unicode_softbank_glyph(char)
        out.append(chr(code_point) if code_point > 0 else char)
    return "".join(out)


def decode_shift_jis(data: bytes) -> str:
    """Decodifica Windows-31J remapeando glyphs pelos bytes de origem.

    Percorre o payload caractere a caractere (1 ou 2 bytes conforme o
    lead byte); trechos sem glyph são decodificados em bloco, com
    sequências malformadas virando U+FFFD.
    """
    codec = charsets.SHIFT_JIS_VARIANT_CODEC
    out: list[str] = []
    pending = 0  # início do trecho ainda não decodificado
    index = 0
    while index < len(data):
        first = data[index]
        if (
            _is_lead_byte(first)
            and index + 1 < len(data)
            and _is_trail_byte(data[index + 1])
        ):
            code_point = remap_glyph(first, data[index + 1])
            if code_point is not None:
                out.append(data[pending:index].decode(codec, errors="replace"))
                out.append(chr(code_point))
                pending = index + 2
            index += 2
        else:
            index += 1
    out.append(data[pending:].decode(codec, errors="replace"))
    return "".join(out)


def _codec_for(charset: int) -> str:
    try:
        return codecs.lookup(charsets.get_codec_name(charset)).name
    except (KeyError, LookupError) as exc:
        raise CharsetError(f"Charset sem codec: {charset}") from exc


def normalize_part_data(
    data: bytes,
    charset: int,
    content_type: str,
) -> tuple[bytes, int]:
    """Transformação pura (bytes, charset, content-type) -> (bytes, charset).

    Raises:
        CharsetError: text/html com charset desconhecido.
    """
    is_html = content_type == TEXT_HTML

    if charset == charsets.SHIFT_JIS or (charset == charsets.ANY_CHARSET and is_html):
        return decode_shift_jis(data).encode("utf-8"), charsets.UTF_8

    if charset == charsets.ISO_2022_JP:
        text = data.decode(ISO_2022_JP_CODEC, errors="replace")
        return text.encode("utf-8"), charsets.UTF_8

    if is_html and charset != charsets.UTF_8:
        text = data.decode(_codec_for(charset), errors="replace")
        return text.encode("utf-8"), charsets.UTF_8

    return data, charset


def normalize_part(part: PduPart) -> None:
    """Normaliza a parte in-place (dados e charset juntos)."""
    logger.debug(
        "part_charset_inspected",
        extra={"content_type": part.content_type_str, "charset": part.charset},
    )
    part.set_text(*normalize_part_data(part.data, part.charset, part.content_type_str))


def normalize_body(body: PduBody | None) -> int:
    """Normaliza todas as partes; retorna quantas foram convertidas."""
    if body is None:
        return 0
    converted = 0
    for part in body:
        before = part.charset
        normalize_part(part)
        if part.charset != before:
            converted += 1
    return converted
