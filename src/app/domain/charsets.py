"""Tabela de charsets MMS (MIBenum IANA) e seus nomes MIME.

O valor 0 (ANY_CHARSET) significa charset não especificado na parte.
"""

from __future__ import annotations

ANY_CHARSET = 0x00
US_ASCII = 0x03
ISO_8859_1 = 0x04
ISO_8859_2 = 0x05
ISO_8859_3 = 0x06
ISO_8859_4 = 0x07
ISO_8859_5 = 0x08
ISO_8859_6 = 0x09
ISO_8859_7 = 0x0A
ISO_8859_8 = 0x0B
ISO_8859_9 = 0x0C
SHIFT_JIS = 0x11
EUC_KR = 0x26
ISO_2022_JP = 0x27
UTF_8 = 0x6A
UCS2 = 0x03E8
UTF_16 = 0x03F7
GBK = 0x71
GB2312 = 0x07E9
BIG5 = 0x07EA

# MIBenum -> nome MIME (como aparece no wire / headers)
MIME_NAMES: dict[int, str] = {
    ANY_CHARSET: "*",
    US_ASCII: "us-ascii",
    ISO_8859_1: "iso-8859-1",
    ISO_8859_2: "iso-8859-2",
    ISO_8859_3: "iso-8859-3",
    ISO_8859_4: "iso-8859-4",
    ISO_8859_5: "iso-8859-5",
    ISO_8859_6: "iso-8859-6",
    ISO_8859_7: "iso-8859-7",
    ISO_8859_8: "iso-8859-8",
    ISO_8859_9: "iso-8859-9",
    SHIFT_JIS: "shift_JIS",
    EUC_KR: "euc-kr",
    ISO_2022_JP: "iso-2022-jp",
    UTF_8: "utf-8",
    UCS2: "iso-10646-ucs-2",
    UTF_16: "utf-16",
    GBK: "gbk",
    GB2312: "gb2312",
    BIG5: "big5",
}

# Variante Shift-JIS usada pelas operadoras (Windows-31J); cobre a área
# definida pelo usuário 0xF040-0xF9FC onde ficam os glyphs legados.
SHIFT_JIS_VARIANT_CODEC = "cp932"

# Nomes MIME sem codec homônimo no Python (UCS-2 sem BOM é big-endian)
CODEC_NAMES: dict[int, str] = {
    UCS2: "utf-16-be",
}


def get_mime_name(mib_enum: int) -> str:
    """Retorna o nome MIME do charset.

    Raises:
        KeyError: Se o MIBenum não é suportado.
    """
    return MIME_NAMES[mib_enum]


def get_codec_name(mib_enum: int) -> str:
    """Retorna o nome de codec Python do charset.

    Raises:
        KeyError: Se o MIBenum não é suportado.
    """
    return CODEC_NAMES.get(mib_enum) or get_mime_name(mib_enum)


def get_mib_enum(mime_name: str) -> int:
    """Retorna o MIBenum para um nome MIME (case-insensitive)."""
    lowered = mime_name.lower()
    for mib, name in MIME_NAMES.items():
        if name.lower() == lowered:
            return mib
    raise KeyError(mime_name)
