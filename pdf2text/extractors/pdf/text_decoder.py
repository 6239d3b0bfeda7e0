from typing import Any, Iterable

from pdf2text.extractors.pdf.fonts import (
    CharMapDecoder,
    CodepageDecoder,
    FontDecodeInfo,
)
from pdf2text.extractors.pdf.objects import string_bytes


def decode_text(data: bytes, info: FontDecodeInfo) -> str:
    """
    Decode the bytes of a shown string with a font's strategy.

    CMap fonts read fixed 2-byte big-endian codes, codepage fonts read single
    bytes. Codes without a mapping are skipped.
    """
    parts: list[str] = []
    if isinstance(info, CharMapDecoder):
        # a trailing odd byte cannot form a code
        for offset in range(0, len(data) - 1, 2):
            text = info.table.get(int.from_bytes(data[offset : offset + 2], "big"))
            if text:
                parts.append(text)
    elif isinstance(info, CodepageDecoder):
        for byte in data:
            char = info.table[byte]
            if char is not None:
                parts.append(char)
    else:
        raise TypeError(f"Unknown font decoder: {info!r}")
    return "".join(parts)


def decode_text_array(items: Iterable[Any], info: FontDecodeInfo) -> str:
    """Decode a ``TJ`` array; the numeric spacing adjustments are ignored."""
    parts: list[str] = []
    for item in items:
        data = string_bytes(item)
        if data is not None:
            parts.append(decode_text(data, info))
    return "".join(parts)
