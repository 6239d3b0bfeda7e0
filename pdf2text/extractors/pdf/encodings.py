"""
Character tables used to turn shown PDF strings into Unicode.

Two families of tables exist:

- UTF-16BE text carried inside ToUnicode CMaps, decoded with
  ``utf16be_to_string``.
- Single-byte codepages of the PDF base encodings (Standard, WinAnsi,
  Symbol). They are built once at import time from the tables pypdf ships
  and shared read-only by every font using them.
"""

import logging
import unicodedata
from typing import Optional, Sequence

# private module; pyproject.toml caps pypdf below the next major release
from pypdf._codecs import _std_encoding, _symbol_encoding, _win_encoding

logger = logging.getLogger(__name__)

# byte value (0-255) -> character, None where the encoding has no glyph
Codepage = tuple[Optional[str], ...]


def utf16be_to_string(data: bytes) -> str:
    """Decode big-endian UTF-16 code units, dropping anything undecodable."""
    return bytes(data).decode("utf-16-be", errors="ignore")


# Codes above 0x9F without a glyph in StandardEncoding. pypdf fills them
# with the Latin-1 character of the same value.
_STANDARD_UNDEFINED = frozenset(
    [0xA0, 0xB0, 0xB5, 0xBE, 0xC0, 0xC9, 0xCC]
    + list(range(0xD1, 0xE0))
    + [0xE0, 0xE2, 0xE4, 0xE5, 0xE6, 0xE7, 0xEC, 0xED, 0xEE, 0xEF]
    + [0xF0, 0xF2, 0xF3, 0xF4, 0xF6, 0xF7, 0xFC, 0xFD, 0xFE, 0xFF]
)

# same for SymbolEncoding
_SYMBOL_UNDEFINED = frozenset([0xF0, 0xFF])


def _build_codepage(
    table: Sequence[str], undefined: frozenset[int] = frozenset()
) -> Codepage:
    # control characters mark the remaining unused positions
    return tuple(
        None if code in undefined or unicodedata.category(char) == "Cc" else char
        for code, char in enumerate(table)
    )


STANDARD: Codepage = _build_codepage(_std_encoding, _STANDARD_UNDEFINED)
WINANSI: Codepage = _build_codepage(_win_encoding)
SYMBOL: Codepage = _build_codepage(_symbol_encoding, _SYMBOL_UNDEFINED)

BASE_ENCODINGS: dict[str, Codepage] = {
    "/StandardEncoding": STANDARD,
    "/WinAnsiEncoding": WINANSI,
    "/SymbolEncoding": SYMBOL,
}


def get_codepage(name: str) -> Optional[Codepage]:
    """Return the shared codepage for a base encoding name such as ``/WinAnsiEncoding``."""
    codepage = BASE_ENCODINGS.get(str(name))
    if codepage is None:
        logger.debug("No codepage for base encoding %s", name)
    return codepage
