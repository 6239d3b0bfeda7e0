"""
ToUnicode CMap parser
=====================

Builds the character-code to Unicode table of a font from its embedded
ToUnicode CMap. A CMap is a small PostScript program; only the parts that
define mappings are interpreted:

    2 beginbfchar
    <01> <0041>
    <0002> <00660069>
    endbfchar
    1 beginbfrange
    <0010> <0012> <0061>
    <0020> <0021> [<0078> <0079>]
    endbfrange
    endcmap

Everything else (code space ranges, CIDSystemInfo, resource operators) is
skipped. The parser never raises: malformed or truncated programs yield
whatever entries were read before the damage.

Known Limitations
-----------------
- bfrange destinations are incremented on their last byte only, without a
  carry into the preceding byte. Ranges whose destination crosses a 256
  boundary, or that map to surrogate pairs, produce wrong characters.
- bfrange source codes must be exactly 2 bytes; other widths end the block.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

# private module; pyproject.toml caps pypdf below the next major release
from pypdf._utils import read_non_whitespace, read_until_regex
from pypdf.generic import ArrayObject, NameObject, read_object

from pdf2text.extractors.pdf.encodings import utf16be_to_string
from pdf2text.extractors.pdf.objects import is_pdf_string, string_bytes

logger = logging.getLogger(__name__)

# 16-bit character code -> Unicode text (several characters for ligatures)
CharMap = dict[int, str]

_END_OF_DATA = object()


@dataclass(frozen=True)
class Keyword:
    """A bare PostScript operator such as ``beginbfchar``."""

    name: bytes


def _iter_tokens(data: bytes) -> Iterator[Any]:
    """Yield pypdf primitive objects and ``Keyword`` tokens from CMap data."""
    stream = io.BytesIO(data)
    while True:
        peek = read_non_whitespace(stream)
        if not peek:
            return
        if peek in (b"{", b"}"):
            # procedure braces carry no mapping data
            continue
        stream.seek(-1, 1)
        if peek == b"%":
            while peek not in (b"\r", b"\n", b""):
                peek = stream.read(1)
        elif peek.isalpha():
            yield Keyword(
                read_until_regex(stream=stream, regex=NameObject.delimiter_pattern)
            )
        else:
            try:
                yield read_object(stream, None, forced_encoding="bytes")
            except Exception as exc:
                logger.debug(
                    "Stopping CMap tokenization at offset %d: %s", stream.tell(), exc
                )
                return


class _TokenReader:
    """Token source with single-token push back for the block loops."""

    def __init__(self, data: bytes) -> None:
        self._tokens = _iter_tokens(data)
        self._pushed: list[Any] = []

    def next(self) -> Any:
        if self._pushed:
            return self._pushed.pop()
        return next(self._tokens, _END_OF_DATA)

    def push_back(self, token: Any) -> None:
        self._pushed.append(token)


def _read_string(reader: _TokenReader) -> Optional[bytes]:
    token = reader.next()
    if not is_pdf_string(token):
        reader.push_back(token)
        return None
    return string_bytes(token)


def _read_code16(reader: _TokenReader) -> Optional[int]:
    token = reader.next()
    data = string_bytes(token)
    if data is None or len(data) != 2:
        reader.push_back(token)
        return None
    return int.from_bytes(data, "big")


def _read_bfchar_entry(reader: _TokenReader) -> Optional[tuple[bytes, bytes]]:
    """Read ``<src> <dst>``; None when the next tokens have another shape."""
    source = _read_string(reader)
    if source is None:
        return None
    destination = _read_string(reader)
    if destination is None:
        return None
    return source, destination


def _read_bfrange_entry(
    reader: _TokenReader,
) -> Optional[tuple[int, int, bytes | ArrayObject]]:
    """Read ``<start> <end> <dst>`` or ``<start> <end> [...]``."""
    start = _read_code16(reader)
    if start is None:
        return None
    end = _read_code16(reader)
    if end is None:
        return None
    token = reader.next()
    if is_pdf_string(token):
        return start, end, string_bytes(token)
    if isinstance(token, ArrayObject):
        return start, end, token
    reader.push_back(token)
    return None


def _parse_bfchar_block(reader: _TokenReader, table: CharMap) -> None:
    while True:
        entry = _read_bfchar_entry(reader)
        if entry is None:
            return
        source, destination = entry
        if len(source) not in (1, 2):
            logger.debug(
                "Skipping bfchar entry with %d byte source code %r -> %r",
                len(source),
                source,
                destination,
            )
            continue
        table[int.from_bytes(source, "big")] = utf16be_to_string(destination)


def _parse_bfrange_block(reader: _TokenReader, table: CharMap) -> None:
    while True:
        entry = _read_bfrange_entry(reader)
        if entry is None:
            return
        start, end, destination = entry
        if isinstance(destination, bytes):
            current = bytearray(destination)
            for code in range(start, end + 1):
                table[code] = utf16be_to_string(current)
                if current:
                    current[-1] = (current[-1] + 1) & 0xFF
            continue
        for code, item in zip(range(start, end + 1), destination):
            data = string_bytes(item)
            if data is None:
                logger.debug("Skipping bfrange array element %r for code %d", item, code)
                continue
            table[code] = utf16be_to_string(data)


def parse_cmap(data: bytes) -> CharMap:
    """
    Parse a ToUnicode CMap program into a code -> text table.

    Args:
        data: The decoded bytes of the ToUnicode stream.

    Returns:
        Mapping of character codes to Unicode strings. Later definitions of
        the same code overwrite earlier ones. Scanning ends at ``endcmap``.
    """
    table: CharMap = {}
    reader = _TokenReader(data)
    while True:
        token = reader.next()
        if token is _END_OF_DATA:
            break
        if not isinstance(token, Keyword):
            continue
        if token.name == b"beginbfchar":
            _parse_bfchar_block(reader, table)
        elif token.name == b"beginbfrange":
            _parse_bfrange_block(reader, table)
        elif token.name == b"endcmap":
            break
    logger.debug("Parsed CMap with %d entries", len(table))
    return table
