"""
Font decode resolution
======================

Every font used on a page gets exactly one strategy for turning shown
strings into text:

- ``CharMapDecoder``: the font embeds a ToUnicode CMap. Shown strings are
  read as 2-byte codes and looked up in the parsed table.
- ``CodepageDecoder``: the font declares one of the base encodings
  (Standard, WinAnsi, Symbol). Shown strings are read byte by byte through
  the shared codepage.

Fonts offering neither are left out of the page's font cache; text shown
with them produces no output.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pypdf.generic import DictionaryObject, IndirectObject, NameObject, StreamObject

from pdf2text.exceptions import PageExtractionError
from pdf2text.extractors.pdf.cmap_parser import CharMap, parse_cmap
from pdf2text.extractors.pdf.encodings import Codepage, get_codepage
from pdf2text.extractors.pdf.objects import resolve_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharMapDecoder:
    table: CharMap


@dataclass(frozen=True)
class CodepageDecoder:
    # shared module-level table, never copied
    table: Codepage


FontDecodeInfo = Union[CharMapDecoder, CodepageDecoder]

# resource name (e.g. "/F1") or graphics state font key -> decode strategy
FontCache = dict[str, FontDecodeInfo]


def _base_encoding_name(encoding: Any) -> Optional[str]:
    if isinstance(encoding, NameObject):
        return str(encoding)
    if isinstance(encoding, DictionaryObject):
        base = resolve_object(encoding.get("/BaseEncoding"))
        if isinstance(base, NameObject):
            return str(base)
    return None


def _stream_data(stream: StreamObject) -> bytes:
    try:
        return stream.get_data()
    except Exception as exc:
        raise PageExtractionError("Failed to read ToUnicode stream", cause=exc) from exc


def resolve_font(font: Any) -> Optional[FontDecodeInfo]:
    """
    Choose the decode strategy of a font dictionary.

    A ToUnicode stream wins over the base encoding. Returns None when the
    font carries no usable encoding information. The font is not modified.

    Raises:
        PageExtractionError: A reference to the font's encoding data is broken.
    """
    font = resolve_object(font)
    if not isinstance(font, DictionaryObject):
        logger.debug("Ignoring font resource that is not a dictionary: %r", font)
        return None

    to_unicode = resolve_object(font.get("/ToUnicode"))
    if isinstance(to_unicode, StreamObject):
        return CharMapDecoder(table=parse_cmap(_stream_data(to_unicode)))

    encoding = resolve_object(font.get("/Encoding"))
    if encoding is None:
        return None
    name = _base_encoding_name(encoding)
    codepage = get_codepage(name) if name else None
    if codepage is None:
        logger.warning(
            "Unsupported font encoding %s for font %s",
            name or encoding,
            font.get("/BaseFont"),
        )
        return None
    return CodepageDecoder(table=codepage)


def _add_font(cache: FontCache, name: str, font: Any) -> None:
    info = resolve_font(font)
    if info is None:
        return
    cache[str(name)] = info


def build_font_cache(resources: Any) -> FontCache:
    """
    Resolve every font a page can select.

    Covers the fonts of the ``/Font`` resource dictionary, keyed by resource
    name, and the fonts set by ``/ExtGState`` entries, keyed by
    ``font_cache_key``.
    """
    cache: FontCache = {}
    resources = resolve_object(resources)

    fonts = resolve_object(resources.get("/Font"))
    if isinstance(fonts, DictionaryObject):
        for name, font in fonts.items():
            _add_font(cache, name, font)

    graphics_states = resolve_object(resources.get("/ExtGState"))
    if isinstance(graphics_states, DictionaryObject):
        for gs in graphics_states.values():
            font_ref = graphics_state_font(gs)
            if font_ref is None:
                continue
            _add_font(cache, font_cache_key(font_ref[0]), font_ref[0])

    logger.debug("Resolved %d fonts for page", len(cache))
    return cache


def graphics_state_font(gs: Any) -> Optional[tuple[Any, float]]:
    """Return the ``(font, size)`` pair a graphics state declares, if any."""
    gs = resolve_object(gs)
    if not isinstance(gs, DictionaryObject):
        return None
    entry = resolve_object(gs.get("/Font"))
    if not isinstance(entry, list) or len(entry) < 2:
        return None
    try:
        size = float(resolve_object(entry[1]))
    except (TypeError, ValueError):
        return None
    return entry[0], size


def font_cache_key(font: Any) -> str:
    """
    Cache key of a font selected through a graphics state.

    Takes the ``/Font`` entry of the graphics state as found, before
    resolution. Fonts are told apart by object identity, never by name, so
    two fonts sharing (or lacking) a ``/BaseFont`` keep separate entries.
    """
    reference = font
    if not isinstance(reference, IndirectObject):
        reference = getattr(font, "indirect_reference", None)
    if isinstance(reference, IndirectObject):
        return f"gs:{reference.idnum} {reference.generation} R"
    return f"gs:{id(font)}"
