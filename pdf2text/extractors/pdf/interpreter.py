"""
Content stream interpreter
==========================

Walks the operators of one page's content stream and assembles the shown
text in stream order. There is no layout analysis: line and column breaks
are guessed from the vertical translation of the text matrix alone.

Handled operators
-----------------
    - gs: graphics state; may select a font and size
    - TL: set leading
    - Tf: select font and size
    - Tj, TJ: show text (TJ spacing adjustments are ignored)
    - T*: next line, emits "\\n"
    - Td: move text position, emits "\\n" on any vertical move
    - Tm: set text matrix, emits "\\t" when the baseline is unchanged and
      "\\n" otherwise

All other operators are ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Protocol

from pypdf.generic import DictionaryObject

from pdf2text.exceptions import PageExtractionError
from pdf2text.extractors.pdf.fonts import (
    FontCache,
    FontDecodeInfo,
    build_font_cache,
    font_cache_key,
    graphics_state_font,
)
from pdf2text.extractors.pdf.objects import resolve_object, string_bytes
from pdf2text.extractors.pdf.text_decoder import decode_text, decode_text_array

logger = logging.getLogger(__name__)

IDENTITY_MATRIX = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

Operation = tuple[list[Any], bytes]


class PageLike(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def get_contents(self) -> Any: ...


@dataclass
class TextRunState:
    font: Optional[FontDecodeInfo] = None
    font_size: float = 0.0
    leading: float = 0.0
    # [a, b, c, d, e, f]
    text_matrix: list[float] = field(default_factory=lambda: list(IDENTITY_MATRIX))

    @property
    def vertical_scale(self) -> float:
        return self.text_matrix[3]

    @property
    def vertical_translation(self) -> float:
        return self.text_matrix[5]

    def translate_vertically(self, delta: float) -> None:
        self.text_matrix[5] += delta


class _PageInterpreter:
    """Single pass over the operations of one page."""

    def __init__(self, resources: DictionaryObject, fonts: FontCache) -> None:
        self.resources = resources
        self.fonts = fonts
        self.state = TextRunState()
        self._out: list[str] = []

    def run(self, operations: Iterable[Operation]) -> str:
        for operands, operator in operations:
            op = (
                operator.decode("latin-1")
                if isinstance(operator, bytes)
                else str(operator)
            )
            handler = self._HANDLERS.get(op)
            if handler is None:
                continue
            try:
                handler(self, operands)
            except (IndexError, TypeError, ValueError) as exc:
                logger.debug("Ignoring malformed %s operator %r: %s", op, operands, exc)
        return "".join(self._out)

    # -------------------------------------------------------------------------
    # Font selection
    # -------------------------------------------------------------------------
    def _set_graphics_state(self, operands: list[Any]) -> None:
        name = operands[0]
        states = resolve_object(self.resources.get("/ExtGState"))
        gs = states.get(name) if isinstance(states, DictionaryObject) else None
        if gs is None:
            logger.debug("Unknown graphics state %s", name)
            return
        font_entry = graphics_state_font(gs)
        if font_entry is None:
            return
        font, size = font_entry
        self.state.font = self.fonts.get(font_cache_key(font))
        self.state.font_size = size

    def _set_font(self, operands: list[Any]) -> None:
        size = float(operands[1])
        self.state.font = self.fonts.get(str(operands[0]))
        self.state.font_size = size

    def _set_leading(self, operands: list[Any]) -> None:
        self.state.leading = float(operands[0])

    # -------------------------------------------------------------------------
    # Text showing
    # -------------------------------------------------------------------------
    def _show_text(self, operands: list[Any]) -> None:
        if self.state.font is None:
            return
        data = string_bytes(operands[0])
        if data is not None:
            self._out.append(decode_text(data, self.state.font))

    def _show_text_adjusted(self, operands: list[Any]) -> None:
        if self.state.font is None:
            return
        items = operands[0]
        if isinstance(items, list):
            self._out.append(decode_text_array(items, self.state.font))

    # -------------------------------------------------------------------------
    # Positioning
    # -------------------------------------------------------------------------
    def _next_line(self, operands: list[Any]) -> None:
        self._out.append("\n")
        self.state.translate_vertically(
            -(self.state.leading * self.state.vertical_scale)
        )

    def _move_text_position(self, operands: list[Any]) -> None:
        dy = float(operands[1])
        self.state.translate_vertically(dy * self.state.vertical_scale)
        if dy != 0:
            self._out.append("\n")

    def _set_text_matrix(self, operands: list[Any]) -> None:
        matrix = [float(value) for value in operands[:6]]
        if len(matrix) != 6:
            raise ValueError(f"Expected 6 matrix operands, got {len(matrix)}")
        if matrix[5] == self.state.vertical_translation:
            # same baseline, next column
            self._out.append("\t")
        else:
            self._out.append("\n")
        self.state.text_matrix = matrix

    _HANDLERS: dict[str, Callable[["_PageInterpreter", list[Any]], None]] = {
        "gs": _set_graphics_state,
        "TL": _set_leading,
        "Tf": _set_font,
        "Tj": _show_text,
        "TJ": _show_text_adjusted,
        "T*": _next_line,
        "Td": _move_text_position,
        "Tm": _set_text_matrix,
    }


def _page_operations(page: PageLike) -> list[Operation]:
    try:
        contents = page.get_contents()
        if contents is None:
            raise PageExtractionError("Page has no content stream")
        return contents.operations
    except PageExtractionError:
        raise
    except Exception as exc:
        raise PageExtractionError(
            "Failed to parse page content stream", cause=exc
        ) from exc


def page_text(page: PageLike) -> str:
    """
    Extract the text of a single PDF page.

    Args:
        page: A pypdf ``PageObject`` (or anything offering ``get`` and
            ``get_contents`` the same way).

    Returns:
        The decoded text in content stream order, with "\\n" for new lines
        and "\\t" for runs on the same baseline.

    Raises:
        PageExtractionError: The page has no resource table or content
            stream, or a reference to its font data is broken.
    """
    resources = resolve_object(page.get("/Resources"))
    if not isinstance(resources, DictionaryObject):
        raise PageExtractionError("Page has no resource table")
    operations = _page_operations(page)

    fonts = build_font_cache(resources)
    text = _PageInterpreter(resources, fonts).run(operations)
    logger.debug(
        "Interpreted %d operations into %d characters", len(operations), len(text)
    )
    return text
