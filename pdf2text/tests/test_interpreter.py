import logging
import unittest
from unittest.mock import MagicMock

import pytest
from pypdf import PageObject
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
)

from pdf2text.exceptions import PageExtractionError
from pdf2text.extractors.pdf.interpreter import TextRunState, page_text

logger = logging.getLogger(__name__)

tc = unittest.TestCase()

# maps every 2-byte code 0x0000-0x00FF to the character of the same value
LATIN_CMAP = b"1 beginbfrange <0000> <00FF> <0000> endbfrange endcmap"


def _stream(data: bytes) -> DecodedStreamObject:
    stream = DecodedStreamObject()
    stream.set_data(data)
    return stream


def _winansi_font(base_font: str = "/Helvetica") -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject(base_font),
            NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
        }
    )


def _cmap_font() -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type0"),
            NameObject("/BaseFont"): NameObject("/Composite"),
            NameObject("/Encoding"): NameObject("/Identity-H"),
            NameObject("/ToUnicode"): _stream(LATIN_CMAP),
        }
    )


def _make_page(
    content: bytes,
    fonts: dict[str, DictionaryObject] | None = None,
    graphics_states: dict[str, DictionaryObject] | None = None,
) -> PageObject:
    page = PageObject.create_blank_page(width=612, height=792)
    resources = DictionaryObject()
    if fonts is not None:
        resources[NameObject("/Font")] = DictionaryObject(
            {NameObject(name): font for name, font in fonts.items()}
        )
    if graphics_states is not None:
        resources[NameObject("/ExtGState")] = DictionaryObject(
            {NameObject(name): gs for name, gs in graphics_states.items()}
        )
    page[NameObject("/Resources")] = resources
    page[NameObject("/Contents")] = _stream(content)
    return page


def _text(content: bytes, **kwargs) -> str:
    kwargs.setdefault("fonts", {"/F1": _winansi_font()})
    return page_text(_make_page(content, **kwargs))


def test_initial_text_run_state() -> None:
    state = TextRunState()
    tc.assertIsNone(state.font)
    tc.assertEqual(0.0, state.font_size)
    tc.assertEqual(0.0, state.leading)
    tc.assertListEqual([1.0, 0.0, 0.0, 1.0, 0.0, 0.0], state.text_matrix)


def test_show_text_and_next_line() -> None:
    tc.assertEqual(
        "Hi\nthere", _text(b"BT /F1 12 Tf 1 TL (Hi) Tj T* (there) Tj ET")
    )


def test_show_text_and_next_line_with_cmap_font() -> None:
    text = _text(
        b"BT /F1 12 Tf <00480069> Tj T* <00740068006500720065> Tj ET",
        fonts={"/F1": _cmap_font()},
    )
    tc.assertEqual("Hi\nthere", text)


def test_show_text_adjusted() -> None:
    tc.assertEqual("Hello", _text(b"BT /F1 12 Tf [(He) -120 (l) 33.5 (lo)] TJ ET"))


def test_set_text_matrix_on_same_baseline_inserts_tab() -> None:
    tc.assertEqual("\tab", _text(b"BT /F1 12 Tf 1 0 0 1 0 0 Tm (ab) Tj ET"))


def test_set_text_matrix_columns_and_rows() -> None:
    text = _text(
        b"BT /F1 12 Tf "
        b"1 0 0 1 72 700 Tm (Name) Tj "
        b"1 0 0 1 200 700 Tm (Value) Tj "
        b"1 0 0 1 72 686 Tm (Foo) Tj "
        b"1 0 0 1 200 686 Tm (42) Tj "
        b"ET"
    )
    tc.assertEqual("\nName\tValue\nFoo\t42", text)


def test_move_text_position_inserts_one_newline_per_vertical_move() -> None:
    text = _text(
        b"BT /F1 12 Tf (a) Tj 0 -1000 Td (b) Tj 0 0.5 Td (c) Tj 10 0 Td (d) Tj ET"
    )
    tc.assertEqual("a\nb\ncd", text)


def test_next_line_advances_by_leading() -> None:
    text = _text(
        b"BT /F1 12 Tf 14 TL 1 0 0 1 0 700 Tm (a) Tj T* 1 0 0 1 0 686 Tm (b) Tj ET"
    )
    tc.assertEqual("\na\n\tb", text)


def test_vertical_moves_are_scaled_by_text_matrix() -> None:
    text = _text(
        b"BT /F1 12 Tf 10 TL 2 0 0 2 0 700 Tm (a) Tj "
        b"T* 0 -5 Td (b) Tj "
        b"2 0 0 2 0 670 Tm (c) Tj ET"
    )
    # T* lands on 680, Td on 670
    tc.assertEqual("\na\n\nb\tc", text)


def test_text_without_font_is_dropped() -> None:
    tc.assertEqual("", _text(b"BT (Hi) Tj ET"))
    tc.assertEqual("", _text(b"BT /F9 12 Tf (Hi) Tj [(Hi)] TJ ET"))


def test_font_without_encoding_produces_no_text() -> None:
    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Custom"),
        }
    )
    text = _text(b"BT /F1 12 Tf (Hi) Tj T* (there) Tj ET", fonts={"/F1": font})
    tc.assertEqual("\n", text)


def test_switching_fonts() -> None:
    text = _text(
        b"BT /F1 12 Tf (A) Tj /F2 10 Tf <0042> Tj /F1 12 Tf (C) Tj ET",
        fonts={"/F1": _winansi_font(), "/F2": _cmap_font()},
    )
    tc.assertEqual("ABC", text)


def test_graphics_state_selects_font() -> None:
    gs = DictionaryObject(
        {NameObject("/Font"): ArrayObject([_cmap_font(), FloatObject(11)])}
    )
    text = _text(
        b"BT /GS1 gs <00480069> Tj /GS2 gs <0021> Tj ET",
        fonts={},
        graphics_states={"/GS1": gs},
    )
    tc.assertEqual("Hi!", text)


def test_graphics_state_without_font_keeps_current_font() -> None:
    gs = DictionaryObject({NameObject("/CA"): FloatObject(0.5)})
    text = _text(
        b"BT /F1 12 Tf /GS1 gs (ok) Tj ET",
        graphics_states={"/GS1": gs},
    )
    tc.assertEqual("ok", text)


def test_malformed_operators_are_ignored() -> None:
    text = _text(b"BT /F1 12 Tf /F2 Tf (a) Tj 0 Td 1 2 Tm T* (b) Tj ET")
    tc.assertEqual("a\nb", text)


def test_unrelated_operators_are_ignored() -> None:
    text = _text(
        b"q 1 0 0 1 0 0 cm 0 0 1 rg 10 10 100 100 re f Q "
        b"BT /F1 12 Tf 2 Tc 3 Tw (x) Tj ET"
    )
    tc.assertEqual("x", text)


def test_page_without_resources() -> None:
    page = _make_page(b"BT /F1 12 Tf (Hi) Tj ET")
    del page["/Resources"]
    with pytest.raises(PageExtractionError):
        page_text(page)


def test_page_without_contents() -> None:
    page = _make_page(b"")
    del page["/Contents"]
    with pytest.raises(PageExtractionError):
        page_text(page)


def test_page_with_broken_font_reference() -> None:
    pdf = MagicMock()
    pdf.get_object.return_value = None
    page = _make_page(
        b"BT /F1 12 Tf (Hi) Tj ET",
        fonts={"/F1": DictionaryObject()},
    )
    page["/Resources"]["/Font"][NameObject("/F1")] = IndirectObject(7, 0, pdf)
    with pytest.raises(PageExtractionError):
        page_text(page)


def test_empty_content_stream() -> None:
    tc.assertEqual("", _text(b""))


def test_graphics_state_fonts_without_base_font_stay_distinct() -> None:
    simple = _winansi_font()
    del simple["/BaseFont"]
    composite = _cmap_font()
    del composite["/BaseFont"]
    states = {
        "/GS1": DictionaryObject(
            {NameObject("/Font"): ArrayObject([simple, FloatObject(12)])}
        ),
        "/GS2": DictionaryObject(
            {NameObject("/Font"): ArrayObject([composite, FloatObject(12)])}
        ),
    }

    text = _text(
        b"BT /GS1 gs (ab) Tj /GS2 gs <00630064> Tj /GS1 gs (e) Tj ET",
        fonts={},
        graphics_states=states,
    )

    tc.assertEqual("abcde", text)


def test_standard_encoding_font_skips_undefined_codes() -> None:
    font = _winansi_font("/Times-Roman")
    font[NameObject("/Encoding")] = NameObject("/StandardEncoding")

    text = _text(b"BT /F1 12 Tf <41C0D1E0A042> Tj ET", fonts={"/F1": font})

    tc.assertEqual("AB", text)
