import io
from typing import Callable, Optional

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    DecodedStreamObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    StreamObject,
)

# (content stream, fonts by resource name); None content leaves /Contents out
PageDefinition = tuple[Optional[bytes], Optional[dict[str, DictionaryObject]]]


def _winansi_font(writer: PdfWriter) -> IndirectObject:
    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
            NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
        }
    )
    return writer._add_object(font)


def _add_stream(writer: PdfWriter, data: bytes) -> IndirectObject:
    stream = DecodedStreamObject()
    stream.set_data(data)
    return writer._add_object(stream)


def _write_pdf(pages: list[PageDefinition], password: Optional[str] = None) -> bytes:
    writer = PdfWriter()
    helvetica = _winansi_font(writer)
    for content, fonts in pages:
        page = writer.add_blank_page(width=612, height=792)
        if fonts is None:
            # no resource table at all
            del page[NameObject("/Resources")]
        else:
            font_dict = DictionaryObject({NameObject("/F1"): helvetica})
            for name, font in fonts.items():
                for key, value in list(font.items()):
                    # streams can only be written as indirect objects
                    if isinstance(value, StreamObject):
                        font[key] = writer._add_object(value)
                font_dict[NameObject(name)] = writer._add_object(font)
            page[NameObject("/Resources")] = DictionaryObject(
                {NameObject("/Font"): font_dict}
            )
        if content is not None:
            page[NameObject("/Contents")] = _add_stream(writer, content)
    if password is not None:
        writer.encrypt(user_password=password, algorithm="RC4-128")
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """
    Build a PDF in memory.

    Each page is ``(content, fonts)``. Every page with a resource table can
    select ``/F1`` (Helvetica, WinAnsiEncoding); ``fonts`` adds more.
    """

    return _write_pdf
