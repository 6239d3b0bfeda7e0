"""
pdf-to-text: Text extraction for PDF pages.

Rebuilds the visible text of each page of a PDF document from its content
stream, decoding shown strings through the fonts' ToUnicode CMaps or base
encodings.
"""

import io
from pathlib import Path
from typing import Any, Generator

from pdf2text.extractors.data_types import PdfContent, PdfPage
from pdf2text.extractors.pdf.interpreter import page_text
from pdf2text.extractors.pdf_extractor import (
    DEFAULT_OPTIONS,
    PdfExtractionOptions,
    read_pdf,
)

__version__ = "0.1.0"


def read_file(
    path: str | Path,
    *,
    options: PdfExtractionOptions = DEFAULT_OPTIONS,
) -> Generator[PdfContent, Any, None]:
    """
    Read a PDF file from disk and extract its text.

    Args:
        path: Path to the file to read.
        options: Extraction settings.

    Yields:
        PdfContent with the text of every page.

    Raises:
        FileNotFoundError: If the file does not exist.

    Example:
        >>> import pdf2text
        >>> for result in pdf2text.read_file("document.pdf"):
        ...     print(result.get_full_text())
    """
    path = Path(path)
    with open(path, "rb") as f:
        yield from read_pdf(io.BytesIO(f.read()), str(path), options=options)


__all__ = [
    # Version
    "__version__",
    # Main functions
    "read_file",
    "read_pdf",
    "page_text",
    # Results and settings
    "PdfContent",
    "PdfPage",
    "PdfExtractionOptions",
]
