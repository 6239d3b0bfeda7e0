"""
PDF Text Extractor
==================

Extracts the visible text of every page of a Portable Document Format (PDF)
file. pypdf opens the file, resolves objects and tokenizes the content
streams; the text itself is rebuilt by the content stream interpreter in
``pdf2text.extractors.pdf``.

Per-Page Isolation
------------------
A page that cannot be read (missing resources or content stream, broken
font references) does not abort the document. The page is returned with
empty text and its ``error`` set, and extraction continues with the next
page. ``PdfExtractionOptions(fail_fast=True)`` raises instead.

Known Limitations
-----------------
- Scanned PDFs (image-only) return empty text (no OCR)
- Reading order follows the content stream; columns may interleave
- Fonts without a ToUnicode CMap or a Standard/WinAnsi/Symbol base
  encoding produce no text
- Password-protected PDFs are rejected

Usage
-----
    >>> import io
    >>> from pdf2text.extractors.pdf_extractor import read_pdf
    >>>
    >>> with open("document.pdf", "rb") as f:
    ...     for doc in read_pdf(io.BytesIO(f.read()), path="document.pdf"):
    ...         for page_num, text in enumerate(doc.iterator(), start=1):
    ...             print(f"Page {page_num}: {len(text)} chars")
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Generator, Optional

from pypdf import PdfReader

from pdf2text.exceptions import (
    ExtractionError,
    ExtractionFailedError,
    ExtractionFileEncryptedError,
    PageExtractionError,
)
from pdf2text.extractors.data_types import PdfContent, PdfMetadata, PdfPage
from pdf2text.extractors.pdf.interpreter import PageLike, page_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfExtractionOptions:
    """Settings of the document extractor."""

    # raise the first PageExtractionError instead of recording it on the page
    fail_fast: bool = False


DEFAULT_OPTIONS = PdfExtractionOptions()


def _open_pdf_reader(file_like: io.BytesIO) -> PdfReader:
    file_like.seek(0)
    reader = PdfReader(file_like)
    if reader.is_encrypted:
        try:
            decrypt_result = reader.decrypt("")
        except Exception:
            decrypt_result = 0
        if decrypt_result == 0:
            raise ExtractionFileEncryptedError("PDF is encrypted or password-protected")
    return reader


def _extract_page(
    page: PageLike, page_num: int, options: PdfExtractionOptions
) -> PdfPage:
    try:
        return PdfPage(text=page_text(page))
    except PageExtractionError as exc:
        exc.page_number = page_num
        if options.fail_fast:
            raise
        logger.warning("Failed to extract text of page %d: %s", page_num, exc)
        return PdfPage(text="", error=str(exc))


def read_pdf(
    file_like: io.BytesIO,
    path: Optional[str] = None,
    *,
    options: PdfExtractionOptions = DEFAULT_OPTIONS,
) -> Generator[PdfContent, Any, None]:
    """
    Extract the text of all pages of a PDF file.

    This function uses a generator pattern for API consistency with
    ``read_file``, even though a PDF file contains exactly one document.

    Args:
        file_like: BytesIO object containing the complete PDF file data.
            The stream position is reset to the beginning before reading.
        path: Optional filesystem path to the source file, used to populate
            the file metadata.
        options: Extraction settings.

    Yields:
        PdfContent with one PdfPage per page in document order.

    Raises:
        ExtractionFileEncryptedError: The file needs a password.
        PageExtractionError: A page failed and ``options.fail_fast`` is set.
        ExtractionFailedError: The file could not be read.
    """
    try:
        reader = _open_pdf_reader(file_like)
        logger.debug("Parsing PDF with %d pages", len(reader.pages))

        pages = [
            _extract_page(page, page_num, options)
            for page_num, page in enumerate(reader.pages)
        ]
        metadata = PdfMetadata(total_pages=len(pages))
        metadata.populate_from_path(path)

        failed = sum(1 for page in pages if page.failed)
        logger.info(
            "Extracted PDF: %d pages, %d failed",
            len(pages),
            failed,
        )
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionFailedError("Failed to extract PDF file", cause=exc) from exc

    yield PdfContent(
        pages=pages,
        metadata=metadata,
    )
