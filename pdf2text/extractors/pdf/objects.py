"""Small helpers for working with pypdf primitive objects."""

from typing import Any, Optional

from pypdf.errors import PyPdfError
from pypdf.generic import (
    ByteStringObject,
    IndirectObject,
    NullObject,
    TextStringObject,
)

from pdf2text.exceptions import PageExtractionError


def resolve_object(obj: Any) -> Any:
    """
    Resolve an indirect reference to the object it points to.

    Direct objects are returned unchanged. A reference that cannot be
    resolved makes the current page unreadable and raises
    ``PageExtractionError``.
    """
    if not isinstance(obj, IndirectObject):
        return obj
    try:
        resolved = obj.get_object()
    except PyPdfError as exc:
        raise PageExtractionError(
            f"Failed to resolve reference {obj!r}", cause=exc
        ) from exc
    if resolved is None or isinstance(resolved, NullObject):
        raise PageExtractionError(f"Broken reference {obj!r}")
    return resolved


def is_pdf_string(obj: Any) -> bool:
    return isinstance(obj, (TextStringObject, ByteStringObject, bytes))


def string_bytes(obj: Any) -> Optional[bytes]:
    """Return the raw bytes of a PDF string object, or None for anything else."""
    if isinstance(obj, (TextStringObject, ByteStringObject)):
        # pypdf may have decoded the string as text; the codes are the raw bytes
        return bytes(obj.original_bytes)
    if isinstance(obj, bytes):
        return obj
    return None
