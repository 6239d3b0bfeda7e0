class ExtractionError(Exception):
    """Base class for all errors raised while extracting text from a PDF."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "Text extraction failed"
        super().__init__(message)
        self.__cause__ = cause  # Optional chaining for debugging


class ExtractionFailedError(ExtractionError):
    """Raised when a document cannot be processed at all."""


class ExtractionFileEncryptedError(ExtractionError):
    """Raised when the document is encrypted and cannot be opened."""


class PageExtractionError(ExtractionError):
    """Raised when a single page cannot be processed.

    Covers pages without a resource table or content stream and pages whose
    font data sits behind an indirect reference that cannot be resolved. The
    document extractor isolates this error to the failing page.
    """

    def __init__(
        self,
        message: str = None,
        *,
        page_number: int | None = None,
        cause: Exception = None,
    ):
        self.page_number = page_number
        if message is None:
            message = "Failed to extract page text"
        super().__init__(message, cause=cause)
