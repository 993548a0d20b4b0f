"""Custom exceptions for LedgerLens statement ingestion.

Everything the pipeline raises derives from LedgerLensError, so an upload
handler can catch one type and show its message.

Only whole-file failures are raised. Individual rows or lines that cannot be
parsed are dropped and logged, never raised.

Example:
    try:
        transactions = parse_file(StatementFile.from_path("jan.pdf"))
    except ScannedDocumentError as e:
        # Ask the user for a text-based PDF or a CSV export
        show_error(e.message)
    except LedgerLensError as e:
        logger.error("ingestion_failed", error=str(e))
"""

from typing import Any, Optional


class LedgerLensError(Exception):
    """Root of the ingestion error hierarchy.

    ``message`` is upload guidance written for the person who chose the
    file. ``recoverable`` is True when user action could still succeed:
    uploading another export of the statement, or retrying the records a
    store commit left behind. Configuration errors are never recoverable.
    ``details`` carries keyword context for structlog events and is not
    meant for display.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """
        Args:
            message: Guidance shown to the uploader.
            details: Log context such as file name, size or row counts.
            recoverable: True when another upload or a retry may succeed.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ExtractionError(LedgerLensError):
    """Error raised when transactions cannot be extracted from a document.

    Attributes:
        source: The file name that failed extraction.
        document_type: Type of document being processed ("pdf", "csv", ...).

    Example:
        >>> raise ExtractionError(
        ...     "Failed to open PDF",
        ...     source="statement.pdf",
        ...     document_type="pdf",
        ... )
        ExtractionError: Failed to open PDF
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        document_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ExtractionError.

        Args:
            message: Human-readable error description.
            source: The document name being processed.
            document_type: File type of the document (e.g., "pdf", "xlsx").
            details: Optional dictionary with additional context.
            recoverable: Whether a different file could succeed. Defaults to
                True since users can usually re-export the statement.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.source = source
        self.document_type = document_type

        if source:
            self.details["source"] = source
        if document_type:
            self.details["document_type"] = document_type


class ScannedDocumentError(ExtractionError):
    """Raised when a PDF carries too little text to be a text-based statement."""

    DEFAULT_MESSAGE = (
        "PDF appears to be empty or contains only scanned images. "
        "Please upload a text-based PDF or export your statement as CSV/Excel."
    )

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        source: Optional[str] = None,
        characters: Optional[int] = None,
    ) -> None:
        details = {"characters": characters} if characters is not None else None
        super().__init__(
            message or self.DEFAULT_MESSAGE,
            source=source,
            document_type="pdf",
            details=details,
        )
        self.characters = characters


class NoTransactionsError(ExtractionError):
    """Raised when a full parse produced zero usable transactions."""

    DEFAULT_MESSAGE = (
        "No transactions found in the file. This could mean:\n\n"
        "- The PDF is a scanned image (not text-based)\n"
        "- The file contains no transaction data\n"
        "- The statement format is not recognized\n"
        "- The file may be password protected\n\n"
        "Try uploading a text-based PDF or CSV/Excel file instead."
    )

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        source: Optional[str] = None,
        document_type: Optional[str] = None,
    ) -> None:
        super().__init__(
            message or self.DEFAULT_MESSAGE,
            source=source,
            document_type=document_type,
        )


class ValidationError(LedgerLensError):
    """Error raised when an input fails validation before parsing.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by the user.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class EmptyFileError(ValidationError):
    """Raised for a zero-byte upload."""

    def __init__(self, file_name: Optional[str] = None) -> None:
        super().__init__(
            "File is empty. Please select a valid bank statement file.",
            field="size",
            value=0,
            constraint="size > 0",
            details={"file_name": file_name} if file_name else None,
        )


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size cap."""

    def __init__(self, size: int, limit: int, file_name: Optional[str] = None) -> None:
        limit_mb = limit // (1024 * 1024)
        super().__init__(
            f"File is too large ({size / 1024 / 1024:.2f} MB). "
            f"Maximum supported size is {limit_mb} MB.",
            field="size",
            value=size,
            constraint=f"size < {limit}",
            details={"file_name": file_name} if file_name else None,
        )
        self.size = size
        self.limit = limit


class UnsupportedFileTypeError(ValidationError):
    """Raised when the file extension has no ingestion path."""

    def __init__(self, extension: str, supported: tuple[str, ...]) -> None:
        super().__init__(
            "Unsupported file format. Please upload PDF, CSV, XLS, or XLSX files.",
            field="extension",
            value=extension,
            constraint="one of: " + ", ".join(supported),
        )
        self.extension = extension


class ConfigurationError(LedgerLensError):
    """Error raised when configuration or a required backend is missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected


class StoreError(LedgerLensError):
    """Raised when committing reviewed transactions to the store fails.

    Attributes:
        committed: Number of records already written before the failure.
    """

    def __init__(self, message: str, *, committed: int = 0) -> None:
        super().__init__(message, details={"committed": committed}, recoverable=True)
        self.committed = committed


__all__ = [
    "LedgerLensError",
    "ExtractionError",
    "ScannedDocumentError",
    "NoTransactionsError",
    "ValidationError",
    "EmptyFileError",
    "FileTooLargeError",
    "UnsupportedFileTypeError",
    "ConfigurationError",
    "StoreError",
]
