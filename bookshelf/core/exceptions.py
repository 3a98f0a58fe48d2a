"""
Exception hierarchy for the Bookshelf application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: bookshelf.core.document_processing.models (enums only)
System role: Centralized exception handling across the application
"""

from typing import Any

from bookshelf.core.document_processing.models.status import FailureReason


class BookshelfException(Exception):
    """Base exception for all Bookshelf application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(BookshelfException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class BookNotFoundError(BookshelfException):
    """Raised when a book does not exist or belongs to another user."""

    def __init__(self, book_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["book_id"] = book_id
        super().__init__("Book not found", details)


class DatastoreError(BookshelfException):
    """Raised when the relational datastore fails outside the status machine."""

    pass


class StorageError(BookshelfException):
    """Raised when a blob storage operation fails."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, details)


class StorageObjectNotFoundError(StorageError):
    """Raised when the requested object is missing from blob storage."""

    pass


class DocumentProcessingError(BookshelfException):
    """
    Base exception for pipeline stage failures.

    Each subclass carries the FailureReason written to the book row when the
    controller moves it to FAILED.
    """

    reason: FailureReason = FailureReason.CHUNKING_ERROR

    def __init__(
        self,
        message: str,
        book_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message (stored on the book as error_message)
            book_id: ID of the book that failed
            details: Additional context
        """
        details = details or {}
        if book_id:
            details["book_id"] = book_id
        super().__init__(message, details)


class StorageDownloadError(DocumentProcessingError):
    """Raised when the source PDF cannot be downloaded."""

    reason = FailureReason.STORAGE_ERROR


class ParsingError(DocumentProcessingError):
    """Raised when the PDF is malformed, encrypted or otherwise unparseable."""

    reason = FailureReason.PARSE_ERROR


class EmptyContentError(DocumentProcessingError):
    """Raised when a PDF yields no extractable text (likely a scanned document)."""

    reason = FailureReason.EMPTY_CONTENT


class ChunkingError(DocumentProcessingError):
    """Raised when chunking produces no chunks."""

    reason = FailureReason.CHUNKING_ERROR


class ChunkPersistenceError(ChunkingError):
    """Raised when chunk rows cannot be stored; the insert transaction is rolled back."""

    pass


class EmbeddingError(BookshelfException):
    """Raised when a single chunk cannot be embedded or written back."""

    def __init__(
        self,
        message: str,
        chunk_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if chunk_id:
            details["chunk_id"] = chunk_id
        super().__init__(message, details)


class PipelineTimeoutError(BookshelfException):
    """Raised when a pipeline entry point exceeds its wall-clock budget."""

    def __init__(self, operation: str, timeout_seconds: float, book_id: str | None = None) -> None:
        details: dict[str, Any] = {"operation": operation, "timeout_seconds": timeout_seconds}
        if book_id:
            details["book_id"] = book_id
        super().__init__(f"{operation.capitalize()} timed out after {timeout_seconds:g}s", details)
