"""
Book error handling utilities.

Provides a decorator that turns domain exceptions raised by book endpoints
into structured failure payloads: ``{"success": false, "error", "reason"}``.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse

from bookshelf.core.exceptions import (
    BookNotFoundError,
    ChunkPersistenceError,
    DatastoreError,
    DocumentProcessingError,
    PipelineTimeoutError,
    StorageDownloadError,
    StorageError,
    ValidationError,
)
from bookshelf.models.book import ErrorResponse

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def error_response(status_code: int, error: str, reason: str | None = None) -> JSONResponse:
    """Build the failure payload shared by every book endpoint."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, reason=reason).model_dump(),
    )


def _processing_status(e: DocumentProcessingError) -> int:
    # Content problems are the caller's; storage and persistence are ours
    if isinstance(e, (StorageDownloadError, ChunkPersistenceError)):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def handle_book_errors(func: F) -> F:
    """
    Decorator mapping book-related errors to HTTP failure payloads.

    - ValidationError → 400
    - BookNotFoundError → 404
    - DocumentProcessingError → 400 for content, 500 for storage/persistence
    - PipelineTimeoutError → 504
    - StorageError / DatastoreError / anything else → 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except ValidationError as e:
            logger.warning("Invalid book request", extra={"error": str(e)})
            return error_response(status.HTTP_400_BAD_REQUEST, e.message, "validation_error")

        except BookNotFoundError as e:
            logger.warning("Book not found", extra={"book_id": e.details.get("book_id")})
            return error_response(status.HTTP_404_NOT_FOUND, e.message, "not_found")

        except DocumentProcessingError as e:
            logger.warning(
                "Book processing failed",
                extra={"reason": e.reason.value, "error": str(e)},
            )
            return error_response(_processing_status(e), e.message, e.reason.value)

        except PipelineTimeoutError as e:
            logger.error("Book operation timed out", extra={"error": str(e)})
            return error_response(status.HTTP_504_GATEWAY_TIMEOUT, e.message, "timeout")

        except StorageError as e:
            logger.error("Storage failure", extra={"error": str(e)})
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, "storage_error"
            )

        except DatastoreError as e:
            logger.error("Datastore failure", extra={"error": str(e)})
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, "datastore_error"
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in book operation",
                extra={"error": str(e)},
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error"
            )

    return wrapper  # type: ignore
