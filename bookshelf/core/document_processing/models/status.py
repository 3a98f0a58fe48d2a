"""
Book lifecycle enums.

Shared by the ORM layer, the pipeline and the API schemas.

Dependencies: enum (stdlib)
System role: Status vocabulary for the ingestion state machine
"""

import enum


class BookStatus(str, enum.Enum):
    """
    Book processing lifecycle states.

    PROCESSING: Uploaded; extraction, chunking or embedding still pending
    READY: Enough chunks embedded for retrieval
    FAILED: Terminal until re-processed; failure_reason tells why
    """

    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class FailureReason(str, enum.Enum):
    """Why a book was moved to FAILED."""

    STORAGE_ERROR = "storage_error"
    PARSE_ERROR = "parse_error"
    EMPTY_CONTENT = "empty_content"
    CHUNKING_ERROR = "chunking_error"
    EMBEDDING_THRESHOLD = "embedding_threshold"
    PROCESSING_TIMEOUT = "processing_timeout"


# Failures raised before any chunk is embeddable; embedding such a book is refused
PROCESS_STAGE_REASONS = frozenset(
    {
        FailureReason.STORAGE_ERROR,
        FailureReason.PARSE_ERROR,
        FailureReason.EMPTY_CONTENT,
        FailureReason.CHUNKING_ERROR,
        FailureReason.PROCESSING_TIMEOUT,
    }
)
