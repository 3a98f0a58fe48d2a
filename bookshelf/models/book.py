"""
Book domain models and schemas.

Request/response schemas for the upload and ingestion endpoints.

Dependencies: pydantic
System role: Book API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookshelf.core.document_processing.models import BookStatus, FailureReason


class BookActionRequest(BaseModel):
    """Request body for the process and embed endpoints."""

    book_id: uuid.UUID = Field(description="Book to act on")
    user_id: uuid.UUID = Field(description="Caller; must own the book")


class BookResponse(BaseModel):
    """Book row as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    file_path: str
    status: BookStatus
    total_chunks: int
    failure_reason: FailureReason | None = None
    error_message: str | None = None
    created_at: datetime


class UploadBookResponse(BaseModel):
    """Response schema for a successful upload."""

    success: bool = True
    book: BookResponse
    message: str = "Book uploaded successfully. Processing will begin shortly."


class ErrorResponse(BaseModel):
    """Failure payload shared by every book endpoint."""

    success: bool = False
    error: str
    reason: str | None = Field(
        default=None,
        description="Failure category, e.g. parse_error or not_found",
    )
