"""
Book upload service.

Validates an uploaded PDF, stores it in blob storage and creates the book
row in PROCESSING status. If the row cannot be created the stored object
is removed again.

Dependencies: bookshelf.boundary.aws, bookshelf.boundary.db, bookshelf.core
System role: Producer of the books consumed by the ingestion pipeline
"""

import asyncio
import logging
import re
import uuid
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.boundary.aws.s3_client import S3BookStorage, book_storage_key
from bookshelf.boundary.db.CRUD.book_crud import book_crud
from bookshelf.boundary.db.models.book_model import BookModel
from bookshelf.core.document_processing.configs import IngestionSettings, get_ingestion_settings
from bookshelf.core.document_processing.models import BookStatus
from bookshelf.core.exceptions import DatastoreError, ValidationError
from bookshelf.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"application/pdf"}
PDF_MAGIC = b"%PDF"
_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def default_title(filename: str) -> str:
    """Derive a display title from a file name by dropping a .pdf suffix."""
    return _PDF_SUFFIX.sub("", filename or "").strip() or "Untitled"


class BookUploadService:
    """Accept PDF uploads and register them as books."""

    def __init__(
        self,
        db: AsyncSession,
        storage: S3BookStorage,
        settings: IngestionSettings | None = None,
    ) -> None:
        """
        Initialize upload service.

        Args:
            db: AsyncSession for the book row
            storage: Blob storage for the PDF bytes
            settings: Upload limits (defaults from environment)
        """
        self.db = db
        self._storage = storage
        self._settings = settings or get_ingestion_settings()

    async def upload(
        self,
        user_id: str | UUID | None,
        filename: str | None,
        content_type: str | None,
        data: bytes | None,
        title: str | None = None,
    ) -> BookModel:
        """
        Validate, store and register an uploaded PDF.

        Args:
            user_id: Owner of the new book
            filename: Original file name
            content_type: Declared MIME type
            data: File content
            title: Optional display title (file name without .pdf if None)

        Returns:
            BookModel: Created book in PROCESSING status

        Raises:
            ValidationError: Input rejected
            StorageError: Upload to blob storage failed
            DatastoreError: Book row could not be created (object removed)
        """
        if data is None or filename is None:
            raise ValidationError("No file provided", field="file")
        owner_id = self._parse_user_id(user_id)
        self._validate_file(content_type, data)

        book_id = uuid.uuid4()
        key = book_storage_key(str(owner_id), str(book_id))
        book_title = (title or "").strip() or default_title(filename)

        await asyncio.to_thread(self._storage.upload, key, data, "application/pdf")

        try:
            book = await book_crud.create(
                self.db,
                id=book_id,
                user_id=owner_id,
                title=book_title[:255],
                file_path=key,
                status=BookStatus.PROCESSING,
            )
            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            await self._remove_quietly(key)
            raise DatastoreError(
                f"Failed to create book record: {e}",
                details={"book_id": str(book_id)},
            ) from e

        logger.info(
            f"{__name__}:upload - Book uploaded",
            extra={"book_id": str(book_id), "user_id": str(owner_id), "byte_count": len(data)},
        )
        return book

    def _parse_user_id(self, user_id: str | UUID | None) -> UUID:
        if isinstance(user_id, UUID):
            return user_id
        if not user_id:
            raise ValidationError("User ID is required", field="user_id")
        try:
            return UUID(str(user_id))
        except ValueError as e:
            raise ValidationError("User ID must be a valid UUID", field="user_id") from e

    def _validate_file(self, content_type: str | None, data: bytes) -> None:
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Invalid file type. Only PDF files are allowed.",
                field="file",
                details={"content_type": content_type},
            )

        max_bytes = self._settings.max_upload_bytes
        if len(data) > max_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
                field="file",
                details={"byte_count": len(data)},
            )

        if not data:
            raise ValidationError("Uploaded file is empty", field="file")

        if not data.startswith(PDF_MAGIC):
            raise ValidationError("File content is not a PDF", field="file")

    async def _remove_quietly(self, key: str) -> None:
        """Roll back a stored object; a failed removal is logged only."""
        try:
            await asyncio.to_thread(self._storage.remove, key)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_remove_quietly - Storage rollback failed",
                e,
                key=key,
            )
