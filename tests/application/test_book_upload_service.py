"""
Tests for BookUploadService.

Upload validation, storage key layout, title defaults and the storage
rollback when the book row cannot be created.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.application.services.book_upload_service import BookUploadService, default_title
from bookshelf.boundary.db.CRUD.book_crud import book_crud
from bookshelf.boundary.db.models import BookModel
from bookshelf.core.document_processing.configs import IngestionSettings
from bookshelf.core.document_processing.models import BookStatus
from bookshelf.core.exceptions import DatastoreError, StorageError, ValidationError

PDF_BYTES = b"%PDF-1.4\n%test\n"


@pytest.fixture
def upload_service(test_async_db, fake_storage) -> BookUploadService:
    """Provide an upload service over the test session and in-memory storage."""
    return BookUploadService(
        db=test_async_db,
        storage=fake_storage,
        settings=IngestionSettings(max_upload_bytes=1024 * 1024),
    )


class TestDefaultTitle:
    """Test suite for default_title()."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("Dune.pdf", "Dune"),
            ("notes.PDF", "notes"),
            ("archive.pdf.bak", "archive.pdf.bak"),
            (".pdf", "Untitled"),
            ("", "Untitled"),
        ],
    )
    def test_default_title(self, filename, expected) -> None:
        assert default_title(filename) == expected


class TestUploadSuccess:
    """Test suite for successful uploads."""

    async def test_upload_stores_object_and_creates_book(
        self, upload_service, fake_storage, user_id, session_factory
    ) -> None:
        """Test a valid PDF lands in storage and a processing book row exists."""
        # Act
        book = await upload_service.upload(
            user_id=str(user_id),
            filename="Moby Dick.pdf",
            content_type="application/pdf",
            data=PDF_BYTES,
        )

        # Assert
        assert book.user_id == user_id
        assert book.title == "Moby Dick"
        assert book.status == BookStatus.PROCESSING
        assert book.total_chunks == 0
        assert book.file_path == f"{user_id}/books/{book.id}.pdf"
        assert fake_storage.objects[book.file_path] == PDF_BYTES

        async with session_factory() as session:
            stored = await book_crud.get_owned(session, book.id, user_id)
        assert stored is not None

    async def test_explicit_title_wins(self, upload_service, user_id) -> None:
        """Test a provided title is used instead of the file name."""
        book = await upload_service.upload(
            user_id=user_id,
            filename="scan_0001.pdf",
            content_type="application/pdf",
            data=PDF_BYTES,
            title="  The Odyssey  ",
        )

        assert book.title == "The Odyssey"


class TestUploadValidation:
    """Test suite for rejected uploads."""

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"filename": None, "data": None}, "No file provided"),
            ({"user_id": None}, "User ID is required"),
            ({"user_id": "not-a-uuid"}, "User ID must be a valid UUID"),
            ({"content_type": "text/plain"}, "Invalid file type. Only PDF files are allowed."),
            ({"data": b""}, "Uploaded file is empty"),
            ({"data": b"GIF89a..."}, "File content is not a PDF"),
            ({"data": PDF_BYTES + b"0" * (1024 * 1024)}, "File too large. Maximum size is 1MB."),
        ],
    )
    async def test_rejects_invalid_input(
        self, upload_service, fake_storage, user_id, kwargs, message
    ) -> None:
        """Test each invalid input raises before anything is stored."""
        values = {
            "user_id": str(user_id),
            "filename": "book.pdf",
            "content_type": "application/pdf",
            "data": PDF_BYTES,
        }
        values.update(kwargs)

        with pytest.raises(ValidationError) as exc_info:
            await upload_service.upload(**values)

        assert exc_info.value.message == message
        assert fake_storage.objects == {}


class TestUploadFailures:
    """Test suite for storage and datastore failures."""

    async def test_datastore_failure_removes_stored_object(
        self, upload_service, fake_storage, user_id
    ) -> None:
        """Test the object is removed again when the row cannot be created."""
        with patch.object(book_crud, "create", side_effect=SQLAlchemyError("db down")):
            with pytest.raises(DatastoreError) as exc_info:
                await upload_service.upload(
                    user_id=user_id,
                    filename="book.pdf",
                    content_type="application/pdf",
                    data=PDF_BYTES,
                )

        assert "Failed to create book record" in exc_info.value.message
        assert len(fake_storage.removed) == 1
        assert fake_storage.objects == {}

    async def test_storage_failure_creates_no_row(
        self, upload_service, fake_storage, user_id, session_factory
    ) -> None:
        """Test a failed upload propagates and leaves no book behind."""
        with patch.object(fake_storage, "upload", side_effect=StorageError("bucket gone")):
            with pytest.raises(StorageError):
                await upload_service.upload(
                    user_id=user_id,
                    filename="book.pdf",
                    content_type="application/pdf",
                    data=PDF_BYTES,
                )

        async with session_factory() as session:
            count = (await session.execute(select(func.count()).select_from(BookModel))).scalar_one()
        assert count == 0
