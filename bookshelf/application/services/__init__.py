"""Service orchestrators."""

from .book_upload_service import BookUploadService

__all__ = ["BookUploadService"]
