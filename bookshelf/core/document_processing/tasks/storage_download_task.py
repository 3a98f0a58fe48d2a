"""
Book download task.

Fetches the raw PDF bytes of a book from blob storage. The boto3 call is
blocking, so it runs in a worker thread.

Dependencies: bookshelf.boundary.aws
System role: First stage of book ingestion pipeline (storage source)
"""

import asyncio
import logging

from bookshelf.boundary.aws.s3_client import S3BookStorage
from bookshelf.core.exceptions import (
    StorageDownloadError,
    StorageError,
    StorageObjectNotFoundError,
)

logger = logging.getLogger(__name__)


class StorageDownloadTask:
    """Download book PDFs from blob storage."""

    def __init__(self, storage: S3BookStorage) -> None:
        self._storage = storage

    async def download(self, key: str, book_id: str | None = None) -> bytes:
        """
        Download the PDF stored under ``key``.

        Args:
            key: Storage key of the PDF
            book_id: Book the file belongs to (for error context)

        Returns:
            bytes: PDF content

        Raises:
            StorageDownloadError: When the object is missing or the download fails
        """
        try:
            data = await asyncio.to_thread(self._storage.download, key)
        except StorageObjectNotFoundError as e:
            raise StorageDownloadError(
                "Failed to download PDF from storage: file not found",
                book_id,
                details={"key": key},
            ) from e
        except StorageError as e:
            raise StorageDownloadError(
                "Failed to download PDF from storage",
                book_id,
                details={"key": key, "error": e.message},
            ) from e

        logger.info(
            f"{__name__}:download - PDF downloaded",
            extra={"key": key, "byte_count": len(data)},
        )
        return data
