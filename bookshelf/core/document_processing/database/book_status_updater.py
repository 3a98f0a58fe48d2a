"""
Book status updater.

Moves a book through its processing lifecycle:
PROCESSING → READY (or FAILED with a failure reason and message)

Every update runs in its own short transaction from the session factory,
so a status write never rides on a pipeline stage's rolled-back session.

Dependencies: sqlalchemy, bookshelf.boundary.db
System role: Book status persistence for the ingestion pipeline
"""

import logging
from collections.abc import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.boundary.db.CRUD.book_chunk_crud import book_chunk_crud
from bookshelf.boundary.db.CRUD.book_crud import book_crud

from ..models import FailureReason

logger = logging.getLogger(__name__)


class BookStatusUpdater:
    """Update book status during processing."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        """
        Initialize with a session factory.

        Args:
            session_factory: Creates a fresh AsyncSession per operation
        """
        self._session_factory = session_factory

    async def reset_for_processing(self, book_id: UUID) -> int:
        """
        Put a book back into PROCESSING and delete its existing chunks.

        Args:
            book_id: Book UUID

        Returns:
            int: Number of chunks removed

        Raises:
            ValueError: Book not found
        """
        async with self._session_factory() as session:
            try:
                book = await book_crud.reset_for_processing(session, book_id)
                if book is None:
                    raise ValueError(f"Book {book_id} not found")
                removed = await book_chunk_crud.delete_by_book(session, book_id)
                await session.commit()

            except Exception as e:
                logger.error(f"{__name__}:reset_for_processing - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:reset_for_processing - Book marked as PROCESSING",
            extra={"book_id": str(book_id), "chunks_removed": removed},
        )
        return removed

    async def set_total_chunks(self, book_id: UUID, total_chunks: int) -> None:
        """
        Record the chunk count; status stays PROCESSING.

        Raises:
            ValueError: Book not found
        """
        async with self._session_factory() as session:
            try:
                book = await book_crud.set_total_chunks(session, book_id, total_chunks)
                if book is None:
                    raise ValueError(f"Book {book_id} not found")
                await session.commit()

            except Exception as e:
                logger.error(f"{__name__}:set_total_chunks - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:set_total_chunks - Chunk count stored",
            extra={"book_id": str(book_id), "total_chunks": total_chunks},
        )

    async def mark_ready(self, book_id: UUID) -> None:
        """
        Mark book as READY.

        Raises:
            ValueError: Book not found
        """
        async with self._session_factory() as session:
            try:
                book = await book_crud.mark_ready(session, book_id)
                if book is None:
                    raise ValueError(f"Book {book_id} not found")
                await session.commit()

            except Exception as e:
                logger.error(f"{__name__}:mark_ready - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:mark_ready - Book marked as READY",
            extra={"book_id": str(book_id)},
        )

    async def mark_failed(
        self,
        book_id: UUID,
        reason: FailureReason,
        error_message: str,
    ) -> None:
        """
        Mark book as FAILED.

        Args:
            book_id: Book UUID
            reason: Failure category
            error_message: Error description (truncated to 2000 chars)

        Raises:
            ValueError: Book not found
        """
        async with self._session_factory() as session:
            try:
                book = await book_crud.mark_failed(session, book_id, reason, error_message)
                if book is None:
                    raise ValueError(f"Book {book_id} not found")
                await session.commit()

            except Exception as e:
                logger.error(f"{__name__}:mark_failed - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.warning(
            f"{__name__}:mark_failed - Book marked as FAILED",
            extra={"book_id": str(book_id), "reason": reason.value},
        )
