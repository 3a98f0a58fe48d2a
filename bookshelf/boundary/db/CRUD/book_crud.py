"""
Book CRUD operations.

Provides BookModel persistence with ownership-scoped lookup and the
status transitions used by the ingestion pipeline.

Dependencies: sqlalchemy, bookshelf.boundary.db.models
System role: Book persistence operations
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.boundary.db.CRUD.base_crud import BaseCRUD
from bookshelf.boundary.db.models.book_model import BookModel
from bookshelf.core.document_processing.models.status import BookStatus, FailureReason

ERROR_MESSAGE_MAX_LENGTH = 2000


class BookCRUD(BaseCRUD[BookModel]):
    """CRUD operations for BookModel."""

    def __init__(self) -> None:
        super().__init__(BookModel)

    async def get_owned(
        self,
        session: AsyncSession,
        id: UUID,
        user_id: UUID,
    ) -> BookModel | None:
        """
        Retrieve a book only if it belongs to the given user.

        Args:
            session: Async database session
            id: Book UUID
            user_id: Expected owner

        Returns:
            BookModel if it exists and is owned by user_id, None otherwise
        """
        stmt = select(BookModel).where(BookModel.id == id, BookModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def reset_for_processing(self, session: AsyncSession, id: UUID) -> BookModel | None:
        """Put a book back into PROCESSING and clear previous failure data."""
        return await self.update_by_id(
            session,
            id,
            status=BookStatus.PROCESSING,
            total_chunks=0,
            failure_reason=None,
            error_message=None,
        )

    async def set_total_chunks(
        self,
        session: AsyncSession,
        id: UUID,
        total_chunks: int,
    ) -> BookModel | None:
        """Record the chunk count produced by a chunking run."""
        return await self.update_by_id(session, id, total_chunks=total_chunks)

    async def mark_ready(self, session: AsyncSession, id: UUID) -> BookModel | None:
        """
        Mark book as ready for retrieval.

        Returns:
            Updated BookModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=BookStatus.READY,
            failure_reason=None,
            error_message=None,
        )

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        reason: FailureReason,
        error_message: str,
    ) -> BookModel | None:
        """
        Mark book as failed with a failure category and error details.

        Args:
            session: Async database session
            id: Book UUID
            reason: Failure category
            error_message: Human-readable error description (truncated)

        Returns:
            Updated BookModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=BookStatus.FAILED,
            failure_reason=reason,
            error_message=error_message[:ERROR_MESSAGE_MAX_LENGTH],
        )


book_crud = BookCRUD()
