"""
Book chunk CRUD operations.

Bulk insertion of chunk rows after chunking, pending-chunk queries for the
embedding pass, and the write-once vector update.

Dependencies: sqlalchemy, bookshelf.boundary.db.models
System role: Chunk persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.boundary.db.CRUD.base_crud import BaseCRUD
from bookshelf.boundary.db.models.book_chunk_model import BookChunkModel
from bookshelf.core.document_processing.models import TextChunk


class BookChunkCRUD(BaseCRUD[BookChunkModel]):
    """CRUD operations for BookChunkModel."""

    def __init__(self) -> None:
        super().__init__(BookChunkModel)

    async def bulk_create(
        self,
        session: AsyncSession,
        book_id: UUID,
        user_id: UUID,
        chunks: Sequence[TextChunk],
    ) -> int:
        """
        Insert chunk rows for a book and flush them.

        Args:
            session: Async database session (caller commits or rolls back)
            book_id: Parent book UUID
            user_id: Owner copied onto every row
            chunks: Chunks in document order

        Returns:
            int: Number of rows added
        """
        session.add_all(
            BookChunkModel(
                book_id=book_id,
                user_id=user_id,
                chunk_index=chunk.index,
                source=chunk.source,
                chunk_text=chunk.text,
            )
            for chunk in chunks
        )
        await session.flush()
        return len(chunks)

    async def list_pending(
        self,
        session: AsyncSession,
        book_id: UUID,
    ) -> Sequence[BookChunkModel]:
        """
        Retrieve chunks of a book that have no embedding yet.

        Returns:
            Sequence of BookChunkModels ordered by chunk_index
        """
        stmt = (
            select(BookChunkModel)
            .where(
                BookChunkModel.book_id == book_id,
                BookChunkModel.embedding_vector.is_(None),
            )
            .order_by(BookChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_book(
        self,
        session: AsyncSession,
        book_id: UUID,
    ) -> Sequence[BookChunkModel]:
        """Retrieve all chunks of a book ordered by chunk_index."""
        stmt = (
            select(BookChunkModel)
            .where(BookChunkModel.book_id == book_id)
            .order_by(BookChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def set_embedding(
        self,
        session: AsyncSession,
        id: UUID,
        vector: list[float],
    ) -> bool:
        """
        Attach an embedding vector to a chunk that does not have one yet.

        Returns:
            bool: False if the chunk is missing or already embedded
        """
        stmt = (
            update(BookChunkModel)
            .where(
                BookChunkModel.id == id,
                BookChunkModel.embedding_vector.is_(None),
            )
            .values(embedding_vector=vector)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_book(self, session: AsyncSession, book_id: UUID) -> int:
        """
        Delete every chunk of a book.

        Returns:
            int: Number of rows deleted
        """
        stmt = delete(BookChunkModel).where(BookChunkModel.book_id == book_id)
        result = await session.execute(stmt)
        return result.rowcount

    async def count_by_book(self, session: AsyncSession, book_id: UUID) -> int:
        """Count chunks stored for a book."""
        stmt = select(func.count()).select_from(BookChunkModel).where(
            BookChunkModel.book_id == book_id
        )
        result = await session.execute(stmt)
        return result.scalar_one()


book_chunk_crud = BookChunkCRUD()
