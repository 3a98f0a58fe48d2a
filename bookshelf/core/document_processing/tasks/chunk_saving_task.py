"""
Chunk saving task.

Stores the chunks of one book in insert batches inside a single
transaction. Either every chunk row is committed or none is.

Dependencies: sqlalchemy, bookshelf.boundary.db
System role: Persistence stage of book ingestion pipeline
"""

import logging
from collections.abc import Callable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.boundary.db.CRUD.book_chunk_crud import book_chunk_crud
from bookshelf.core.exceptions import ChunkPersistenceError

from ..models import TextChunk

logger = logging.getLogger(__name__)


class ChunkSavingTask:
    """Persist chunk rows for a book atomically."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        insert_batch_size: int = 100,
    ) -> None:
        """
        Initialize chunk saving task.

        Args:
            session_factory: Creates the session that owns the insert transaction
            insert_batch_size: Maximum rows per insert call
        """
        if insert_batch_size <= 0:
            raise ValueError("insert_batch_size must be positive")
        self._session_factory = session_factory
        self._insert_batch_size = insert_batch_size

    async def save(
        self,
        book_id: UUID,
        user_id: UUID,
        chunks: Sequence[TextChunk],
    ) -> int:
        """
        Insert all chunks of a book.

        Args:
            book_id: Parent book UUID
            user_id: Owner UUID
            chunks: Chunks in document order

        Returns:
            int: Number of rows stored

        Raises:
            ChunkPersistenceError: When any batch fails (nothing is kept)
        """
        size = self._insert_batch_size
        async with self._session_factory() as session:
            try:
                stored = 0
                for i in range(0, len(chunks), size):
                    stored += await book_chunk_crud.bulk_create(
                        session, book_id, user_id, chunks[i : i + size]
                    )
                await session.commit()

            except Exception as e:
                await session.rollback()
                logger.error(f"{__name__}:save - {type(e).__name__}: {e}")
                raise ChunkPersistenceError(
                    "Failed to save chunks to database",
                    str(book_id),
                    details={"error": f"{type(e).__name__}: {e}"},
                ) from e

        logger.info(
            f"{__name__}:save - Chunks stored",
            extra={"book_id": str(book_id), "chunk_count": stored},
        )
        return stored
