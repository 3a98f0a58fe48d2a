"""
Batch embedding task.

Embeds the pending chunks of one book in fixed-size batches. Calls inside a
batch run concurrently and the batch waits for all of them before the next
one starts. Each call fills its own outcome slot; once the batch has
settled, successful vectors are written back one at a time, each in its
own short transaction. A failed chunk never aborts its siblings or later
batches. An optional deadline is only checked before a batch starts; calls
already issued always run to completion.

Dependencies: langchain_core (Embeddings), tenacity, sqlalchemy
System role: Third stage of book ingestion pipeline
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from uuid import UUID

from langchain_core.embeddings import Embeddings
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter
from tenacity.wait import wait_base

from bookshelf.boundary.db.CRUD.book_chunk_crud import book_chunk_crud
from bookshelf.boundary.db.models.book_chunk_model import BookChunkModel
from bookshelf.core.exceptions import EmbeddingError

from ..configs import EmbeddingBatchOptions
from ..models import BookStatus, ChunkEmbeddingOutcome, EmbeddingRunReport

logger = logging.getLogger(__name__)


class BatchEmbeddingTask:
    """Generate and store embeddings for pending chunks, tolerating partial failure."""

    def __init__(
        self,
        embeddings: Embeddings,
        session_factory: Callable[[], AsyncSession],
        options: EmbeddingBatchOptions | None = None,
        retry_wait: wait_base | None = None,
    ) -> None:
        """
        Initialize batch embedding task.

        Args:
            embeddings: Embedding client exposing aembed_query
            session_factory: Creates a fresh session per vector write-back
            options: Batching and readiness parameters
            retry_wait: tenacity wait strategy between attempts of one chunk
        """
        self._embeddings = embeddings
        self._session_factory = session_factory
        self._options = options or EmbeddingBatchOptions()
        self._retry_wait = retry_wait or wait_exponential_jitter(initial=0.5, max=8, jitter=1)

    @property
    def options(self) -> EmbeddingBatchOptions:
        return self._options

    async def run(
        self,
        chunks: Sequence[BookChunkModel],
        deadline: float | None = None,
    ) -> EmbeddingRunReport:
        """
        Embed every given chunk and write the vectors back.

        Args:
            chunks: Chunks lacking a vector, in chunk_index order
            deadline: time.monotonic() value after which no new batch starts

        Returns:
            EmbeddingRunReport: Counts, per-chunk errors and derived status
        """
        opts = self._options
        considered = len(chunks)
        if considered == 0:
            return EmbeddingRunReport(
                considered=0,
                embedded_count=0,
                success_rate=1.0,
                final_status=BookStatus.READY,
            )

        batches = [
            chunks[i : i + opts.batch_size] for i in range(0, considered, opts.batch_size)
        ]
        embedded_count = 0
        errors: list[str] = []
        timed_out = False

        for batch_number, batch in enumerate(batches, start=1):
            if deadline is not None and time.monotonic() >= deadline:
                timed_out = True
                logger.warning(
                    f"{__name__}:run - Deadline passed, skipping remaining batches",
                    extra={"next_batch": batch_number, "batch_count": len(batches)},
                )
                break

            outcomes = await asyncio.gather(*(self._embed_one(chunk) for chunk in batch))

            # Barrier passed: write back sequentially
            for outcome in outcomes:
                if outcome.succeeded:
                    outcome = await self._write_back(outcome)
                if outcome.succeeded:
                    embedded_count += 1
                else:
                    errors.append(f"Chunk {outcome.chunk_id}: {outcome.error}")

            logger.info(
                f"{__name__}:run - Batch {batch_number}/{len(batches)} settled",
                extra={"embedded_count": embedded_count, "error_count": len(errors)},
            )

            if batch_number < len(batches) and opts.batch_delay_seconds > 0:
                await asyncio.sleep(opts.batch_delay_seconds)

        success_rate = embedded_count / considered
        final_status = (
            BookStatus.READY
            if not timed_out and embedded_count > 0 and success_rate >= opts.success_threshold
            else BookStatus.FAILED
        )

        return EmbeddingRunReport(
            considered=considered,
            embedded_count=embedded_count,
            errors=errors,
            success_rate=success_rate,
            final_status=final_status,
            timed_out=timed_out,
        )

    async def _embed_one(self, chunk: BookChunkModel) -> ChunkEmbeddingOutcome:
        """Embed one chunk; every failure is captured in the outcome."""
        try:
            vector = await self._embed_with_retry(chunk.chunk_text)
            self._check_dimension(vector, chunk.id)
            return ChunkEmbeddingOutcome(chunk_id=chunk.id, vector=vector)
        except Exception as e:
            message = str(e) or type(e).__name__
            if isinstance(e, EmbeddingError):
                message = e.message
            logger.warning(
                f"{__name__}:_embed_one - Embedding failed",
                extra={"chunk_id": str(chunk.id), "error": message},
            )
            return ChunkEmbeddingOutcome(chunk_id=chunk.id, error=message)

    async def _embed_with_retry(self, text: str) -> list[float]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._options.max_attempts),
            wait=self._retry_wait,
            reraise=True,
        ):
            with attempt:
                return await self._embeddings.aembed_query(text)

    def _check_dimension(self, vector: list[float], chunk_id: UUID) -> None:
        expected = self._options.embedding_dimension
        if not vector:
            raise EmbeddingError("Embedding service returned an empty vector", str(chunk_id))
        if expected is not None and len(vector) != expected:
            raise EmbeddingError(
                f"Expected {expected}-dimension vector, got {len(vector)}",
                str(chunk_id),
            )

    async def _write_back(self, outcome: ChunkEmbeddingOutcome) -> ChunkEmbeddingOutcome:
        """Persist one vector in its own transaction; failures become error outcomes."""
        async with self._session_factory() as session:
            try:
                stored = await book_chunk_crud.set_embedding(
                    session, outcome.chunk_id, outcome.vector
                )
                if not stored:
                    await session.rollback()
                    return ChunkEmbeddingOutcome(
                        chunk_id=outcome.chunk_id,
                        error="Chunk missing or already embedded",
                    )
                await session.commit()
                return outcome

            except Exception as e:
                await session.rollback()
                logger.error(
                    f"{__name__}:_write_back - Failed to store embedding",
                    extra={"chunk_id": str(outcome.chunk_id), "error": str(e)},
                )
                return ChunkEmbeddingOutcome(
                    chunk_id=outcome.chunk_id,
                    error=f"Failed to store embedding: {e}",
                )
