"""
Book ingestion pipeline.

Coordinates storage download, PDF extraction, chunking, chunk persistence
and batched embedding, and owns the book status transitions:

    process: PROCESSING → (chunks stored, still PROCESSING) | FAILED
    embed:   PROCESSING → READY | FAILED

Each entry point checks ownership before doing any work and runs under a
wall-clock budget that is checked between units of work; nothing in flight
is cancelled. Stage failures and overruns are written to the book as FAILED
with a failure reason, then re-raised to the caller.

Dependencies: All task modules, configs, bookshelf.boundary
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from collections.abc import Callable
from uuid import UUID

from langchain_core.embeddings import Embeddings
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity.wait import wait_base

from bookshelf.boundary.aws.s3_client import S3BookStorage
from bookshelf.boundary.db.CRUD.book_chunk_crud import book_chunk_crud
from bookshelf.boundary.db.CRUD.book_crud import book_crud
from bookshelf.boundary.db.models.book_model import BookModel
from bookshelf.core.exceptions import (
    BookNotFoundError,
    ChunkingError,
    ChunkPersistenceError,
    DatastoreError,
    DocumentProcessingError,
    EmptyContentError,
    PipelineTimeoutError,
    ValidationError,
)
from bookshelf.observability.log_utils import log_exception_with_context

from .configs import IngestionSettings, get_ingestion_settings
from .database import BookStatusUpdater
from .models import PROCESS_STAGE_REASONS, BookStatus, EmbedResult, FailureReason, ProcessResult
from .tasks import (
    BatchEmbeddingTask,
    ChunkingTask,
    ChunkSavingTask,
    PdfExtractionTask,
    StorageDownloadTask,
)

logger = logging.getLogger(__name__)

EMPTY_CONTENT_MESSAGE = (
    "No text could be extracted from the PDF. It may be a scanned document."
)
NO_CHUNKS_MESSAGE = "Failed to create chunks from the extracted text."
NOT_PROCESSED_MESSAGE = "Book has no chunks to embed. Process the book first."


class _Budget:
    """Wall-clock budget of one invocation, checked between units of work."""

    def __init__(self, operation: str, seconds: float) -> None:
        self.operation = operation
        self.seconds = seconds
        self.deadline = time.monotonic() + seconds

    def error(self, book_id: UUID) -> PipelineTimeoutError:
        logger.error(
            f"{__name__}:{self.operation} - Timed out",
            extra={"book_id": str(book_id), "timeout_seconds": self.seconds},
        )
        return PipelineTimeoutError(self.operation, self.seconds, str(book_id))

    def check(self, book_id: UUID) -> None:
        if time.monotonic() >= self.deadline:
            raise self.error(book_id)


class BookIngestionPipeline:
    """Orchestrate book ingestion: download -> extract -> chunk -> store, then embed."""

    def __init__(
        self,
        storage: S3BookStorage,
        embeddings: Embeddings,
        session_factory: Callable[[], AsyncSession],
        settings: IngestionSettings | None = None,
        extraction_task: PdfExtractionTask | None = None,
        embedding_dimension: int | None = None,
        retry_wait: wait_base | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            storage: Blob storage holding the uploaded PDFs
            embeddings: Embedding client exposing aembed_query
            session_factory: Creates short-lived AsyncSessions
            settings: Pipeline settings (uses defaults if None)
            extraction_task: PDF extractor (default PdfExtractionTask)
            embedding_dimension: Expected vector length, if known
            retry_wait: tenacity wait strategy for per-chunk embedding retries
        """
        self._settings = settings or get_ingestion_settings()
        self._session_factory = session_factory

        self._download_task = StorageDownloadTask(storage)
        self._extraction_task = extraction_task or PdfExtractionTask()
        self._chunking_task = ChunkingTask(self._settings.chunking_options())
        self._saving_task = ChunkSavingTask(
            session_factory,
            insert_batch_size=self._settings.insert_batch_size,
        )
        self._embedding_task = BatchEmbeddingTask(
            embeddings,
            session_factory,
            options=self._settings.embedding_batch_options(embedding_dimension),
            retry_wait=retry_wait,
        )
        self._status = BookStatusUpdater(session_factory)

    async def process(self, book_id: UUID, user_id: UUID) -> ProcessResult:
        """
        Extract, chunk and store a book's text.

        The wall-clock budget is checked between stages; a stage that has
        started always finishes.

        Args:
            book_id: Book to process
            user_id: Caller; must own the book

        Returns:
            ProcessResult: Chunk count and timing; the book stays PROCESSING

        Raises:
            BookNotFoundError: Book missing or owned by someone else
            DocumentProcessingError: A stage failed (book is now FAILED)
            PipelineTimeoutError: Budget exceeded (book is now FAILED)
        """
        budget = _Budget("processing", self._settings.process_timeout_seconds)
        start_time = time.perf_counter()
        book = await self._get_owned_book(book_id, user_id)

        try:
            await self._reset(book_id)

            data = await self._download_task.download(book.file_path, str(book_id))
            budget.check(book_id)

            text = await asyncio.to_thread(self._extraction_task.extract, data)
            budget.check(book_id)
            if not text.strip():
                raise EmptyContentError(EMPTY_CONTENT_MESSAGE, str(book_id))

            try:
                chunks = self._chunking_task.chunk(text)
            except Exception as e:
                raise ChunkingError(
                    NO_CHUNKS_MESSAGE,
                    str(book_id),
                    details={"error": f"{type(e).__name__}: {e}"},
                ) from e
            if not chunks:
                raise ChunkingError(NO_CHUNKS_MESSAGE, str(book_id))
            budget.check(book_id)

            total_chunks = await self._saving_task.save(book_id, user_id, chunks)
            await self._record_total_chunks(book_id, total_chunks)

        except DocumentProcessingError as e:
            await self._record_failure(book_id, e.reason, e.message)
            raise
        except PipelineTimeoutError as e:
            await self._record_failure(book_id, FailureReason.PROCESSING_TIMEOUT, e.message)
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:process - Book processed",
            extra={
                "book_id": str(book_id),
                "total_chunks": total_chunks,
                "processing_time_ms": round(elapsed_ms, 2),
            },
        )
        return ProcessResult(
            book_id=book_id,
            total_chunks=total_chunks,
            processing_time_ms=elapsed_ms,
        )

    async def embed(self, book_id: UUID, user_id: UUID) -> EmbedResult:
        """
        Generate embeddings for a book's pending chunks and set its final status.

        The wall-clock budget is checked before each batch; a batch that has
        started always settles and its vectors are kept.

        Args:
            book_id: Book to embed
            user_id: Caller; must own the book

        Returns:
            EmbedResult: Counts, rounded success rate, errors and message

        Raises:
            BookNotFoundError: Book missing or owned by someone else
            ValidationError: Book has no chunks to embed yet
            DatastoreError: Pending chunks could not be loaded
            PipelineTimeoutError: Budget exceeded (book is FAILED unless already READY)
        """
        budget = _Budget("embedding", self._settings.embed_timeout_seconds)
        book = await self._get_owned_book(book_id, user_id)
        self._check_embeddable(book)

        try:
            async with self._session_factory() as session:
                pending = list(await book_chunk_crud.list_pending(session, book_id))
        except SQLAlchemyError as e:
            raise DatastoreError(
                f"Failed to fetch chunks: {e}",
                details={"book_id": str(book_id)},
            ) from e

        report = await self._embedding_task.run(pending, deadline=budget.deadline)

        if report.timed_out:
            if book.status != BookStatus.READY:
                await self._record_failure(
                    book_id,
                    FailureReason.EMBEDDING_THRESHOLD,
                    f"Embedding timed out after {budget.seconds:g}s: "
                    f"embedded {report.embedded_count}/{report.considered} chunks",
                )
            raise budget.error(book_id)

        final_status = report.final_status
        if final_status == BookStatus.READY:
            await self._status.mark_ready(book_id)
        elif book.status == BookStatus.READY:
            # A retry over leftover chunks never demotes a ready book
            final_status = BookStatus.READY
        else:
            await self._record_failure(
                book_id,
                FailureReason.EMBEDDING_THRESHOLD,
                f"Only embedded {report.embedded_count}/{report.considered} chunks "
                f"(required {self._embedding_task.options.success_threshold:.0%})",
            )

        logger.info(
            f"{__name__}:embed - Embed complete",
            extra={
                "book_id": str(book_id),
                "embedded_count": report.embedded_count,
                "considered": report.considered,
                "final_status": final_status.value,
            },
        )

        if report.considered == 0:
            return EmbedResult(
                success=True,
                book_id=book_id,
                status=final_status,
                embedded_count=0,
                total_chunks=0,
                success_rate=100,
                message="No chunks to embed. Book is ready.",
            )

        return EmbedResult(
            success=report.embedded_count > 0,
            book_id=book_id,
            status=final_status,
            embedded_count=report.embedded_count,
            total_chunks=report.considered,
            success_rate=round(report.success_rate * 100),
            errors=report.errors or None,
            message=self._embed_message(report.embedded_count, report.considered, final_status),
        )

    @staticmethod
    def _embed_message(embedded: int, considered: int, status: BookStatus) -> str:
        if embedded == considered:
            return "All embeddings generated successfully. Book is ready!"
        if status == BookStatus.READY:
            return f"Embedded {embedded}/{considered} chunks. Book is ready!"
        return f"Only embedded {embedded}/{considered} chunks. Please try again."

    async def _get_owned_book(self, book_id: UUID, user_id: UUID) -> BookModel:
        try:
            async with self._session_factory() as session:
                book = await book_crud.get_owned(session, book_id, user_id)
        except SQLAlchemyError as e:
            raise DatastoreError(
                f"Failed to load book: {e}",
                details={"book_id": str(book_id)},
            ) from e

        if book is None:
            raise BookNotFoundError(str(book_id))
        return book

    async def _reset(self, book_id: UUID) -> None:
        try:
            await self._status.reset_for_processing(book_id)
        except Exception as e:
            raise ChunkPersistenceError(
                "Failed to reset book for processing",
                str(book_id),
                details={"error": f"{type(e).__name__}: {e}"},
            ) from e

    async def _record_total_chunks(self, book_id: UUID, total_chunks: int) -> None:
        try:
            await self._status.set_total_chunks(book_id, total_chunks)
        except Exception as e:
            raise ChunkPersistenceError(
                "Failed to record chunk count",
                str(book_id),
                details={"error": f"{type(e).__name__}: {e}"},
            ) from e

    @staticmethod
    def _check_embeddable(book: BookModel) -> None:
        """Only books whose processing produced chunks can be embedded."""
        failed_before_embedding = (
            book.status == BookStatus.FAILED and book.failure_reason in PROCESS_STAGE_REASONS
        )
        if failed_before_embedding or book.total_chunks == 0:
            raise ValidationError(
                NOT_PROCESSED_MESSAGE,
                field="book_id",
                details={
                    "status": book.status.value,
                    "failure_reason": book.failure_reason.value if book.failure_reason else None,
                },
            )

    async def _record_failure(self, book_id: UUID, reason: FailureReason, message: str) -> None:
        """Write FAILED; a failing status write is logged, not raised over the stage error."""
        try:
            await self._status.mark_failed(book_id, reason, message)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_record_failure - Could not mark book as FAILED",
                e,
                book_id=book_id,
                reason=reason.value,
            )
