"""
Pipeline result models for book processing.

Represents the outcome of the two pipeline entry points and the report of
one batch embedding run.

Dependencies: pydantic
System role: Return types for BookIngestionPipeline.process() / embed()
"""

from uuid import UUID

from pydantic import BaseModel, Field

from .status import BookStatus


class ProcessResult(BaseModel):
    """Result of extraction + chunking + persistence."""

    success: bool = Field(default=True)
    book_id: UUID = Field(description="Processed book identifier")
    total_chunks: int = Field(description="Number of chunks persisted")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")
    message: str = Field(default="PDF processed successfully. Ready for embedding generation.")


class ChunkEmbeddingOutcome(BaseModel):
    """Outcome of embedding a single chunk; exactly one of vector/error is set."""

    chunk_id: UUID
    vector: list[float] | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.vector is not None


class EmbeddingRunReport(BaseModel):
    """Aggregated counts of one orchestrator run."""

    considered: int = Field(description="Chunks lacking a vector at the start of the run")
    embedded_count: int = Field(description="Chunks whose vector was written back")
    errors: list[str] = Field(default_factory=list, description="'Chunk <id>: <message>' entries")
    success_rate: float = Field(description="embedded_count / considered (1.0 when nothing to do)")
    final_status: BookStatus = Field(description="READY when the threshold is met, else FAILED")
    timed_out: bool = Field(
        default=False,
        description="Stopped before the last batch because the deadline passed",
    )

    @property
    def failed_count(self) -> int:
        return self.considered - self.embedded_count


class EmbedResult(BaseModel):
    """Result of the embedding entry point as reported to callers."""

    success: bool
    book_id: UUID
    status: BookStatus
    embedded_count: int
    total_chunks: int
    success_rate: int = Field(description="Success rate in percent, rounded")
    errors: list[str] | None = None
    message: str
