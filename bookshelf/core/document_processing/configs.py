"""
Configuration settings for the book ingestion pipeline.

Provides environment-based configuration for chunking, persistence and
embedding, plus the explicit option structs handed to the chunker and the
batch embedding orchestrator.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingOptions(BaseModel):
    """Windowing parameters for the chunker."""

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(default=1000, gt=0, description="Target chunk size in characters")
    overlap: int = Field(default=100, ge=0, description="Overlap between consecutive chunks")
    min_chunk_size: int = Field(default=50, ge=0, description="Minimum chunk size to keep")
    merge_short_tail: bool = Field(
        default=True,
        description="Append a sub-minimum trailing remainder to the last chunk instead of dropping it",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingOptions":
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self


class EmbeddingBatchOptions(BaseModel):
    """Batching, pacing and readiness parameters for the embedding orchestrator."""

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(default=10, gt=0, description="Chunks embedded concurrently per batch")
    batch_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Pause between consecutive batches (rate-limit cushioning)",
    )
    success_threshold: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Minimum embedded/considered ratio for the book to become ready",
    )
    max_attempts: int = Field(
        default=1,
        ge=1,
        description="Embedding attempts per chunk (1 disables automatic retry)",
    )
    embedding_dimension: int | None = Field(
        default=None,
        gt=0,
        description="Expected vector length; other lengths count as failures",
    )


class IngestionSettings(BaseSettings):
    """Settings for the book ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="INGEST_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(default=1000, description="Target chunk size in characters")
    chunk_overlap: int = Field(default=100, description="Overlap between consecutive chunks")
    min_chunk_size: int = Field(default=50, description="Minimum chunk size in characters")
    merge_short_tail: bool = Field(
        default=True,
        description="Merge a short trailing remainder into the previous chunk",
    )

    # Persistence settings
    insert_batch_size: int = Field(
        default=100,
        description="Maximum chunk rows per insert call",
    )

    # Embedding settings
    embed_batch_size: int = Field(default=10, description="Concurrent embedding calls per batch")
    embed_batch_delay_seconds: float = Field(
        default=0.1,
        description="Delay between embedding batches in seconds",
    )
    success_threshold: float = Field(
        default=0.8,
        description="Embedded ratio required to mark a book ready",
    )
    max_embed_attempts: int = Field(
        default=1,
        description="Embedding attempts per chunk before recording a failure",
    )

    # Invocation budgets
    process_timeout_seconds: float = Field(
        default=60.0,
        description="Wall-clock budget for extraction + chunking",
    )
    embed_timeout_seconds: float = Field(
        default=300.0,
        description="Wall-clock budget for embedding generation",
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Maximum accepted PDF size in bytes",
    )

    def chunking_options(self) -> ChunkingOptions:
        """Build the chunker option struct from settings."""
        return ChunkingOptions(
            chunk_size=self.chunk_size,
            overlap=self.chunk_overlap,
            min_chunk_size=self.min_chunk_size,
            merge_short_tail=self.merge_short_tail,
        )

    def embedding_batch_options(self, embedding_dimension: int | None = None) -> EmbeddingBatchOptions:
        """
        Build the orchestrator option struct from settings.

        Args:
            embedding_dimension: Expected vector length, if known

        Returns:
            EmbeddingBatchOptions: Options for BatchEmbeddingTask
        """
        return EmbeddingBatchOptions(
            batch_size=self.embed_batch_size,
            batch_delay_seconds=self.embed_batch_delay_seconds,
            success_threshold=self.success_threshold,
            max_attempts=self.max_embed_attempts,
            embedding_dimension=embedding_dimension,
        )


@lru_cache
def get_ingestion_settings() -> IngestionSettings:
    """
    Get cached ingestion settings instance.

    Returns:
        IngestionSettings: Singleton settings loaded from environment
    """
    return IngestionSettings()
