"""
Book processing pipeline.

Extraction, chunking, chunk persistence and batched embedding of uploaded
PDF books. The controller lives in ``entrypoint`` and is imported from there
directly to keep this package free of datastore imports.

Dependencies: pydantic, pydantic_settings
System role: Book ingestion pipeline
"""

from .configs import (
    ChunkingOptions,
    EmbeddingBatchOptions,
    IngestionSettings,
    get_ingestion_settings,
)
from .models import BookStatus, FailureReason, TextChunk

__all__ = [
    "ChunkingOptions",
    "EmbeddingBatchOptions",
    "IngestionSettings",
    "get_ingestion_settings",
    "BookStatus",
    "FailureReason",
    "TextChunk",
]
