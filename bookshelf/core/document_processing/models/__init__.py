"""
Models for the book processing pipeline.

Exports: BookStatus, FailureReason, TextFragment, PageBreak, TextChunk,
ProcessResult, ChunkEmbeddingOutcome, EmbeddingRunReport, EmbedResult
"""

from .chunk import TextChunk
from .fragments import PageBreak, TextFragment
from .pipeline_result import (
    ChunkEmbeddingOutcome,
    EmbeddingRunReport,
    EmbedResult,
    ProcessResult,
)
from .status import PROCESS_STAGE_REASONS, BookStatus, FailureReason

__all__ = [
    "BookStatus",
    "FailureReason",
    "PROCESS_STAGE_REASONS",
    "TextFragment",
    "PageBreak",
    "TextChunk",
    "ProcessResult",
    "ChunkEmbeddingOutcome",
    "EmbeddingRunReport",
    "EmbedResult",
]
