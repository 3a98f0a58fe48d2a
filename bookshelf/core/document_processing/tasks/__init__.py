"""
Pipeline tasks for book ingestion.

Exports: PdfExtractionTask, ChunkingTask, BatchEmbeddingTask,
StorageDownloadTask, ChunkSavingTask
"""

from .batch_embedding_task import BatchEmbeddingTask
from .chunk_saving_task import ChunkSavingTask
from .chunking_task import ChunkingTask, estimate_tokens, normalize_text
from .pdf_extraction_task import PdfExtractionTask, reconstruct_text
from .storage_download_task import StorageDownloadTask

__all__ = [
    "PdfExtractionTask",
    "reconstruct_text",
    "ChunkingTask",
    "normalize_text",
    "estimate_tokens",
    "BatchEmbeddingTask",
    "StorageDownloadTask",
    "ChunkSavingTask",
]
