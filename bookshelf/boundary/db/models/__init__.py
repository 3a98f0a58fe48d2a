"""ORM models for books and their chunks."""

from bookshelf.boundary.db.models.book_model import BookModel
from bookshelf.boundary.db.models.book_chunk_model import BookChunkModel
from bookshelf.core.document_processing.models.status import BookStatus, FailureReason

__all__ = ["BookModel", "BookChunkModel", "BookStatus", "FailureReason"]
