"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: bookshelf.configs, bookshelf.application, bookshelf.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.application.services import BookUploadService
from bookshelf.boundary.aws.s3_client import S3BookStorage
from bookshelf.boundary.db import get_async_db, get_async_session_factory
from bookshelf.configs import Settings, get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._storage = None
        self._embeddings = None
        self._session_factory = None
        self._pipeline = None

    @property
    def storage(self):
        """Get cached book storage client."""
        if self._storage is None:
            settings = get_settings()
            self._storage = S3BookStorage(
                bucket=settings.s3_books.bucket,
                region=settings.s3_books.region,
            )
        return self._storage

    @property
    def embeddings(self):
        """Get cached embeddings client."""
        if self._embeddings is None:
            from bookshelf.boundary.embeddings import build_embeddings

            self._embeddings = build_embeddings(get_settings().embedding)
        return self._embeddings

    @property
    def session_factory(self):
        """Get cached async session factory."""
        if self._session_factory is None:
            self._session_factory = get_async_session_factory()
        return self._session_factory

    @property
    def pipeline(self):
        """Get cached ingestion pipeline."""
        if self._pipeline is None:
            from bookshelf.core.document_processing.entrypoint import BookIngestionPipeline

            settings = get_settings()
            self._pipeline = BookIngestionPipeline(
                storage=self.storage,
                embeddings=self.embeddings,
                session_factory=self.session_factory,
                settings=settings.ingestion,
                embedding_dimension=settings.embedding.output_dimensionality,
            )
        return self._pipeline

    def clear(self) -> None:
        """Clear all cached instances."""
        self._storage = None
        self._embeddings = None
        self._session_factory = None
        self._pipeline = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_book_storage() -> S3BookStorage:
    """
    Get blob storage client for book PDFs.

    Returns:
        S3BookStorage: Client for the book bucket
    """
    return get_service_cache().storage


def get_book_upload_service(
    db: AsyncSession = Depends(get_async_db),
    storage: S3BookStorage = Depends(get_book_storage),
) -> BookUploadService:
    """
    Get book upload service instance.

    Args:
        db: Async database session (injected via Depends)
        storage: Book storage client (injected via Depends)

    Returns:
        BookUploadService: Upload service instance
    """
    return BookUploadService(db=db, storage=storage, settings=get_settings().ingestion)


def get_ingestion_pipeline():
    """
    Get the shared ingestion pipeline.

    Returns:
        BookIngestionPipeline: Pipeline wired to storage, embeddings and datastore
    """
    return get_service_cache().pipeline
