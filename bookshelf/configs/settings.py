"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from bookshelf.configs.base import BaseSettings
from bookshelf.configs.database import DatabaseSettings
from bookshelf.configs.embedding import EmbeddingSettings
from bookshelf.configs.s3_books import S3BooksSettings
from bookshelf.core.document_processing.configs import IngestionSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    s3_books: S3BooksSettings = S3BooksSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()
    ingestion: IngestionSettings = IngestionSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from bookshelf.configs import get_settings
        settings = get_settings()
    """
    return Settings()
