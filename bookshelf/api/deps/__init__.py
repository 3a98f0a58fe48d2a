"""API-specific dependencies."""

from .dependencies import (
    get_book_storage,
    get_book_upload_service,
    get_ingestion_pipeline,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "get_book_storage",
    "get_book_upload_service",
    "get_ingestion_pipeline",
    "get_service_cache",
    "get_settings_dependency",
]
