"""Status persistence for the book ingestion pipeline."""

from .book_status_updater import BookStatusUpdater

__all__ = ["BookStatusUpdater"]
