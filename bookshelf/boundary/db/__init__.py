"""
Relational datastore boundary.

Exports the declarative base, connection helpers and ORM models.
"""

from bookshelf.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from bookshelf.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from bookshelf.boundary.db.models import BookChunkModel, BookModel

__all__ = [
    "Base",
    "UUIDMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    "get_async_engine",
    "get_async_session_factory",
    "get_async_db",
    "BookModel",
    "BookChunkModel",
]
