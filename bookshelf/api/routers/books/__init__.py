"""
Books router package.

Exports the router for book upload and ingestion endpoints.
"""

from .books_router import router

__all__ = ["router"]
