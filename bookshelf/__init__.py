"""
Bookshelf: PDF book ingestion service.

Uploads PDF books, reconstructs their text page by page, splits it into
overlapping chunks and attaches embedding vectors for semantic search.
"""

__version__ = "0.1.0"
