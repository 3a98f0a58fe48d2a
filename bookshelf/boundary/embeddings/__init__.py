"""Embedding service boundary."""

from bookshelf.boundary.embeddings.embeddings_wrapper import (
    FixedDimensionEmbeddings,
    build_embeddings,
)

__all__ = ["FixedDimensionEmbeddings", "build_embeddings"]
