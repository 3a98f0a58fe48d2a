"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so every chunk vector has the same
length. The base class ignores output_dimensionality in the constructor,
so the configured dimension is forwarded on each call.

Dependencies: langchain_google_genai, python-dotenv
System role: Embedding service used by the batch embedding stage
"""

import logging
from typing import List

from dotenv import load_dotenv
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from bookshelf.configs.embedding import EmbeddingSettings

logger = logging.getLogger(__name__)

# GOOGLE_API_KEY is read from .env by the underlying client
load_dotenv()

CHUNK_TASK_TYPE = "RETRIEVAL_DOCUMENT"


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings wrapper with fixed output dimensionality.

    Book chunks are embedded as retrieval documents unless the caller asks
    for another task type.
    """

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/text-embedding-004",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings

        Note:
            text-embedding-004 supports at most 768 dimensions.
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    @property
    def output_dimensionality(self) -> int:
        return self._output_dimensionality

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """Embed one text with the configured dimension."""
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_query(
            text,
            task_type=task_type or CHUNK_TASK_TYPE,
            title=title,
            output_dimensionality=dim,
        )

    async def aembed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """
        Embed one text asynchronously with the configured dimension.

        Args:
            text: Chunk text to embed
            task_type: Embedding task type (RETRIEVAL_DOCUMENT if None)
            title: Optional title
            output_dimensionality: Override dimension (uses configured if None)

        Returns:
            Embedding vector
        """
        dim = output_dimensionality or self._output_dimensionality
        return await super().aembed_query(
            text,
            task_type=task_type or CHUNK_TASK_TYPE,
            title=title,
            output_dimensionality=dim,
        )


def build_embeddings(settings: EmbeddingSettings | None = None) -> FixedDimensionEmbeddings:
    """Create the embeddings client from settings."""
    settings = settings or EmbeddingSettings()
    return FixedDimensionEmbeddings(
        model=settings.model,
        output_dimensionality=settings.output_dimensionality,
    )
