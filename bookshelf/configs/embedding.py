"""
Embedding service configuration.

Dependencies: pydantic_settings
System role: Google Generative AI embedding model selection
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Settings for the external embedding service."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="models/text-embedding-004",
        description="Google embedding model ID",
    )
    output_dimensionality: int = Field(
        default=768,
        description="Fixed vector dimension requested for every embedding call",
    )
