"""
Chunk model for the ingestion pipeline.

Represents one windowed span of a book's normalized text before it is
persisted.

Dependencies: pydantic
System role: Chunker output
"""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """Chunk text with its source label and dense ordinal index."""

    text: str = Field(description="Trimmed chunk text")
    source: str = Field(description="Human-readable location label, e.g. 'chunk 3'")
    index: int = Field(ge=0, description="Zero-based position among emitted chunks")
