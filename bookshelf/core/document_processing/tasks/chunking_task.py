"""
Text chunking task with sentence- and word-boundary snapping.

Splits a book's reconstructed text into overlapping windows of roughly
``chunk_size`` characters. A window end is pulled back to the last sentence
boundary found in the final 20% of the window, else to the last space,
else the window is cut mid-word.

Dependencies: re (stdlib), bookshelf.core.document_processing.configs
System role: Second stage of book ingestion pipeline
"""

import logging
import math
import re

from ..configs import ChunkingOptions
from ..models import TextChunk

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]\s+(?=[A-Z])")

# Sentence boundaries are only searched in the last 20% of a window
_SENTENCE_SEARCH_FRACTION = 0.8


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def estimate_tokens(text: str) -> int:
    """Rough token estimate (1 token ≈ 4 characters of English text)."""
    return math.ceil(len(text) / 4)


class ChunkingTask:
    """Split text into overlapping, boundary-aware chunks."""

    def __init__(self, options: ChunkingOptions | None = None) -> None:
        """
        Initialize chunking task.

        Args:
            options: Windowing parameters (defaults: 1000 / 100 / 50)
        """
        self._options = options or ChunkingOptions()

    @property
    def options(self) -> ChunkingOptions:
        return self._options

    def chunk(self, text: str) -> list[TextChunk]:
        """
        Split text into chunks.

        Args:
            text: Full book text (page markers included)

        Returns:
            list[TextChunk]: Chunks in document order; empty for blank input
        """
        cleaned = normalize_text(text)
        if not cleaned:
            return []

        opts = self._options
        if len(cleaned) <= opts.chunk_size:
            return [TextChunk(text=cleaned, source="chunk 1", index=0)]

        chunks: list[TextChunk] = []
        start = 0
        last_emitted_start = 0
        length = len(cleaned)

        while start < length:
            end = self._window_end(cleaned, start)
            span = cleaned[start:end].strip()

            if len(span) >= opts.min_chunk_size:
                chunks.append(
                    TextChunk(text=span, source=f"chunk {len(chunks) + 1}", index=len(chunks))
                )
                last_emitted_start = start
            elif end >= length and chunks and span and opts.merge_short_tail:
                # Trailing remainder too short to stand alone
                last = chunks[-1]
                chunks[-1] = TextChunk(
                    text=cleaned[last_emitted_start:].strip(),
                    source=last.source,
                    index=last.index,
                )

            if end >= length:
                break

            next_start = end - opts.overlap
            if next_start <= start:
                next_start = end
            start = next_start

        logger.debug(
            f"{__name__}:chunk - Text chunked",
            extra={
                "char_count": length,
                "chunk_count": len(chunks),
                "estimated_tokens": estimate_tokens(cleaned),
            },
        )
        return chunks

    def _window_end(self, text: str, start: int) -> int:
        """Proposed end of the window starting at ``start``, snapped to a boundary."""
        size = self._options.chunk_size
        end = start + size
        if end >= len(text):
            return len(text)

        search_start = start + math.floor(size * _SENTENCE_SEARCH_FRACTION)
        matches = list(_SENTENCE_BOUNDARY.finditer(text[search_start:end]))
        if matches:
            return search_start + matches[-1].end()

        last_space = text.rfind(" ", 0, end + 1)
        if last_space > start:
            return last_space

        return end

