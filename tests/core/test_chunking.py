"""
Tests for the boundary-aware text chunker.

Covers option validation, normalization, the degenerate single-chunk case,
sentence/word snapping, progress guarantees, coverage and tail handling.
"""

import math
import random

import pytest
from pydantic import ValidationError

from bookshelf.core.document_processing.configs import ChunkingOptions
from bookshelf.core.document_processing.tasks.chunking_task import (
    ChunkingTask,
    estimate_tokens,
    normalize_text,
)

WORDS = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta", "iota", "kappa"]


def _random_text(seed: int, word_count: int) -> str:
    rng = random.Random(seed)
    parts = []
    for i in range(word_count):
        word = rng.choice(WORDS)
        if i and rng.random() < 0.1:
            word = word.capitalize()
            parts[-1] += rng.choice([".", "!", "?"])
        parts.append(word)
    return "  ".join(parts) if seed % 2 else " \n".join(parts)


def _numbered_text(count: int) -> str:
    """Unique tokens with a sentence end after every seventh token."""
    tokens = []
    for i in range(count):
        token = f"W{i}" if i and i % 7 == 0 else f"w{i}"
        tokens.append(token + ("." if i % 7 == 6 else ""))
    return " ".join(tokens)


class TestChunkingOptions:
    """Test suite for ChunkingOptions validation."""

    def test_defaults(self) -> None:
        """Defaults are 1000 / 100 / 50 with tail merging on."""
        options = ChunkingOptions()

        assert (options.chunk_size, options.overlap, options.min_chunk_size) == (1000, 100, 50)
        assert options.merge_short_tail is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"chunk_size": 0},
            {"chunk_size": 100, "overlap": 100},
            {"chunk_size": 100, "overlap": 150},
            {"overlap": -1},
            {"min_chunk_size": -5},
        ],
    )
    def test_invalid_options_rejected(self, kwargs) -> None:
        """Non-positive size, overlap ≥ size and negative values are rejected."""
        with pytest.raises(ValidationError):
            ChunkingOptions(**kwargs)


class TestNormalization:
    """Test suite for whitespace normalization helpers."""

    def test_normalize_collapses_whitespace(self) -> None:
        assert normalize_text("  a\n\n b\t\tc  ") == "a b c"

    def test_estimate_tokens(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2


class TestChunkingTask:
    """Test suite for ChunkingTask.chunk()."""

    def test_blank_text_yields_no_chunks(self) -> None:
        assert ChunkingTask().chunk("   \n\t ") == []

    def test_short_input_is_single_normalized_chunk(self) -> None:
        """Input no longer than chunk_size becomes exactly one chunk."""
        chunks = ChunkingTask().chunk("  [Page 1]\nShort   text\n\nhere. ")

        assert len(chunks) == 1
        assert chunks[0].text == "[Page 1] Short text here."
        assert chunks[0].source == "chunk 1"
        assert chunks[0].index == 0

    def test_short_input_below_minimum_is_kept(self) -> None:
        """The degenerate case ignores min_chunk_size."""
        chunks = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=10, min_chunk_size=50)).chunk("tiny")

        assert [c.text for c in chunks] == ["tiny"]

    def test_sentence_boundary_snap(self) -> None:
        """A boundary at 85 in a 100-char window ends the first chunk after the period."""
        text = "a" * 85 + ". " + "B" + "b" * 62
        assert len(text) == 150
        task = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=10, min_chunk_size=10))

        chunks = task.chunk(text)

        assert chunks[0].text == text[:86]
        assert len(chunks[0].text) == 86
        assert chunks[0].text.endswith(".")

    def test_boundary_before_search_region_is_ignored(self) -> None:
        """Sentence ends in the first 80% of the window do not pull the end back."""
        text = "word " * 10 + "End. Next " + "x" * 200
        task = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=0, min_chunk_size=1))

        chunks = task.chunk(text)

        # Falls back to the last space at or before 100
        assert chunks[0].text == text[: text.rfind(" ", 0, 101)].strip()

    def test_lowercase_after_period_is_not_a_boundary(self) -> None:
        """Only an uppercase letter after the whitespace marks a sentence end."""
        text = "a" * 85 + ". b" + "c" * 80
        task = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=0, min_chunk_size=1))

        chunks = task.chunk(text)

        assert chunks[0].text == text[:86]  # last space, not the period

    def test_mid_word_cut_without_spaces(self) -> None:
        """Text without spaces is cut at exactly chunk_size."""
        text = "x" * 250
        task = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=10, min_chunk_size=1))

        chunks = task.chunk(text)

        assert len(chunks[0].text) == 100
        assert "".join(c.text for c in chunks).count("x") >= 250

    def test_indices_and_labels_are_dense(self) -> None:
        """Emitted chunks are numbered 0..n-1 and labelled chunk 1..n."""
        text = _random_text(seed=7, word_count=900)

        chunks = ChunkingTask(ChunkingOptions(chunk_size=300, overlap=40, min_chunk_size=20)).chunk(text)

        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert [c.source for c in chunks] == [f"chunk {i + 1}" for i in range(len(chunks))]

    def test_chunks_respect_size_and_minimum(self) -> None:
        """Every chunk fits the window and, except a merged tail, meets the minimum."""
        options = ChunkingOptions(chunk_size=200, overlap=30, min_chunk_size=40, merge_short_tail=False)
        text = _random_text(seed=3, word_count=600)

        chunks = ChunkingTask(options).chunk(text)

        assert all(options.min_chunk_size <= len(c.text) <= options.chunk_size for c in chunks)

    def test_consecutive_chunks_overlap(self) -> None:
        """Each chunk starts inside its predecessor when overlap is positive."""
        text = " ".join(f"w{i:03d}" for i in range(400))
        task = ChunkingTask(ChunkingOptions(chunk_size=100, overlap=20, min_chunk_size=1))

        chunks = task.chunk(text)

        for previous, current in zip(chunks, chunks[1:]):
            assert current.text.split(" ")[0] in previous.text

    @pytest.mark.parametrize("length", [101, 257, 1000, 2049])
    @pytest.mark.parametrize(
        "size,overlap,minimum",
        [(100, 10, 10), (120, 60, 5), (50, 49, 0), (80, 0, 30)],
    )
    def test_progress_is_bounded(self, length, size, overlap, minimum) -> None:
        """Without boundaries to snap to, the loop runs at most ceil(len / (size - overlap)) + 1 times."""
        text = "x" * length
        task = ChunkingTask(ChunkingOptions(chunk_size=size, overlap=overlap, min_chunk_size=minimum))
        starts: list[int] = []
        original_window_end = task._window_end

        def recording_window_end(text_arg, start):
            starts.append(start)
            return original_window_end(text_arg, start)

        task._window_end = recording_window_end
        task.chunk(text)

        assert starts == sorted(set(starts))  # strictly increasing
        assert len(starts) <= math.ceil(len(text) / (size - overlap)) + 1

    @pytest.mark.parametrize("seed", range(6))
    def test_start_offsets_strictly_increase_with_snapping(self, seed) -> None:
        """Snapped windows still move the start forward on every iteration."""
        text = normalize_text(_random_text(seed=seed, word_count=200 + seed * 37))
        task = ChunkingTask(ChunkingOptions(chunk_size=60, overlap=55, min_chunk_size=0))
        starts: list[int] = []
        original_window_end = task._window_end

        def recording_window_end(text_arg, start):
            starts.append(start)
            return original_window_end(text_arg, start)

        task._window_end = recording_window_end
        task.chunk(text)

        assert starts == sorted(set(starts))
        assert len(starts) <= len(text)

    @pytest.mark.parametrize("size,overlap", [(60, 10), (150, 25), (90, 80)])
    def test_chunks_cover_normalized_input(self, size, overlap) -> None:
        """Chunks are ordered spans of the input whose gaps are at most one space."""
        text = _numbered_text(400)
        options = ChunkingOptions(chunk_size=size, overlap=overlap, min_chunk_size=0)

        chunks = ChunkingTask(options).chunk(text)

        positions = [text.find(chunk.text) for chunk in chunks]
        assert -1 not in positions
        assert positions[0] == 0
        assert positions == sorted(positions)
        for position, chunk, next_position in zip(positions, chunks, positions[1:]):
            assert next_position <= position + len(chunk.text) + 1
        assert positions[-1] + len(chunks[-1].text) == len(text)

    def test_short_tail_merged_into_last_chunk(self) -> None:
        """A sub-minimum trailing remainder is appended to the previous chunk."""
        text = "a" * 95 + " " + "tail"
        task = ChunkingTask(ChunkingOptions(chunk_size=96, overlap=0, min_chunk_size=10))

        chunks = task.chunk(text)

        assert len(chunks) == 1
        assert chunks[0].text == text
        assert chunks[0].index == 0

    def test_short_tail_dropped_when_merge_disabled(self) -> None:
        """With merging off the trailing remainder is dropped."""
        text = "a" * 95 + " " + "tail"
        task = ChunkingTask(
            ChunkingOptions(chunk_size=96, overlap=0, min_chunk_size=10, merge_short_tail=False)
        )

        chunks = task.chunk(text)

        assert [c.text for c in chunks] == ["a" * 95]
