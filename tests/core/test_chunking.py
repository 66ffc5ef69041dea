"""Tests for chunk assembly and ChunkingTask."""

import re

import pytest

from ragpipe.core.document_processing.models import Chunk
from ragpipe.core.document_processing.tasks.chunking_task import (
    ChunkingTask,
    assemble_chunks,
)

FILLER = ("aaaa", "bbbb", "cccc", "dddd", "eeee", "ffff", "gggg", "hhhh", "iiii")


def _segments(count: int) -> list[str]:
    """Ten-word segments, 50 characters each."""
    return [f"seg{i:02d} " + " ".join(FILLER) for i in range(count)]


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


class TestAssembleChunks:
    """Behaviour of assemble_chunks."""

    def test_segments_merge_up_to_budget(self, whitespace_tokenizer) -> None:
        chunks = list(assemble_chunks(_segments(6), whitespace_tokenizer, 30, 0))

        assert [c.token_count for c in chunks] == [30, 30]
        assert all(isinstance(c, Chunk) for c in chunks)

    def test_token_count_matches_text(self, whitespace_tokenizer) -> None:
        chunks = list(assemble_chunks(_segments(7), whitespace_tokenizer, 25, 5))

        for chunk in chunks:
            assert chunk.token_count == whitespace_tokenizer.count(chunk.text)
            assert chunk.text == chunk.text.strip()

    def test_no_overlap_partitions_segment_stream(self, whitespace_tokenizer) -> None:
        """With overlap 0, chunks split back into the original segments in order."""
        segments = _segments(9)

        chunks = list(assemble_chunks(segments, whitespace_tokenizer, 25, 0))

        rebuilt = [part for c in chunks for part in c.text.split("\n\n")]
        assert rebuilt == segments
        assert all(c.token_count <= 25 for c in chunks)

    def test_overlap_seeds_next_chunk_with_tail(self, whitespace_tokenizer) -> None:
        """Each chunk after the first starts with the tail of its predecessor."""
        chunks = list(assemble_chunks(_segments(9), whitespace_tokenizer, 30, 5))

        assert len(chunks) >= 2
        for previous, current in zip(chunks, chunks[1:]):
            head = current.text.split("\n\n")[0]
            assert head
            assert previous.text.endswith(head)
            assert whitespace_tokenizer.count(head) == 5

    def test_overlap_keeps_every_segment(self, whitespace_tokenizer) -> None:
        segments = _segments(9)

        chunks = list(assemble_chunks(segments, whitespace_tokenizer, 30, 5))

        joined = "\n\n".join(c.text for c in chunks)
        for segment in segments:
            assert segment in joined

    def test_overlap_seed_dropped_when_segment_needs_room(self, whitespace_tokenizer) -> None:
        """A segment that cannot sit beside the overlap seed starts a chunk of its own."""
        first = " ".join(f"a{i}" for i in range(9))
        second = " ".join(f"b{i}" for i in range(9))

        chunks = list(assemble_chunks([first, second], whitespace_tokenizer, 10, 3))

        assert [(c.token_count, c.text) for c in chunks] == [(9, first), (9, second)]

    def test_overlap_never_exceeds_budget_for_fitting_segments(self, whitespace_tokenizer) -> None:
        segments = [
            " ".join(f"s{n}w{i}" for i in range(words))
            for n, words in enumerate([9, 4, 8, 2, 9, 7, 3, 9])
        ]

        chunks = list(assemble_chunks(segments, whitespace_tokenizer, 10, 3))

        assert all(c.token_count <= 10 for c in chunks)
        joined = _squash("".join(c.text for c in chunks))
        assert all(_squash(s) in joined for s in segments)

    def test_overlap_with_oversized_slices_stays_within_budget(self, whitespace_tokenizer) -> None:
        # 200 nine-character words: slices of 360 characters hold exactly 36 words
        big = " ".join(f"word{i:05d}" for i in range(200))

        chunks = list(assemble_chunks([big], whitespace_tokenizer, 40, 10))

        assert [c.token_count for c in chunks] == [36, 36, 36, 36, 36, 29]
        assert chunks[-1].text.startswith("word00171")

    def test_oversized_segment_is_force_split(self, whitespace_tokenizer) -> None:
        big = " ".join(f"word{i:03d}" for i in range(100))  # 100 tokens, 799 chars

        chunks = list(assemble_chunks([big], whitespace_tokenizer, 30, 0))

        assert len(chunks) > 1
        assert _squash("".join(c.text for c in chunks)) == _squash(big)

    def test_oversized_segment_flushes_pending_buffer_first(self, whitespace_tokenizer) -> None:
        small = "tiny leading segment"
        big = " ".join(f"word{i:03d}" for i in range(100))

        chunks = list(assemble_chunks([small, big], whitespace_tokenizer, 30, 0))

        assert chunks[0].text.startswith(small)
        assert _squash("".join(c.text for c in chunks)) == _squash(small + big)

    def test_empty_input_yields_no_chunks(self, whitespace_tokenizer) -> None:
        assert list(assemble_chunks([], whitespace_tokenizer, 30, 5)) == []

    def test_single_small_segment(self, whitespace_tokenizer) -> None:
        chunks = list(assemble_chunks(["just this"], whitespace_tokenizer, 30, 5))

        assert chunks == [Chunk(text="just this", token_count=2)]


class TestChunkingTask:
    """Tests for ChunkingTask (split + assemble)."""

    def test_chunk_short_text(self, whitespace_tokenizer) -> None:
        task = ChunkingTask(whitespace_tokenizer, chunk_size_tokens=100, overlap_tokens=10)

        assert task.chunk("A short paragraph.") == [
            Chunk(text="A short paragraph.", token_count=3)
        ]

    def test_chunk_blank_text(self, whitespace_tokenizer) -> None:
        task = ChunkingTask(whitespace_tokenizer, chunk_size_tokens=100, overlap_tokens=10)

        assert task.chunk("   \n ") == []

    def test_chunk_long_text_respects_budget(self, whitespace_tokenizer) -> None:
        text = "\n\n".join(
            ". ".join(" ".join(f"w{p}{s}{i}" for i in range(6)) for s in range(4))
            for p in range(8)
        )
        task = ChunkingTask(whitespace_tokenizer, chunk_size_tokens=20, overlap_tokens=0)

        chunks = task.chunk(text)

        assert len(chunks) > 1
        assert all(c.token_count <= 20 for c in chunks)
        assert _squash("".join(c.text for c in chunks)) == _squash(text)

    def test_chunk_with_overlap_respects_budget(self, whitespace_tokenizer) -> None:
        text = "\n\n".join(
            " ".join(f"p{p}w{i}" for i in range(19 if p % 2 else 7)) for p in range(10)
        )
        task = ChunkingTask(whitespace_tokenizer, chunk_size_tokens=20, overlap_tokens=5)

        chunks = task.chunk(text)

        assert len(chunks) > 1
        assert all(c.token_count <= 20 for c in chunks)

    @pytest.mark.parametrize(
        ("size", "overlap"),
        [(0, 0), (-5, 0), (10, -1), (10, 10), (10, 20)],
    )
    def test_invalid_sizes_rejected(self, whitespace_tokenizer, size, overlap) -> None:
        with pytest.raises(ValueError):
            ChunkingTask(whitespace_tokenizer, chunk_size_tokens=size, overlap_tokens=overlap)
