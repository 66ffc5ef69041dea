"""
Chunk assembly with token overlap.

Merges budget-fitting segments into chunks close to the target size. When a
chunk is flushed, the next one is seeded with the tail of the flushed text so
retrieval keeps continuity across the boundary. A seed that leaves no room
for the next segment is dropped, so overlap never pushes a chunk past budget.

Overlap tails and oversized-segment slices are sized with an average
characters-per-token ratio instead of exact token boundaries; a chunk can
therefore end up marginally over budget.

Dependencies: ragpipe.core.document_processing.tokenizer
System role: Second stage of chunking (split -> assemble)
"""

from collections.abc import Iterable, Iterator

from ..models import Chunk
from ..tokenizer import TokenCounter
from .splitting_task import chars_per_token, recursive_split, slice_by_chars

SEGMENT_JOINER = "\n\n"
MIN_OVERSIZED_SLICE_CHARS = 300


class _ChunkBuffer:
    """Running buffer of the chunk under construction."""

    def __init__(self, tokenizer: TokenCounter, chunk_size: int, overlap: int) -> None:
        self._tokenizer = tokenizer
        self._chunk_size = chunk_size
        self._overlap = overlap
        self.text = ""
        self.tokens = 0
        # True once the buffer holds anything besides an overlap seed
        self.fresh = False

    def fits(self, tokens: int) -> bool:
        return self.tokens + tokens <= self._chunk_size

    def append(self, segment: str) -> None:
        self.text = f"{self.text}{SEGMENT_JOINER}{segment}" if self.text else segment
        self.tokens = self._tokenizer.count(self.text)
        self.fresh = True

    def clear(self) -> None:
        self.text = ""
        self.tokens = 0

    def push(self, segment: str, tokens: int) -> Chunk | None:
        """Add a segment, returning the chunk flushed to make room for it (if any)."""
        chunk = None
        if not self.fits(tokens):
            chunk = self.flush()
            if not self.fits(tokens):
                # Overlap seed and segment together exceed the budget: the segment starts alone
                self.clear()
        self.append(segment)
        return chunk

    def flush(self) -> Chunk | None:
        if not self.fresh:
            return None

        text = self.text.strip()
        chunk = Chunk(text=text, token_count=self._tokenizer.count(text)) if text else None

        if self._overlap > 0:
            overlap_chars = self._overlap * chars_per_token(self.text, self.tokens)
            self.text = self.text[-overlap_chars:] if overlap_chars < len(self.text) else self.text
            self.tokens = self._tokenizer.count(self.text)
        else:
            self.clear()
        self.fresh = False
        return chunk


def assemble_chunks(
    segments: Iterable[str],
    tokenizer: TokenCounter,
    chunk_size_tokens: int,
    overlap_tokens: int = 0,
) -> Iterator[Chunk]:
    """
    Fold segments into ordered chunks.

    Args:
        segments: Budget-fitting segments in source order
        tokenizer: Token counter
        chunk_size_tokens: Target chunk size
        overlap_tokens: Tokens of the previous chunk's tail to prepend (0 disables)

    Yields:
        Chunk: Chunks in source order
    """
    buffer = _ChunkBuffer(tokenizer, chunk_size_tokens, overlap_tokens)

    for segment in segments:
        segment_tokens = tokenizer.count(segment)

        if segment_tokens >= chunk_size_tokens:
            width = max(
                MIN_OVERSIZED_SLICE_CHARS,
                chunk_size_tokens * chars_per_token(segment, segment_tokens),
            )
            for piece in slice_by_chars(segment, width):
                chunk = buffer.push(piece, tokenizer.count(piece))
                if chunk:
                    yield chunk
            continue

        chunk = buffer.push(segment, segment_tokens)
        if chunk:
            yield chunk

    chunk = buffer.flush()
    if chunk:
        yield chunk


class ChunkingTask:
    """Split page text and assemble token-bounded chunks."""

    def __init__(
        self,
        tokenizer: TokenCounter,
        chunk_size_tokens: int = 800,
        overlap_tokens: int = 100,
    ) -> None:
        """
        Initialize chunking task.

        Args:
            tokenizer: Token counter shared for the whole ingestion call
            chunk_size_tokens: Target chunk size in tokens
            overlap_tokens: Overlap between consecutive chunks in tokens

        Raises:
            ValueError: When sizes are out of range
        """
        if chunk_size_tokens <= 0:
            raise ValueError("chunk_size_tokens must be positive")
        if overlap_tokens < 0:
            raise ValueError("overlap_tokens cannot be negative")
        if overlap_tokens >= chunk_size_tokens:
            raise ValueError("overlap_tokens must be smaller than chunk_size_tokens")

        self._tokenizer = tokenizer
        self.chunk_size_tokens = chunk_size_tokens
        self.overlap_tokens = overlap_tokens

    def chunk(self, text: str) -> list[Chunk]:
        """
        Split text and assemble chunks.

        Args:
            text: Raw page text

        Returns:
            list[Chunk]: Chunks in source order (empty for blank text)
        """
        segments = recursive_split(text, self._tokenizer, self.chunk_size_tokens)
        return list(
            assemble_chunks(
                segments,
                self._tokenizer,
                self.chunk_size_tokens,
                self.overlap_tokens,
            )
        )
