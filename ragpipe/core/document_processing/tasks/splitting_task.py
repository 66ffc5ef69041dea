"""
Recursive text splitting under a token budget.

Breaks raw page text into segments that each fit the budget, trying coarse
separators (paragraph, line, sentence, word) before finer ones and finally
slicing by characters.

Dependencies: ragpipe.core.document_processing.tokenizer
System role: First stage of chunking (split -> assemble)
"""

from collections.abc import Iterator, Sequence

from ..tokenizer import TokenCounter

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ", "")

MIN_SLICE_CHARS = 200


def chars_per_token(text: str, token_count: int) -> int:
    """Average characters per token for text, never below 1."""
    return max(1, len(text) // max(1, token_count))


def slice_by_chars(text: str, width: int) -> Iterator[str]:
    """Cut text into contiguous slices of `width` characters, trimmed, empties dropped."""
    for start in range(0, len(text), width):
        piece = text[start:start + width].strip()
        if piece:
            yield piece


def _split_keeping_punctuation(text: str, separator: str) -> list[str]:
    # Non-whitespace parts of a separator (the "." of ". ") stay on the left piece
    kept = separator.rstrip()
    parts = text.split(separator)
    if kept:
        parts = [part + kept for part in parts[:-1]] + parts[-1:]
    return [part.strip() for part in parts if part.strip()]


def recursive_split(
    text: str,
    tokenizer: TokenCounter,
    max_tokens: int,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
    depth: int = 0,
) -> Iterator[str]:
    """
    Yield budget-fitting segments of text in source order.

    Character slicing (the terminal fallback) estimates a characters-per-token
    ratio from the whole text, so a slice can land slightly over or under the
    budget.

    Args:
        text: Raw text to split
        tokenizer: Token counter
        max_tokens: Token budget per segment
        separators: Separators ordered coarse to fine, ending with "" (split anywhere)
        depth: Index of the separator to try

    Yields:
        str: Non-empty trimmed segments
    """
    text = (text or "").strip()
    if not text:
        return

    token_count = tokenizer.count(text)
    if token_count <= max_tokens:
        yield text
        return

    if depth >= len(separators) - 1:
        width = max(MIN_SLICE_CHARS, max_tokens * chars_per_token(text, token_count))
        yield from slice_by_chars(text, width)
        return

    for part in _split_keeping_punctuation(text, separators[depth]):
        if tokenizer.count(part) <= max_tokens:
            yield part
        else:
            yield from recursive_split(part, tokenizer, max_tokens, separators, depth + 1)
