"""
Tokenizer wrapper around tiktoken.

Token counts drive every sizing decision in splitting and chunk assembly;
tokens themselves are never stored. One tokenizer is owned by one ingestion
call and released when that call ends.

Dependencies: tiktoken
System role: Token counting for chunk budgets
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import tiktoken

from ragpipe.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TokenCounter(Protocol):
    """Structural type accepted by the splitting and chunking tasks."""

    def count(self, text: str) -> int: ...

    def encode(self, text: str) -> list[int]: ...


class Tokenizer:
    """Model-specific token counter."""

    def __init__(self, model: str = "gpt-4o-mini") -> None:
        """
        Resolve the encoding for a model or encoding name.

        Args:
            model: tiktoken model name (gpt-4o-mini) or encoding name (cl100k_base)

        Raises:
            ConfigurationError: When the identifier is empty or unknown
        """
        if not model:
            raise ConfigurationError("tokenizer model cannot be empty", setting="tokenizer_model")

        self.model = model
        try:
            self._encoding: tiktoken.Encoding | None = tiktoken.encoding_for_model(model)
        except KeyError:
            try:
                self._encoding = tiktoken.get_encoding(model)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown tokenizer model: {model}", setting="tokenizer_model"
                ) from e

    @property
    def closed(self) -> bool:
        return self._encoding is None

    def _require(self) -> tiktoken.Encoding:
        if self._encoding is None:
            raise RuntimeError(f"Tokenizer for {self.model} has been released")
        return self._encoding

    def encode(self, text: str) -> list[int]:
        """Encode text to token ids (special tokens treated as plain text)."""
        return self._require().encode(text, disallowed_special=())

    def count(self, text: str) -> int:
        """Number of tokens in text."""
        if not text:
            return 0
        return len(self.encode(text))

    def close(self) -> None:
        """Release the encoder. Further use raises RuntimeError."""
        self._encoding = None

    def __enter__(self) -> "Tokenizer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@contextmanager
def open_tokenizer(model: str) -> Iterator[Tokenizer]:
    """
    Scoped tokenizer acquisition.

    The tokenizer is released on every exit path, including exceptions and
    generator close on cancellation.

    Args:
        model: tiktoken model or encoding name

    Yields:
        Tokenizer: Ready-to-use tokenizer
    """
    tokenizer = Tokenizer(model)
    logger.debug(f"{__name__}:open_tokenizer - Acquired tokenizer for {model}")
    try:
        yield tokenizer
    finally:
        tokenizer.close()
        logger.debug(f"{__name__}:open_tokenizer - Released tokenizer for {model}")
