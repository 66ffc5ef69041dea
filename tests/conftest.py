"""
Shared test fixtures and configuration for entire test suite.

Provides: deterministic tokenizers, in-memory embedding client and vector
index fakes, pipeline settings tuned for fast tests
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

import math
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from ragpipe.boundary.vdb.vector_schemas import Match, VectorRecord
from ragpipe.configs.pipeline import DocumentPipelineSettings
from ragpipe.core.exceptions import RetriesExhaustedError


class WhitespaceTokenizer:
    """One token per whitespace-separated word."""

    def __init__(self) -> None:
        self.closed = False

    def encode(self, text: str) -> list[int]:
        return list(range(len(text.split())))

    def count(self, text: str) -> int:
        return len(text.split())

    def close(self) -> None:
        self.closed = True


class CharTokenizer:
    """One token per four characters, so long unbroken strings are expensive."""

    def encode(self, text: str) -> list[int]:
        return list(range(self.count(text)))

    def count(self, text: str) -> int:
        return math.ceil(len(text) / 4)


class FakeEmbeddingClient:
    """Returns a 3-dim vector per text; can be told to fail on a given call."""

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.calls: list[list[str]] = []
        self._fail_on_call = fail_on_call

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        self.calls.append(list(texts))
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise RetriesExhaustedError(service="embedding", attempts=3, operation="embed")
        return [[float(len(t)), float(i), 1.0] for i, t in enumerate(texts)]


class FakeVectorIndex:
    """In-memory index keyed by record id."""

    def __init__(self, default_namespace: str = "") -> None:
        self.default_namespace = default_namespace
        self.records: dict[str, VectorRecord] = {}
        self.upsert_calls: list[list[VectorRecord]] = []
        self.namespaces: list[str | None] = []
        self.deleted_prefixes: list[str] = []
        self.query_calls: list[dict] = []
        self.matches: list[Match] = []

    def upsert(self, records: list[VectorRecord], namespace: str | None = None) -> int:
        self.upsert_calls.append(list(records))
        self.namespaces.append(namespace)
        for record in records:
            self.records[record.id] = record
        return len(records)

    def query(self, vector: list[float], top_k: int = 3, namespace: str | None = None) -> list[Match]:
        self.query_calls.append({"vector": vector, "top_k": top_k, "namespace": namespace})
        return self.matches[:top_k]

    def delete_by_prefix(self, prefix: str, namespace: str | None = None) -> int:
        self.deleted_prefixes.append(prefix)
        stale = [key for key in self.records if key.startswith(prefix)]
        for key in stale:
            del self.records[key]
        return len(stale)


@pytest.fixture
def whitespace_tokenizer() -> WhitespaceTokenizer:
    return WhitespaceTokenizer()


@pytest.fixture
def char_tokenizer() -> CharTokenizer:
    return CharTokenizer()


@pytest.fixture
def fake_embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def fake_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture
def pipeline_settings() -> DocumentPipelineSettings:
    """Small budgets so a handful of words spans several chunks."""
    return DocumentPipelineSettings(
        chunk_size_tokens=10,
        overlap_tokens=0,
        batch_size=2,
        preview_chunks=5,
        max_retries=3,
        embed_backoff_seconds=0,
        upsert_backoff_seconds=0,
    )


@pytest.fixture
def patched_tokenizer():
    """
    Replace tiktoken-backed acquisition in the pipeline with a whitespace tokenizer.

    Yields:
        list[WhitespaceTokenizer]: Every tokenizer handed out, for release checks
    """
    issued: list[WhitespaceTokenizer] = []

    @contextmanager
    def _open(model: str):
        tokenizer = WhitespaceTokenizer()
        issued.append(tokenizer)
        try:
            yield tokenizer
        finally:
            tokenizer.close()

    with patch("ragpipe.core.document_processing.entrypoint.open_tokenizer", _open):
        yield issued


@pytest.fixture
def make_embedding_client():
    """Factory for embedding fakes with a scripted failure."""
    return FakeEmbeddingClient
