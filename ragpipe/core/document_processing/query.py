"""
Query pipeline.

Embeds a query string (batch of one) and returns the index's nearest
neighbours verbatim. Ranking belongs to the index; nothing is cached or
re-ranked here.

Dependencies: ragpipe.boundary.vdb
System role: Retrieval entry point for answer generation
"""

import logging
from typing import TYPE_CHECKING

from ragpipe.boundary.vdb.vector_schemas import Match
from ragpipe.core.exceptions import ResponseAlignmentError

from .tasks import EmbeddingClient, VectorIndex

if TYPE_CHECKING:
    from ragpipe.configs.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


class QueryPipeline:
    """Embed a query and fetch matches."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        index_client: VectorIndex,
        default_namespace: str | None = None,
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self._embedding_client = embedding_client
        self._index_client = index_client
        self._default_namespace = default_namespace
        self._default_top_k = default_top_k

    @classmethod
    def from_settings(cls, settings: "Settings") -> "QueryPipeline":
        """Build a query pipeline and its remote clients from application settings."""
        from ragpipe.boundary.embeddings import GeminiEmbeddingClient
        from ragpipe.boundary.vdb import PineconeIndexClient

        return cls(
            embedding_client=GeminiEmbeddingClient(
                settings.embedding,
                max_retries=settings.pipeline.max_retries,
                backoff_seconds=settings.pipeline.embed_backoff_seconds,
            ),
            index_client=PineconeIndexClient(settings.vector_index),
            default_namespace=settings.vector_index.namespace,
            default_top_k=settings.vector_index.top_k,
        )

    def query(
        self,
        text: str,
        top_k: int | None = None,
        namespace: str | None = None,
    ) -> list[Match]:
        """
        Retrieve the nearest records for a query.

        Args:
            text: Query text
            top_k: Number of matches (defaults to the configured value)
            namespace: Namespace to search (defaults to the configured one)

        Returns:
            list[Match]: Matches in the order the index ranked them

        Raises:
            ValueError: Empty query text or top_k < 1
            ServiceError: Embedding or index failure
        """
        if not text or not text.strip():
            raise ValueError("query text is required")
        top_k = self._default_top_k if top_k is None else top_k
        if top_k < 1:
            raise ValueError("top_k must be at least 1")

        vectors = self._embedding_client.embed([text])
        if len(vectors) != 1:
            raise ResponseAlignmentError(
                f"Embedding client returned {len(vectors)} vectors for 1 query",
                service="embedding",
                expected=1,
                received=len(vectors),
            )
        vector = vectors[0]
        matches = self._index_client.query(
            vector,
            top_k=top_k,
            namespace=namespace if namespace is not None else self._default_namespace,
        )
        logger.info(
            f"{__name__}:query - Found {len(matches)} matches",
            extra={"top_k": top_k},
        )
        return matches


def build_context(matches: list[Match], max_chars: int = 800) -> str:
    """
    Render matches as context fragments for an answer generator.

    Each fragment reads "(source: <path> page:<n>) <preview>".

    Args:
        matches: Query matches
        max_chars: Preview characters kept per match

    Returns:
        str: Fragments separated by blank lines
    """
    fragments = []
    for match in matches:
        metadata = match.metadata or {}
        source = metadata.get("path") or metadata.get("bucket") or "unknown"
        page = metadata.get("page", "?")
        preview = str(metadata.get("preview") or metadata.get("text") or "")[:max_chars]
        fragments.append(f"(source: {source} page:{page}) {preview}")
    return "\n\n".join(fragments)
