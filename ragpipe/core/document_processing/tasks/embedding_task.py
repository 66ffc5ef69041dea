"""
Embedding task.

Embeds one batch of chunks and pairs each vector with its provenance,
producing the records the vector store task upserts.

Dependencies: ragpipe.boundary.vdb.vector_schemas
System role: Embedding stage of document ingestion pipeline
"""

from typing import Protocol

from ragpipe.boundary.vdb.vector_schemas import VectorMetadata, VectorRecord, record_id
from ragpipe.core.exceptions import ResponseAlignmentError

from ..models import Chunk


class EmbeddingClient(Protocol):
    """Ordered texts in, equal-length ordered vectors out."""

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]: ...


class EmbeddingTask:
    """Turn chunk batches into vector records."""

    def __init__(
        self,
        client: EmbeddingClient,
        model: str | None = None,
        metadata_preview_chars: int = 300,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            client: Embedding client
            model: Model override passed to the client
            metadata_preview_chars: Characters of chunk text stored in metadata
        """
        self._client = client
        self._model = model
        self._preview_chars = metadata_preview_chars

    def embed(
        self,
        chunks: list[Chunk],
        bucket: str,
        path: str,
        page: int,
        first_chunk_index: int,
    ) -> list[VectorRecord]:
        """
        Embed a batch and build its records.

        Args:
            chunks: Batch of chunks from one page
            bucket: Source bucket
            path: Source object path
            page: Page the chunks belong to
            first_chunk_index: Page-level index of chunks[0]

        Returns:
            list[VectorRecord]: Records aligned 1:1 with chunks

        Raises:
            ResponseAlignmentError: Client returned a different number of vectors
        """
        if not chunks:
            return []

        vectors = self._client.embed([c.text for c in chunks], model=self._model)
        if len(vectors) != len(chunks):
            raise ResponseAlignmentError(
                f"Embedding client returned {len(vectors)} vectors for {len(chunks)} chunks",
                service="embedding",
                expected=len(chunks),
                received=len(vectors),
            )

        records = []
        for offset, (chunk, vector) in enumerate(zip(chunks, vectors)):
            chunk_index = first_chunk_index + offset
            records.append(
                VectorRecord(
                    id=record_id(bucket, path, page, chunk_index),
                    values=vector,
                    metadata=VectorMetadata(
                        bucket=bucket,
                        path=path,
                        page=page,
                        chunk_index=chunk_index,
                        token_count=chunk.token_count,
                        preview=chunk.text[: self._preview_chars],
                    ),
                )
            )
        return records
