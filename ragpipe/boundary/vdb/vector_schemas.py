"""
Vector index schemas.

Pydantic models for records written to and matches read from the index.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, Field

ID_SEPARATOR = "::"


def document_id_prefix(bucket: str, path: str) -> str:
    """Common prefix of every record id derived from one document."""
    return f"{bucket}{ID_SEPARATOR}{path}{ID_SEPARATOR}"


def record_id(bucket: str, path: str, page: int, chunk_index: int) -> str:
    """
    Deterministic record id: bucket::path::p{page}::c{chunk_index}.

    Re-ingesting a document with the same chunking parameters reproduces the
    same ids, so upserts overwrite instead of duplicating.
    """
    return f"{document_id_prefix(bucket, path)}p{page}{ID_SEPARATOR}c{chunk_index}"


class VectorMetadata(BaseModel):
    """Provenance stored next to each vector."""

    bucket: str = Field(description="Source bucket")
    path: str = Field(description="Source object path")
    page: int = Field(description="1-based page (synthetic for windowed text)")
    chunk_index: int = Field(description="Chunk position within the page")
    token_count: int = Field(description="Chunk token count")
    preview: str = Field(default="", description="Leading characters of the chunk text")


class VectorRecord(BaseModel):
    """Record upserted into the index."""

    id: str = Field(description="Deterministic record id")
    values: list[float] = Field(description="Embedding vector")
    metadata: VectorMetadata

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Match(BaseModel):
    """Single query result, in the order the index ranked it."""

    id: str
    score: float = Field(description="Similarity reported by the index; higher is better")
    metadata: dict[str, Any] = Field(default_factory=dict)
