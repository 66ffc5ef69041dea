"""
Vector index boundary.

Exports: PineconeIndexClient, VectorRecord, VectorMetadata, Match, record_id
"""

from ragpipe.boundary.vdb.pinecone_client import PineconeIndexClient
from ragpipe.boundary.vdb.vector_schemas import (
    Match,
    VectorMetadata,
    VectorRecord,
    document_id_prefix,
    record_id,
)

__all__ = [
    "PineconeIndexClient",
    "Match",
    "VectorMetadata",
    "VectorRecord",
    "document_id_prefix",
    "record_id",
]
