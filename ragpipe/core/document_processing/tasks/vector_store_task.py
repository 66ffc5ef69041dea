"""
Vector index upload task.

Upserts record batches into the configured namespace and purges a
document's previous records on request.

Dependencies: ragpipe.boundary.vdb
System role: Final stage of document ingestion pipeline
"""

import logging
from typing import Protocol

from ragpipe.boundary.vdb.vector_schemas import Match, VectorRecord

logger = logging.getLogger(__name__)


class VectorIndex(Protocol):
    """Operations the pipeline needs from the vector index."""

    default_namespace: str

    def upsert(self, records: list[VectorRecord], namespace: str | None = None) -> int: ...

    def query(self, vector: list[float], top_k: int = 3, namespace: str | None = None) -> list[Match]: ...

    def delete_by_prefix(self, prefix: str, namespace: str | None = None) -> int: ...


class VectorStoreTask:
    """Upload records to the vector index."""

    def __init__(self, index: VectorIndex, namespace: str | None = None) -> None:
        """
        Args:
            index: Vector index client
            namespace: Target namespace (None uses the client default)
        """
        self._index = index
        self.namespace = namespace

    def upload(self, records: list[VectorRecord]) -> int:
        """
        Upsert one batch.

        Returns:
            int: Number of records written

        Raises:
            RetriesExhaustedError / NonTransientServiceError: Upsert failed
        """
        if not records:
            return 0
        self._index.upsert(records, namespace=self.namespace)
        return len(records)

    def purge(self, prefix: str) -> int:
        """Delete every record under prefix; returns the number deleted."""
        deleted = self._index.delete_by_prefix(prefix, namespace=self.namespace)
        logger.info(
            f"{__name__}:purge - Purged {deleted} stale records",
            extra={"prefix": prefix, "namespace": self.namespace},
        )
        return deleted
