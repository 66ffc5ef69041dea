"""
Pinecone data-plane client.

Upserts records into a namespaced index, queries nearest neighbours and
deletes records by id prefix. Upserts use the transient retry policy;
queries fail fast.

Dependencies: httpx, tenacity (via ragpipe.boundary.retry)
System role: Vector index boundary for ingestion and retrieval
"""

import logging
from typing import Any

import httpx

from ragpipe.boundary.http_utils import parse_json, send
from ragpipe.boundary.retry import call_with_retry
from ragpipe.boundary.vdb.vector_schemas import Match, VectorRecord
from ragpipe.configs.vector_index import VectorIndexSettings
from ragpipe.core.exceptions import ConfigurationError, ResponseAlignmentError

logger = logging.getLogger(__name__)

SERVICE = "vector_index"
DELETE_BATCH_SIZE = 1000
LIST_PAGE_LIMIT = 100


class PineconeIndexClient:
    """
    Vector index client over the Pinecone REST data plane.

    Upserts are idempotent per record id: writing an existing id overwrites it.
    """

    def __init__(
        self,
        settings: VectorIndexSettings,
        max_retries: int = 3,
        backoff_seconds: float = 0.4,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize index client.

        Args:
            settings: Index settings (URL, key, default namespace)
            max_retries: Attempt ceiling for transient upsert failures
            backoff_seconds: Wait unit between upsert attempts
            http_client: Optional preconfigured httpx client (owned by caller)

        Raises:
            ConfigurationError: When the URL or API key is missing
        """
        if not settings.api_url:
            raise ConfigurationError("Vector index URL not configured", setting="VECTOR_INDEX_API_URL")
        if not settings.api_key:
            raise ConfigurationError("Vector index API key not configured", setting="VECTOR_INDEX_API_KEY")

        self._base_url = settings.api_url.rstrip("/")
        self._headers = {"Api-Key": settings.api_key}
        self.default_namespace = settings.namespace
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=settings.timeout_seconds)

    def _namespace(self, namespace: str | None) -> str:
        return self.default_namespace if namespace is None else namespace

    def _with_namespace(self, body: dict[str, Any], namespace: str | None) -> dict[str, Any]:
        ns = self._namespace(namespace)
        if ns:
            body["namespace"] = ns
        return body

    def upsert(self, records: list[VectorRecord], namespace: str | None = None) -> int:
        """
        Upsert records.

        Args:
            records: Records to write
            namespace: Target namespace (None uses the default)

        Returns:
            int: Number of records acknowledged

        Raises:
            RetriesExhaustedError: Transient failures on every attempt
            NonTransientServiceError: 4xx-class failure (not retried)
        """
        if not records:
            return 0

        body = self._with_namespace({"vectors": [r.to_payload() for r in records]}, namespace)
        url = f"{self._base_url}/vectors/upsert"

        def _attempt() -> str:
            return send(
                self._client,
                "POST",
                url,
                service=SERVICE,
                operation="upsert",
                headers=self._headers,
                json_body=body,
            )

        text = call_with_retry(
            _attempt,
            service=SERVICE,
            operation="upsert",
            max_attempts=self.max_retries,
            backoff_seconds=self.backoff_seconds,
        )

        try:
            ack = parse_json(text, service=SERVICE)
        except ResponseAlignmentError:
            # The write succeeded; an unreadable acknowledgement is not fatal
            ack = {}
        upserted = ack.get("upsertedCount", len(records)) if isinstance(ack, dict) else len(records)

        logger.debug(
            f"{__name__}:upsert - Upserted {upserted} records",
            extra={"namespace": self._namespace(namespace), "record_count": len(records)},
        )
        return int(upserted)

    def query(
        self,
        vector: list[float],
        top_k: int = 3,
        namespace: str | None = None,
    ) -> list[Match]:
        """
        Nearest-neighbour query. Not retried: failures surface immediately.

        Args:
            vector: Query embedding
            top_k: Number of matches requested
            namespace: Namespace to search (None uses the default)

        Returns:
            list[Match]: Matches in the order ranked by the index

        Raises:
            ValueError: When top_k < 1
            TransientServiceError / NonTransientServiceError: Upstream failure
            ResponseAlignmentError: Malformed query response
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")

        body = self._with_namespace(
            {
                "vector": vector,
                "topK": top_k,
                "includeMetadata": True,
                "includeValues": False,
            },
            namespace,
        )
        text = send(
            self._client,
            "POST",
            f"{self._base_url}/query",
            service=SERVICE,
            operation="query",
            headers=self._headers,
            json_body=body,
        )
        return _parse_matches(text)

    def list_ids(self, prefix: str, namespace: str | None = None) -> list[str]:
        """
        List every record id starting with prefix, following pagination.

        Args:
            prefix: Id prefix
            namespace: Namespace to list (None uses the default)

        Returns:
            list[str]: Matching ids
        """
        params: dict[str, Any] = {"prefix": prefix, "limit": LIST_PAGE_LIMIT}
        ns = self._namespace(namespace)
        if ns:
            params["namespace"] = ns

        ids: list[str] = []
        while True:
            text = send(
                self._client,
                "GET",
                f"{self._base_url}/vectors/list",
                service=SERVICE,
                operation="list",
                headers=self._headers,
                params=params,
            )
            page_ids, token = _parse_id_page(text)
            ids.extend(page_ids)
            if not token:
                return ids
            params["paginationToken"] = token

    def delete_ids(self, ids: list[str], namespace: str | None = None) -> int:
        """
        Delete records by id in batches.

        Returns:
            int: Number of ids submitted for deletion
        """
        url = f"{self._base_url}/vectors/delete"
        for start in range(0, len(ids), DELETE_BATCH_SIZE):
            batch = ids[start:start + DELETE_BATCH_SIZE]
            body = self._with_namespace({"ids": batch}, namespace)
            call_with_retry(
                lambda body=body: send(
                    self._client,
                    "POST",
                    url,
                    service=SERVICE,
                    operation="delete",
                    headers=self._headers,
                    json_body=body,
                ),
                service=SERVICE,
                operation="delete",
                max_attempts=self.max_retries,
                backoff_seconds=self.backoff_seconds,
            )
        return len(ids)

    def delete_by_prefix(self, prefix: str, namespace: str | None = None) -> int:
        """
        Delete every record whose id starts with prefix.

        Returns:
            int: Number of records deleted
        """
        ids = self.list_ids(prefix, namespace)
        if not ids:
            return 0
        deleted = self.delete_ids(ids, namespace)
        logger.info(
            "Deleted records by prefix",
            extra={"prefix": prefix, "record_count": deleted},
        )
        return deleted

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "PineconeIndexClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _malformed(what: str, text: str) -> ResponseAlignmentError:
    return ResponseAlignmentError(
        f"Unexpected {what} response from vector index",
        service=SERVICE,
        response_snippet=text,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_matches(text: str) -> list[Match]:
    """
    Decode a query response into matches.

    Raises:
        ResponseAlignmentError: Body is not an object with a list of
            {"id": str, "score": number, "metadata"?: object} matches
    """
    payload = parse_json(text, service=SERVICE)
    if not isinstance(payload, dict):
        raise _malformed("query", text)
    matches = payload.get("matches") or []
    if not isinstance(matches, list):
        raise _malformed("query", text)

    parsed = []
    for m in matches:
        if not (isinstance(m, dict) and isinstance(m.get("id"), str) and _is_number(m.get("score"))):
            raise _malformed("query", text)
        metadata = m.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise _malformed("query", text)
        parsed.append(Match(id=m["id"], score=float(m["score"]), metadata=metadata))
    return parsed


def _parse_id_page(text: str) -> tuple[list[str], str | None]:
    """
    Decode one page of a list response into (ids, next pagination token).

    Raises:
        ResponseAlignmentError: Body is not an object with a list of {"id": str}
    """
    payload = parse_json(text, service=SERVICE)
    if not isinstance(payload, dict):
        raise _malformed("list", text)
    vectors = payload.get("vectors") or []
    pagination = payload.get("pagination") or {}
    if not isinstance(vectors, list) or not isinstance(pagination, dict):
        raise _malformed("list", text)
    if not all(isinstance(v, dict) and isinstance(v.get("id"), str) for v in vectors):
        raise _malformed("list", text)
    return [v["id"] for v in vectors], pagination.get("next")
