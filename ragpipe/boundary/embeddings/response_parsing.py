"""
Embedding response normalization.

The embedding service answers in several shapes depending on endpoint and
API version. Each known shape has its own normalizer; they are tried in a
fixed order and the first one that yields exactly the expected number of
vectors wins. Partial matches are never accepted.

Dependencies: None
System role: Alignment gate between embedding responses and chunks
"""

from collections.abc import Callable
from typing import Any

Vector = list[float]
Normalizer = Callable[[Any], list[Vector] | None]

VECTOR_KEYS = ("values", "embedding", "vector")


def _as_vector(item: Any) -> Vector | None:
    """Coerce one item to a numeric vector, or None when it is not one."""
    if isinstance(item, dict):
        for key in VECTOR_KEYS:
            if key in item:
                return _as_vector(item[key])
        return None
    if isinstance(item, list) and item and all(
        isinstance(x, (int, float)) and not isinstance(x, bool) for x in item
    ):
        return [float(x) for x in item]
    return None


def _vector_list(items: Any) -> list[Vector] | None:
    if not isinstance(items, list):
        return None
    vectors = [_as_vector(item) for item in items]
    if any(v is None for v in vectors):
        return None
    return vectors  # type: ignore[return-value]


def _from_embeddings(payload: Any) -> list[Vector] | None:
    # batchEmbedContents: {"embeddings": [{"values": [...]}, ...]}
    return _vector_list(payload.get("embeddings"))


def _from_single_embedding(payload: Any) -> list[Vector] | None:
    # embedContent: {"embedding": {"values": [...]}} or {"embedding": [...]}
    if "embedding" not in payload:
        return None
    vector = _as_vector(payload["embedding"])
    return [vector] if vector is not None else None


def _from_result_embeddings(payload: Any) -> list[Vector] | None:
    result = payload.get("result")
    if isinstance(result, dict):
        return _vector_list(result.get("embeddings"))
    return None


def _from_result_list(payload: Any) -> list[Vector] | None:
    return _vector_list(payload.get("result"))


def _from_data(payload: Any) -> list[Vector] | None:
    # OpenAI-style: {"data": [{"embedding": [...]}, ...]}
    return _vector_list(payload.get("data"))


NORMALIZERS: tuple[Normalizer, ...] = (
    _from_embeddings,
    _from_single_embedding,
    _from_result_embeddings,
    _from_result_list,
    _from_data,
)


def normalize_embeddings(payload: Any, expected: int) -> list[Vector] | None:
    """
    Extract exactly `expected` vectors from a decoded response.

    Args:
        payload: Decoded JSON response
        expected: Number of texts in the request

    Returns:
        list[Vector] | None: Vectors in request order, or None when no
        normalizer produced exactly `expected` vectors
    """
    if isinstance(payload, list):
        vectors = _vector_list(payload)
        return vectors if vectors is not None and len(vectors) == expected else None
    if not isinstance(payload, dict):
        return None

    for normalizer in NORMALIZERS:
        vectors = normalizer(payload)
        if vectors is not None and len(vectors) == expected:
            return vectors
    return None
