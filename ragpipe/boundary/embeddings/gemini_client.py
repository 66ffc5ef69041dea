"""
Gemini embedding client.

Converts an ordered batch of texts into an equal-length ordered batch of
vectors through the Generative Language REST API. A single text uses
:embedContent, several texts use :batchEmbedContents; callers only rely on
result[i] belonging to texts[i].

Dependencies: httpx, tenacity (via ragpipe.boundary.retry)
System role: Embedding stage of ingestion and query
"""

import logging

import httpx

from ragpipe.boundary.embeddings.response_parsing import Vector, normalize_embeddings
from ragpipe.boundary.http_utils import parse_json, send
from ragpipe.boundary.retry import call_with_retry
from ragpipe.configs.embedding import EmbeddingServiceSettings
from ragpipe.core.exceptions import ConfigurationError, ResponseAlignmentError

logger = logging.getLogger(__name__)

SERVICE = "embedding"


class GeminiEmbeddingClient:
    """Embedding client with transient-only bounded retry."""

    def __init__(
        self,
        settings: EmbeddingServiceSettings,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize embedding client.

        Args:
            settings: Embedding service settings (key, base URL, model)
            max_retries: Attempt ceiling for transient failures
            backoff_seconds: Wait unit between attempts
            http_client: Optional preconfigured httpx client (owned by caller)

        Raises:
            ConfigurationError: When the API key or model is missing
        """
        if not settings.api_key:
            raise ConfigurationError("Embedding API key not configured", setting="EMBEDDING_API_KEY")
        if not settings.model:
            raise ConfigurationError("Embedding model cannot be empty", setting="EMBEDDING_MODEL")

        self._settings = settings
        self.model = settings.model
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=settings.timeout_seconds)

    def _model_path(self, model: str) -> str:
        return model if model.startswith("models/") else f"models/{model}"

    def _request(self, texts: list[str], model: str) -> tuple[str, dict]:
        base = self._settings.base_url.rstrip("/")
        model_path = self._model_path(model)
        if len(texts) == 1:
            return (
                f"{base}/{model_path}:embedContent",
                {"model": model_path, "content": {"parts": [{"text": texts[0]}]}},
            )
        return (
            f"{base}/{model_path}:batchEmbedContents",
            {
                "requests": [
                    {"model": model_path, "content": {"parts": [{"text": text}]}}
                    for text in texts
                ]
            },
        )

    def embed(self, texts: list[str], model: str | None = None) -> list[Vector]:
        """
        Embed texts, preserving order.

        Args:
            texts: Non-empty texts to embed
            model: Model override (defaults to the configured model)

        Returns:
            list[Vector]: One vector per text, in input order ([] for no texts)

        Raises:
            ValueError: When a text is empty
            RetriesExhaustedError: Transient failures on every attempt
            NonTransientServiceError: 4xx-class failure (not retried)
            ResponseAlignmentError: Response could not be aligned 1:1 with texts
        """
        if not texts:
            return []
        if any(not text or not text.strip() for text in texts):
            raise ValueError("Cannot embed empty text")

        model = model or self.model
        url, body = self._request(texts, model)
        headers = {"x-goog-api-key": self._settings.api_key}

        def _attempt() -> str:
            return send(
                self._client,
                "POST",
                url,
                service=SERVICE,
                operation="embed",
                headers=headers,
                json_body=body,
            )

        text = call_with_retry(
            _attempt,
            service=SERVICE,
            operation="embed",
            max_attempts=self.max_retries,
            backoff_seconds=self.backoff_seconds,
        )

        payload = parse_json(text, service=SERVICE, expected=len(texts))
        vectors = normalize_embeddings(payload, expected=len(texts))
        if vectors is None:
            raise ResponseAlignmentError(
                f"Unexpected embedding response: expected {len(texts)} embeddings "
                "but could not parse them",
                service=SERVICE,
                expected=len(texts),
                response_snippet=text,
            )

        logger.debug(f"{__name__}:embed - Embedded {len(texts)} texts with {model}")
        return vectors

    def embed_query(self, text: str, model: str | None = None) -> Vector:
        """Embed a single query string (batch of one)."""
        return self.embed([text], model=model)[0]

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GeminiEmbeddingClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
