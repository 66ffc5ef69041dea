"""Tests for the Gemini embedding client (HTTP mocked with httpx.MockTransport)."""

import json

import httpx
import pytest

from ragpipe.boundary.embeddings.gemini_client import GeminiEmbeddingClient
from ragpipe.configs.embedding import EmbeddingServiceSettings
from ragpipe.core.exceptions import (
    ConfigurationError,
    NonTransientServiceError,
    ResponseAlignmentError,
    RetriesExhaustedError,
)

BASE_URL = "https://embed.test/v1beta"


def _settings(**overrides) -> EmbeddingServiceSettings:
    values = {"api_key": "test-key", "base_url": BASE_URL, "model": "gemini-embedding-001"}
    values.update(overrides)
    return EmbeddingServiceSettings(**values)


class _Responder:
    """Replays queued responses and records each request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def _client(responder: _Responder, max_retries: int = 3) -> GeminiEmbeddingClient:
    http_client = httpx.Client(transport=httpx.MockTransport(responder))
    return GeminiEmbeddingClient(
        _settings(), max_retries=max_retries, backoff_seconds=0, http_client=http_client
    )


def _batch(*vectors) -> httpx.Response:
    return httpx.Response(200, json={"embeddings": [{"values": v} for v in vectors]})


class TestGeminiEmbeddingClient:
    """Tests for GeminiEmbeddingClient."""

    def test_single_text_uses_embed_content(self) -> None:
        responder = _Responder(httpx.Response(200, json={"embedding": {"values": [0.1, 0.2]}}))

        vectors = _client(responder).embed(["hello"])

        assert vectors == [[0.1, 0.2]]
        request = responder.requests[0]
        assert str(request.url) == f"{BASE_URL}/models/gemini-embedding-001:embedContent"
        assert request.headers["x-goog-api-key"] == "test-key"
        assert json.loads(request.content) == {
            "model": "models/gemini-embedding-001",
            "content": {"parts": [{"text": "hello"}]},
        }

    def test_multiple_texts_use_batch_endpoint(self) -> None:
        responder = _Responder(_batch([1.0], [2.0], [3.0]))

        vectors = _client(responder).embed(["a", "b", "c"])

        assert vectors == [[1.0], [2.0], [3.0]]
        request = responder.requests[0]
        assert str(request.url).endswith("/models/gemini-embedding-001:batchEmbedContents")
        body = json.loads(request.content)
        assert [r["content"]["parts"][0]["text"] for r in body["requests"]] == ["a", "b", "c"]
        assert all(r["model"] == "models/gemini-embedding-001" for r in body["requests"])

    def test_model_override(self) -> None:
        responder = _Responder(httpx.Response(200, json={"embedding": {"values": [1]}}))

        _client(responder).embed(["x"], model="models/text-embedding-004")

        assert str(responder.requests[0].url).endswith("/models/text-embedding-004:embedContent")

    def test_empty_input_makes_no_request(self) -> None:
        responder = _Responder(_batch([1.0]))

        assert _client(responder).embed([]) == []
        assert responder.requests == []

    def test_blank_text_rejected(self) -> None:
        responder = _Responder(_batch([1.0], [2.0]))

        with pytest.raises(ValueError):
            _client(responder).embed(["ok", "   "])
        assert responder.requests == []

    def test_transient_failures_exhaust_retries(self) -> None:
        responder = _Responder(httpx.Response(503, text="unavailable"))

        with pytest.raises(RetriesExhaustedError) as exc_info:
            _client(responder).embed(["a", "b"])

        assert len(responder.requests) == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.status_code == 503
        assert "unavailable" in exc_info.value.response_snippet

    def test_recovers_after_transient_failures(self) -> None:
        responder = _Responder(
            httpx.Response(503),
            httpx.Response(502),
            _batch([1.0], [2.0]),
        )

        assert _client(responder).embed(["a", "b"]) == [[1.0], [2.0]]
        assert len(responder.requests) == 3

    def test_connection_error_is_retried(self) -> None:
        responder = _Responder(httpx.ConnectError("refused"), _batch([1.0], [2.0]))

        assert _client(responder).embed(["a", "b"]) == [[1.0], [2.0]]
        assert len(responder.requests) == 2

    @pytest.mark.parametrize("status", [400, 401, 403, 429])
    def test_client_errors_not_retried(self, status: int) -> None:
        responder = _Responder(httpx.Response(status, text="bad request body"))

        with pytest.raises(NonTransientServiceError) as exc_info:
            _client(responder).embed(["a"])

        assert len(responder.requests) == 1
        assert exc_info.value.status_code == status
        assert exc_info.value.response_snippet == "bad request body"

    def test_misaligned_response(self) -> None:
        responder = _Responder(_batch([1.0], [2.0]))

        with pytest.raises(ResponseAlignmentError) as exc_info:
            _client(responder).embed(["a", "b", "c"])

        assert exc_info.value.expected == 3
        assert "embeddings" in exc_info.value.response_snippet
        assert len(responder.requests) == 1

    def test_non_json_response(self) -> None:
        responder = _Responder(httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ResponseAlignmentError):
            _client(responder).embed(["a"])

    def test_embed_query(self) -> None:
        responder = _Responder(httpx.Response(200, json={"embedding": {"values": [4, 5]}}))

        assert _client(responder).embed_query("question") == [4.0, 5.0]

    @pytest.mark.parametrize("overrides", [{"api_key": ""}, {"model": ""}])
    def test_missing_configuration(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            GeminiEmbeddingClient(_settings(**overrides))
