"""
Exception hierarchy for the ingestion pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any

SNIPPET_LIMIT = 2000


def truncate_snippet(text: str | None, limit: int = SNIPPET_LIMIT) -> str:
    """
    Truncate a raw upstream body for inclusion in an error.

    Args:
        text: Raw response text (may be None)
        limit: Maximum characters kept

    Returns:
        str: Text cut to limit with a truncation marker when shortened
    """
    if not text:
        return ""
    if len(text) > limit:
        return text[:limit] + "...(truncated)"
    return text


class RagPipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RagPipelineError):
    """Raised when a required identifier or credential is missing."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Name of the missing or invalid setting
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class ServiceError(RagPipelineError):
    """Base exception for failures reported by a remote service."""

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        response_snippet: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize service error.

        Args:
            message: Error message
            service: Remote service name (embedding, vector_index)
            status_code: HTTP status code, None for transport failures
            response_snippet: Raw upstream body, truncated before storage
            details: Additional context
        """
        self.service = service
        self.status_code = status_code
        self.response_snippet = truncate_snippet(response_snippet)
        details = details or {}
        details["service"] = service
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


class TransientServiceError(ServiceError):
    """Raised on retry-worthy upstream failures (5xx, timeouts, connection errors)."""


class NonTransientServiceError(ServiceError):
    """Raised on failures retrying cannot fix (4xx: bad request, auth, quota)."""


class RetriesExhaustedError(ServiceError):
    """Raised when every attempt of a retried call failed transiently."""

    def __init__(
        self,
        service: str,
        attempts: int,
        last_error: ServiceError | None = None,
        operation: str | None = None,
    ) -> None:
        """
        Initialize retries exhausted error.

        Args:
            service: Remote service name
            attempts: Number of attempts made
            last_error: Final transient failure
            operation: Operation that was retried (embed, upsert)
        """
        self.attempts = attempts
        details: dict[str, Any] = {"attempts": attempts}
        if operation:
            details["operation"] = operation
        super().__init__(
            f"{service} {operation or 'request'} retries exhausted after {attempts} attempts",
            service=service,
            status_code=last_error.status_code if last_error else None,
            response_snippet=last_error.response_snippet if last_error else None,
            details=details,
        )


class ResponseAlignmentError(ServiceError):
    """Raised when a response has an unexpected shape or cannot be aligned 1:1 with the request."""

    def __init__(
        self,
        message: str,
        service: str,
        expected: int | None = None,
        received: int | None = None,
        response_snippet: str | None = None,
    ) -> None:
        """
        Initialize alignment error.

        Args:
            message: Error message
            service: Remote service name
            expected: Number of items requested, when known
            received: Number of items recovered, when known
            response_snippet: Raw upstream body
        """
        self.expected = expected
        self.received = received
        details: dict[str, Any] = {}
        if expected is not None:
            details["expected"] = expected
        if received is not None:
            details["received"] = received
        super().__init__(
            message,
            service=service,
            response_snippet=response_snippet,
            details=details,
        )


class DocumentProcessingError(RagPipelineError):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document: Identifier of the document (bucket/path or local path)
            details: Additional context
        """
        details = details or {}
        if document:
            details["document"] = document
        super().__init__(message, details)


class OversizedInputError(DocumentProcessingError):
    """Raised when a source document exceeds the configured byte ceiling."""

    def __init__(self, document: str, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"Document too large ({size_bytes} bytes). Max {max_bytes}",
            document,
            {"size_bytes": size_bytes, "max_bytes": max_bytes},
        )


class ParsingError(DocumentProcessingError):
    """Raised when page text extraction fails."""


class BlobDownloadError(DocumentProcessingError):
    """Raised when the source document cannot be fetched from the blob store."""
