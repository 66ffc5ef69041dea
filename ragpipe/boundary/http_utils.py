"""
HTTP helpers shared by the remote service clients.

Maps transport failures and HTTP status codes onto the pipeline's
transient / non-transient error taxonomy.

Dependencies: httpx
System role: Request execution and status classification
"""

import json
import logging
from typing import Any

import httpx

from ragpipe.core.exceptions import (
    NonTransientServiceError,
    ResponseAlignmentError,
    TransientServiceError,
)

logger = logging.getLogger(__name__)


def is_transient_status(status_code: int) -> bool:
    """5xx responses are worth retrying; everything else is not."""
    return status_code >= 500


def send(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    service: str,
    operation: str,
    headers: dict[str, str] | None = None,
    json_body: Any = None,
    params: dict[str, Any] | None = None,
) -> str:
    """
    Perform one request and return the body text of a 2xx response.

    Args:
        client: httpx client
        method: HTTP method
        url: Absolute URL
        service: Remote service name for error reporting
        operation: Operation name for error reporting
        headers: Request headers
        json_body: JSON payload
        params: Query string parameters

    Returns:
        str: Response body text

    Raises:
        TransientServiceError: 5xx response, timeout or connection failure
        NonTransientServiceError: Any other non-2xx response
    """
    try:
        response = client.request(method, url, headers=headers, json=json_body, params=params)
    except httpx.TransportError as e:
        raise TransientServiceError(
            f"{service} {operation} transport failure: {type(e).__name__}: {e}",
            service=service,
        ) from e

    text = response.text
    if response.is_success:
        return text

    error_cls = TransientServiceError if is_transient_status(response.status_code) else NonTransientServiceError
    logger.debug(f"{__name__}:send - {service} {operation} returned {response.status_code}")
    raise error_cls(
        f"{service} {operation} failed {response.status_code}: {text or '<empty response>'}"[:500],
        service=service,
        status_code=response.status_code,
        response_snippet=text,
    )


def parse_json(text: str, *, service: str, expected: int | None = None) -> Any:
    """
    Decode a JSON body; an empty body decodes to {}.

    Raises:
        ResponseAlignmentError: Body is not valid JSON
    """
    try:
        return json.loads(text or "{}")
    except json.JSONDecodeError as e:
        raise ResponseAlignmentError(
            f"{service} returned non-JSON response",
            service=service,
            expected=expected,
            response_snippet=text,
        ) from e
