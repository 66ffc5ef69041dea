"""
Retry policy for remote calls.

Only transient failures (5xx, timeouts, dropped connections) are retried,
with a linearly increasing wait (backoff * attempt). Anything else surfaces
on the first attempt. Running out of attempts raises RetriesExhaustedError
chained to the last transient failure.

Dependencies: tenacity
System role: Shared retry wrapper for embedding and upsert calls
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ragpipe.core.exceptions import RetriesExhaustedError, TransientServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def transient_retrying(
    max_attempts: int,
    backoff_seconds: float,
    label: str = "request",
) -> Retrying:
    """
    Build a tenacity controller for transient-only retries.

    Args:
        max_attempts: Attempt ceiling (including the first call)
        backoff_seconds: Wait unit; the n-th retry waits n * backoff_seconds
        label: Name used in retry log lines

    Returns:
        Retrying: Configured tenacity controller
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"{__name__}:{label} - Retry {retry_state.attempt_number}/{max_attempts} "
            f"after transient failure: {exc}"
        )

    return Retrying(
        retry=retry_if_exception_type(TransientServiceError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        before_sleep=_log_retry,
        reraise=False,
    )


def call_with_retry(
    fn: Callable[[], T],
    *,
    service: str,
    operation: str,
    max_attempts: int = 3,
    backoff_seconds: float = 0.5,
) -> T:
    """
    Run fn under the transient retry policy.

    Args:
        fn: Zero-argument callable performing one attempt
        service: Remote service name for error reporting
        operation: Operation name for error reporting
        max_attempts: Attempt ceiling
        backoff_seconds: Wait unit between attempts

    Returns:
        Whatever fn returns on its first successful attempt

    Raises:
        RetriesExhaustedError: Every attempt failed transiently
        ServiceError: A non-transient failure (raised on first occurrence)
    """
    retrying = transient_retrying(max_attempts, backoff_seconds, label=f"{service}.{operation}")
    try:
        return retrying(fn)
    except RetryError as e:
        last = e.last_attempt.exception()
        raise RetriesExhaustedError(
            service=service,
            attempts=e.last_attempt.attempt_number,
            last_error=last if isinstance(last, TransientServiceError) else None,
            operation=operation,
        ) from last
