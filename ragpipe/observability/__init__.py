"""
Observability module.

Provides logging configuration and safe structured-logging helpers.
"""

from ragpipe.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from ragpipe.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
]
