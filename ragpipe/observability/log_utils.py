"""
Structured logging helpers.

Context passed as keyword arguments is flattened to short strings and attached
to the LogRecord through `extra`, so handlers and formatters can read
`record.bucket`, `record.path` and so on. Chunk text and vectors never go
into log context whole; collections are logged by size only.

Dependencies: logging (stdlib)
System role: Context-carrying log calls for the pipeline and clients
"""

import logging
from typing import Any

# LogRecord attributes that cannot be overwritten through `extra`
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Render a context value as a bounded string.

    Sequences and mappings are summarized by size (a batch of 32 vectors logs
    as "list(32 items)"); long strings are cut to max_length.

    Args:
        value: Value to render
        max_length: Longest string kept before truncating

    Returns:
        str: Printable representation, never raising
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            rendered = value
        elif isinstance(value, (list, tuple)):
            rendered = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            rendered = f"dict({len(value)} keys)"
        else:
            rendered = str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(rendered) > max_length:
        return rendered[:max_length] + f"... (truncated, {len(rendered)} total)"
    return rendered


def _as_extra(context: dict[str, Any]) -> dict[str, str]:
    # Keys such as "name" or "message" would make Logger.makeRecord raise
    return {
        (f"ctx_{key}" if key in _RESERVED else key): safe_log_value(value)
        for key, value in context.items()
    }


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Emit one record with keyword context attached.

    Args:
        logger: Target logger
        level: logging level constant
        message: Message text
        **context: Fields to attach (bucket, path, namespace, counters)
    """
    logger.log(level, message, extra=_as_extra(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log an error record carrying the exception, its type and message, and context."""
    extra = _as_extra(context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
