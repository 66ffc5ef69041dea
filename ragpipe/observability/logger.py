"""
Logger configuration.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "botocore", "boto3", "pypdf")


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configure root logging with timestamped console output.

    Args:
        level: Root log level name or number
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Reduce noise from verbose third-party libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
