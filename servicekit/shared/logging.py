"""
Logging configuration for services.

Sets up structured logging with a consistent format.
Logging must not change program behavior.
Never logs secrets: authorization tokens are redacted before logging.
"""

import logging
import sys
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(process)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Server libraries that log on their own; requests are logged by
# AccessLogMiddleware and lifecycle events by ServerLifecycle.
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "grpc._cython", "grpc.aio")


def configure_logging(level: str = "INFO", quiet: Iterable[str] = QUIET_LOGGERS) -> None:
    """Configure structured logging for the service.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
        quiet: Logger names raised to WARNING unless ``level`` is DEBUG.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    quiet_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in quiet:
        logging.getLogger(name).setLevel(quiet_level)


def redact_token(authorization: str) -> str:
    """Reduce an Authorization header value to a loggable hint.

    The scheme is dropped and only the last four characters are kept.
    """
    token = authorization.strip().rsplit(" ", 1)[-1]
    if not token:
        return ""
    if len(token) <= 4:
        return "****"
    return "****" + token[-4:]
