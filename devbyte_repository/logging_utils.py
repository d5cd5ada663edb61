"""
Logging helpers for services embedding the repository.

``configure_logging`` attaches one handler to the package logger. In
structured mode every record is a single JSON line; the repository context
(``store``, ``source_url``, ``count``) appears as top-level keys and any
other extras are grouped under ``extra``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

PACKAGE_LOGGER = "devbyte_repository"

# Context attached by VideosRepository, promoted to top-level JSON keys
CONTEXT_FIELDS = ("store", "source_url", "count")

_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats records as single-line JSON.

    Keys: ``timestamp`` (UTC, ISO 8601), ``level``, ``logger``, ``message``,
    the repository context fields when present, ``extra`` for any other
    user-supplied attributes, and ``exception`` when ``exc_info`` is set.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_obj[field] = _jsonable(getattr(record, field))

        extra = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
            and key not in CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            log_obj["extra"] = extra

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def configure_logging(
    level: int = logging.INFO,
    structured: bool = True,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Send package logs to ``stream`` (stdout by default).

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Level for the package logger
        structured: JSON lines when True, plain text otherwise
        stream: Output stream

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    if structured:
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


class RepositoryLoggerAdapter(logging.LoggerAdapter):
    """Tags every record with a repository's store and source URL."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
