r"""Structured logging utilities for HTTP actions.

Every log entry emitted by an action carries the ``action_name`` field.
The ``StructuredFormatter`` renders records, including those extra
fields, as one JSON object per line for log aggregation systems.

Example:
    ```python
    import logging
    from httption.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("httption")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = ["StructuredFormatter", "log_structured"]

import json
import logging
import time
from typing import Any

# Attributes every LogRecord has; anything else was passed through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 UTC timestamp
        - level: Log level name
        - logger: Logger name
        - message: Log message

    Any field added through the ``extra`` parameter of a logging call
    (``action_name``, ``attempt``, ...) is included as is. Values that
    are not JSON serializable are rendered with ``str``.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from httption.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("sending request", extra={"action_name": "login"})
        >>> '"action_name": "login"' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(  # noqa: N802
        self, record: logging.LogRecord, datefmt: str | None = None  # noqa: ARG002
    ) -> str:
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger | None,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    A ``None`` logger is a valid, silent sink.

    Args:
        logger: Logger to use, or ``None``.
        level: Log level (e.g., logging.DEBUG).
        message: Log message.
        **extra: Additional structured fields to include in the log.

    Example:
        ```pycon
        >>> import logging
        >>> from httption.structured_logging import log_structured
        >>> log_structured(None, logging.INFO, "ignored")
        >>> log_structured(logging.getLogger("httption"), logging.DEBUG, "sent", attempt=1)

        ```
    """
    if logger is None:
        return
    logger.log(level, message, extra=extra)
