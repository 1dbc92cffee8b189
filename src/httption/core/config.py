r"""Configuration dataclasses and defaults for HTTP actions.

This module provides configuration constants and the ``ActionConfig``
dataclass holding the request template, the retry and repeat policy and
the status code handler table of one action. Options mutate an
``ActionConfig``; the executors only read it.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_REPEATS",
    "DEFAULT_MAX_RETRY",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_TIMEOUT",
    "ActionConfig",
    "StatusHandler",
]

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from httption.core.validation import validate_retry_params, validate_status_code

if TYPE_CHECKING:
    from collections.abc import Callable


# Default timeout in seconds for clients created by httption.transport
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retries after a rate-limited attempt
# Total attempts = max_retry + 1 (initial attempt)
DEFAULT_MAX_RETRY = 0

# Default fixed delay in seconds between two attempts (0 = immediate)
DEFAULT_RETRY_DELAY = 0.0

# Default bound on the number of repeat cycles of one execution
# None disables the bound
DEFAULT_MAX_REPEATS = 100


@dataclass(frozen=True)
class StatusHandler:
    """A status code handler registered on an action.

    The predicate is called with the HTTP client of the action when a
    response with ``status_code`` is received. If it returns ``True``
    the attempt fails with ``HandlerRejectedError``, whatever the normal
    classification of the status would be.

    Args:
        status_code: The HTTP status code the handler applies to.
        predicate: Callable receiving the client and returning whether
            the response must be rejected.
        reason: Optional name reported in the rejection error. Defaults
            to the predicate name.

    Example:
        ```pycon
        >>> from httption.core.config import StatusHandler
        >>> handler = StatusHandler(200, lambda client: True, reason="maintenance")
        >>> handler.rejects(None)
        True

        ```
    """

    status_code: int
    predicate: Callable[[Any], bool]
    reason: str | None = None

    def __post_init__(self) -> None:
        validate_status_code(self.status_code)

    @property
    def name(self) -> str:
        if self.reason is not None:
            return self.reason
        return getattr(self.predicate, "__name__", repr(self.predicate))

    def rejects(self, client: Any) -> bool:
        """Evaluate the handler against ``client``."""
        return bool(self.predicate(client))


@dataclass
class ActionConfig:
    """Configuration of one HTTP action.

    Args:
        method: The HTTP method (e.g. "GET", "POST").
        url: The target URL.
        headers: The request headers. Keys are unique, the last write
            wins.
        body: Optional raw request body.
        logger: The logging sink of the action. ``None`` silences the
            action.
        max_retry: Maximum number of retries after a rate-limited attempt.
            Must be >= 0. 0 disables retries.
        retry_delay: Fixed delay in seconds between attempts. Must be >= 0.
        need_repeat: Whether the action must be rebuilt and executed
            again after a successful dispatch.
        max_repeats: Maximum number of repeat cycles per execution, or
            ``None`` for no bound. Must be >= 0.
        status_handlers: Handlers indexed by status code.

    Example:
        ```pycon
        >>> from httption.core.config import ActionConfig
        >>> config = ActionConfig(method="GET", url="https://example.com")
        >>> config.max_retry, config.retry_delay, config.need_repeat
        (0, 0.0, False)

        ```
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    logger: logging.Logger | None = field(default_factory=lambda: logging.getLogger("httption"))
    max_retry: int = DEFAULT_MAX_RETRY
    retry_delay: float = DEFAULT_RETRY_DELAY
    need_repeat: bool = False
    max_repeats: int | None = DEFAULT_MAX_REPEATS
    status_handlers: dict[int, StatusHandler] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any retry parameter fails validation.
        """
        self.method = self.method.upper()
        validate_retry_params(
            max_retry=self.max_retry,
            retry_delay=self.retry_delay,
            max_repeats=self.max_repeats,
        )

    def find_handler(self, status_code: int) -> StatusHandler | None:
        return self.status_handlers.get(status_code)
