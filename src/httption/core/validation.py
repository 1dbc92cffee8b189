r"""Parameter validation utilities for HTTP actions.

This module provides validation functions for the retry and repeat
parameters of an action, so that invalid values are rejected when the
configuration is applied rather than in the middle of a dispatch loop.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_status_code", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from httption.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(
    max_retry: int | None = None,
    retry_delay: float | None = None,
    max_repeats: int | None = None,
) -> None:
    """Validate retry and repeat parameters.

    ``None`` means the parameter is not being set and is not checked.

    Args:
        max_retry: Maximum number of retries after a rate-limited
            attempt. Must be >= 0. A value of 0 disables retries.
        retry_delay: Fixed delay in seconds between two attempts.
            Must be >= 0. A value of 0 retries immediately.
        max_repeats: Maximum number of repeat cycles. Must be >= 0.

    Raises:
        ValueError: If any parameter is negative.

    Example:
        ```pycon
        >>> from httption.core.validation import validate_retry_params
        >>> validate_retry_params(max_retry=3, retry_delay=0.5)
        >>> validate_retry_params(max_retry=-1)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: max_retry must be >= 0, got -1

        ```
    """
    if max_retry is not None and max_retry < 0:
        msg = f"max_retry must be >= 0, got {max_retry}"
        raise ValueError(msg)
    if retry_delay is not None and retry_delay < 0:
        msg = f"retry_delay must be >= 0, got {retry_delay}"
        raise ValueError(msg)
    if max_repeats is not None and max_repeats < 0:
        msg = f"max_repeats must be >= 0, got {max_repeats}"
        raise ValueError(msg)


def validate_status_code(status_code: int) -> None:
    """Validate that ``status_code`` is a valid HTTP status code.

    Raises:
        ValueError: If the status code is outside [100, 600).
    """
    if not 100 <= status_code < 600:
        msg = f"status_code must be in [100, 600), got {status_code}"
        raise ValueError(msg)
