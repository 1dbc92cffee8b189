r"""Core shared logic for sync and async HTTP actions.

This module contains functionality shared by ``HttpAction`` and
``AsyncHttpAction``: configuration, validation, lifecycle state and
response classification.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_REPEATS",
    "DEFAULT_MAX_RETRY",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_TIMEOUT",
    "ActionConfig",
    "ActionPhase",
    "ActionState",
    "StatusHandler",
    "classify_response",
    "is_json_response",
    "is_retryable",
    "validate_retry_params",
    "validate_timeout",
]

from httption.core.classify import classify_response, is_json_response, is_retryable
from httption.core.config import (
    DEFAULT_MAX_REPEATS,
    DEFAULT_MAX_RETRY,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    ActionConfig,
    StatusHandler,
)
from httption.core.state import ActionPhase, ActionState
from httption.core.validation import validate_retry_params, validate_timeout
