r"""httption - configurable HTTP actions with rate-limit retries.

An action is one logical HTTP request built from composable options. It
is dispatched through an ``httpx`` client, its response is classified
into a success or a typed error, rate-limited attempts are retried with
an optional fixed delay, and actions whose successful response asks for
more work are rebuilt and run again.

Key Features:
    - Options as explicit records applied in order, failing fast
    - Header set/append/prepend composition, raw or text bodies
    - Retry on 429 Too Many Requests with a bounded count and fixed delay
    - Bounded repeat mode with a fresh request for every cycle
    - Status code handlers able to veto any response
    - Typed errors for payment failures, bad requests and transport errors
    - Proxy re-routing and request/response logging transports
    - Sync (``httpx.Client``) and async (``httpx.AsyncClient``) executors

Example:
    ```pycon
    >>> import httpx
    >>> from httption import HttpAction, with_append_headers, with_retry
    >>> with httpx.Client() as client:  # doctest: +SKIP
    ...     action = HttpAction(client, "POST", "https://api.example.com/orders", name="order")
    ...     action.execute(
    ...         with_append_headers({"Content-Type": "application/json"}),
    ...         with_retry(max_retry=5, retry_delay=2.0),
    ...     )
    ...     order = action.decode_result()
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "ActionCancelledError",
    "ActionConfig",
    "ActionPhase",
    "ActionState",
    "AsyncHttpAction",
    "BadRequestError",
    "EmptyRequestError",
    "HandlerRejectedError",
    "HttpAction",
    "HttpActionError",
    "InvalidPaymentError",
    "NeedEmailAuthorizeError",
    "ProxyNotSupportedError",
    "RateLimitedError",
    "RepeatLimitExceededError",
    "RequestFailedError",
    "TransportError",
    "__version__",
    "apply_options",
    "create_async_client",
    "create_client",
    "with_append_headers",
    "with_body_bytes",
    "with_body_string",
    "with_headers",
    "with_logger",
    "with_max_repeats",
    "with_max_retry",
    "with_need_repeat",
    "with_prepend_headers",
    "with_proxy_url",
    "with_retry",
    "with_retry_delay",
    "with_status_code_handler",
]

from importlib.metadata import PackageNotFoundError, version

from httption.action import HttpAction
from httption.action_async import AsyncHttpAction
from httption.core import ActionConfig, ActionPhase, ActionState
from httption.exceptions import (
    ActionCancelledError,
    BadRequestError,
    EmptyRequestError,
    HandlerRejectedError,
    HttpActionError,
    InvalidPaymentError,
    NeedEmailAuthorizeError,
    ProxyNotSupportedError,
    RateLimitedError,
    RepeatLimitExceededError,
    RequestFailedError,
    TransportError,
)
from httption.options import (
    apply_options,
    with_append_headers,
    with_body_bytes,
    with_body_string,
    with_headers,
    with_logger,
    with_max_repeats,
    with_max_retry,
    with_need_repeat,
    with_prepend_headers,
    with_proxy_url,
    with_retry,
    with_retry_delay,
    with_status_code_handler,
)
from httption.transport import create_async_client, create_client

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
