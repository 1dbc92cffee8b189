r"""HTTP response classification for actions.

This module maps a received response to ``None`` (success) or to the
``HttpActionError`` describing the failure. Only ``RateLimitedError`` is
retryable; every other error ends the dispatch cycle.
"""

from __future__ import annotations

__all__ = [
    "INVALID_PAYMENT_CODE",
    "INVALID_PAYMENT_MESSAGE",
    "NEED_EMAIL_AUTHORIZE_CODE",
    "check_status_handler",
    "classify_response",
    "is_json_response",
    "is_retryable",
]

import json
import logging
from typing import TYPE_CHECKING, Any

from httption.exceptions import (
    BadRequestError,
    HandlerRejectedError,
    HttpActionError,
    InvalidPaymentError,
    NeedEmailAuthorizeError,
    RateLimitedError,
    RequestFailedError,
)

if TYPE_CHECKING:
    import httpx

    from httption.core.config import StatusHandler

logger: logging.Logger = logging.getLogger(__name__)

# Payment error codes reported in the "code" field of a 400 JSON body
INVALID_PAYMENT_CODE = 100008
NEED_EMAIL_AUTHORIZE_CODE = 100056

INVALID_PAYMENT_MESSAGE = "Invalid payment"

NEED_EMAIL_AUTHORIZE_MESSAGE = (
    "This client needs to be authorized for purchases. We've sent you an email. "
    "Click the link on the email and then retry the purchase."
)

_PAYMENT_ERRORS: dict[int, tuple[type[HttpActionError], str]] = {
    INVALID_PAYMENT_CODE: (InvalidPaymentError, INVALID_PAYMENT_MESSAGE),
    NEED_EMAIL_AUTHORIZE_CODE: (NeedEmailAuthorizeError, NEED_EMAIL_AUTHORIZE_MESSAGE),
}


def is_json_response(response: httpx.Response) -> bool:
    """Return whether the response content type is
    ``application/json``.

    Media type parameters such as ``charset`` are ignored.

    Example:
        ```pycon
        >>> import httpx
        >>> from httption.core.classify import is_json_response
        >>> is_json_response(
        ...     httpx.Response(200, headers={"content-type": "application/json; charset=utf-8"})
        ... )
        True
        >>> is_json_response(httpx.Response(200, text="hello"))
        False

        ```
    """
    content_type = response.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() == "application/json"


def is_retryable(error: Exception | None) -> bool:
    return isinstance(error, RateLimitedError)


def check_status_handler(
    handler: StatusHandler | None,
    client: Any,
    response: httpx.Response,
    method: str,
    url: str,
) -> None:
    """Evaluate the status code handler registered for the response.

    Args:
        handler: The handler registered for the response status, if any.
        client: The HTTP client passed to the handler predicate.
        response: The received response.
        method: The HTTP method, used in error messages.
        url: The requested URL, used in error messages.

    Raises:
        HandlerRejectedError: If the handler predicate returned ``True``.
    """
    if handler is None or not handler.rejects(client):
        return
    logger.debug(f"{method} request to {url}: status {response.status_code} rejected by {handler.name}")
    raise HandlerRejectedError(
        f"{method} request to {url}: status {response.status_code} rejected by handler "
        f"{handler.name!r}",
        reason=handler.name,
        method=method,
        url=url,
        status_code=response.status_code,
        response=response,
    )


def classify_response(
    response: httpx.Response,
    body: bytes,
    method: str,
    url: str,
) -> HttpActionError | None:
    """Classify an HTTP response.

    Args:
        response: The received response.
        body: The raw response body.
        method: The HTTP method, used in error messages.
        url: The requested URL, used in error messages.

    Returns:
        ``None`` for a 2xx response, otherwise the error describing the
        failure.

    Example:
        ```pycon
        >>> import httpx
        >>> from httption.core.classify import classify_response
        >>> classify_response(httpx.Response(204), b"", "GET", "https://example.com") is None
        True
        >>> classify_response(httpx.Response(429), b"", "GET", "https://example.com")
        RateLimitedError(method='GET', url='https://example.com', status_code=429, message='Too many requests')

        ```
    """
    status_code = response.status_code
    if status_code == 429:
        return RateLimitedError(
            "Too many requests",
            method=method,
            url=url,
            status_code=status_code,
            response=response,
        )

    if status_code == 400:
        return _classify_bad_request(response, body, method, url)

    if not 200 <= status_code < 300:
        text = body.decode("utf-8", errors="replace")
        return RequestFailedError(
            f"{url} status is not ok: {text}",
            body=body,
            method=method,
            url=url,
            status_code=status_code,
            response=response,
        )

    return None


def _classify_bad_request(
    response: httpx.Response,
    body: bytes,
    method: str,
    url: str,
) -> HttpActionError:
    kwargs = {"method": method, "url": url, "status_code": 400, "response": response}
    if not body:
        return BadRequestError("BadRequest noBody", body=None, **kwargs)

    try:
        payload = json.loads(body)
    except ValueError:
        logger.debug(f"{method} request to {url}: 400 response body is not JSON")
        return BadRequestError("BadRequest noBody", body=None, **kwargs)

    if isinstance(payload, dict):
        code = payload.get("code")
        # bool is an int subclass and must not match a numeric code
        if isinstance(code, int) and not isinstance(code, bool) and code in _PAYMENT_ERRORS:
            error_cls, message = _PAYMENT_ERRORS[code]
            return error_cls(message, **kwargs)
        if payload.get("message") == INVALID_PAYMENT_MESSAGE:
            return InvalidPaymentError(INVALID_PAYMENT_MESSAGE, **kwargs)

    return BadRequestError("BadRequest", body=body, **kwargs)
