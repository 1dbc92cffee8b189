r"""Exceptions raised while configuring and executing HTTP actions.

Every error derives from ``HttpActionError`` so callers can catch the
whole family at once, while the concrete subclasses let them react to a
specific failure (e.g. ask the user to confirm a payment by email when
``NeedEmailAuthorizeError`` is raised).
"""

from __future__ import annotations

__all__ = [
    "ActionCancelledError",
    "BadRequestError",
    "EmptyRequestError",
    "HandlerRejectedError",
    "HttpActionError",
    "InvalidPaymentError",
    "InvalidTransitionError",
    "NeedEmailAuthorizeError",
    "PaymentError",
    "ProxyNotSupportedError",
    "RateLimitedError",
    "RepeatLimitExceededError",
    "RequestFailedError",
    "ResultDecodeError",
    "TransportError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class HttpActionError(Exception):
    """Base class of all errors raised by an HTTP action.

    Args:
        message: Human readable description of the failure.
        method: The HTTP method of the action, if known.
        url: The requested URL, if known.
        status_code: The HTTP status code of the response, if any.
        response: The ``httpx.Response`` that caused the error, if any.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from httption.exceptions import HttpActionError
        >>> error = HttpActionError("boom", method="GET", url="https://example.com")
        >>> error.method, error.url
        ('GET', 'https://example.com')
        >>> str(error)
        'boom'

        ```
    """

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response = response
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(method={self.method!r}, url={self.url!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class TransportError(HttpActionError):
    """Raised when the request never produced a response (connection,
    DNS, TLS or timeout failure).

    Transport errors are terminal, they are never retried.
    """


class RateLimitedError(HttpActionError):
    """Raised when the server answered ``429 Too Many Requests``.

    This is the only retryable error.
    """


class PaymentError(HttpActionError):
    """Base class of the payment related ``400 Bad Request`` errors."""


class InvalidPaymentError(PaymentError):
    """Raised when the server rejected the payment as invalid."""


class NeedEmailAuthorizeError(PaymentError):
    """Raised when the client must be authorized for purchases by email
    before retrying."""


class BadRequestError(HttpActionError):
    """Raised on a ``400 Bad Request`` that is not a known payment error.

    Args:
        body: The raw response body, or ``None`` when the response had no
            usable body.
    """

    def __init__(self, message: str, *, body: bytes | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.body = body

    @property
    def has_body(self) -> bool:
        return self.body is not None


class RequestFailedError(HttpActionError):
    """Raised on any other non-2xx response.

    Args:
        body: The raw response body, kept for diagnostics.
    """

    def __init__(self, message: str, *, body: bytes = b"", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.body = body


class EmptyRequestError(HttpActionError):
    """Raised when an attempt is dispatched before the request was
    built."""


class HandlerRejectedError(HttpActionError):
    """Raised when a status code handler vetoed the response.

    Args:
        reason: The name of the handler that rejected the response.
    """

    def __init__(self, message: str, *, reason: str | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason


class RepeatLimitExceededError(HttpActionError):
    """Raised when an action asked to be repeated more often than its
    ``max_repeats`` bound allows."""


class ActionCancelledError(HttpActionError):
    """Raised when the cancel event of an action was set."""


class ProxyNotSupportedError(HttpActionError):
    """Raised when the client transport cannot be routed through a
    proxy."""


class ResultDecodeError(HttpActionError):
    """Raised when a JSON response body cannot be decoded."""


class InvalidTransitionError(HttpActionError):
    """Raised on an illegal action lifecycle transition."""
