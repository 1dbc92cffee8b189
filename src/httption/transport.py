r"""Transport collaborators for HTTP actions.

Actions send their requests through an ``httpx`` client. This module
provides transports that can be re-routed through a proxy after the
client was created, and transports that log every request and
response, together with helpers to build clients using them.
"""

from __future__ import annotations

__all__ = [
    "AsyncLoggingTransport",
    "AsyncProxyTransport",
    "LoggingTransport",
    "ProxyTransport",
    "SupportsProxy",
    "create_async_client",
    "create_client",
    "set_client_proxy",
]

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from httption.core.config import DEFAULT_TIMEOUT
from httption.core.validation import validate_timeout
from httption.exceptions import ProxyNotSupportedError

if TYPE_CHECKING:
    from httpx._types import ProxyTypes

logger: logging.Logger = logging.getLogger(__name__)


@runtime_checkable
class SupportsProxy(Protocol):
    """Transport whose proxy routing can be changed in place."""

    def set_proxy(self, proxy: ProxyTypes | None) -> None: ...


class ProxyTransport(httpx.BaseTransport):
    """Synchronous transport that can be re-routed through a proxy.

    The wrapped ``httpx.HTTPTransport`` is rebuilt with the new proxy
    on every ``set_proxy`` call. The previous one is closed.

    Args:
        proxy: Optional initial proxy URL.
        **kwargs: Keyword arguments passed to ``httpx.HTTPTransport``
            (e.g. ``verify``, ``retries``).

    Example:
        ```pycon
        >>> import httpx
        >>> from httption.transport import ProxyTransport
        >>> transport = ProxyTransport()
        >>> transport.set_proxy("http://localhost:8080")
        >>> transport.proxy
        'http://localhost:8080'

        ```
    """

    def __init__(self, proxy: ProxyTypes | None = None, **kwargs: Any) -> None:
        self._kwargs = kwargs
        self.proxy = proxy
        self._transport = httpx.HTTPTransport(proxy=proxy, **kwargs)

    def set_proxy(self, proxy: ProxyTypes | None) -> None:
        logger.debug(f"Routing transport through proxy {proxy}")
        previous = self._transport
        self._transport = httpx.HTTPTransport(proxy=proxy, **self._kwargs)
        self.proxy = proxy
        previous.close()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        self._transport.close()


class AsyncProxyTransport(httpx.AsyncBaseTransport):
    """Asynchronous version of ``ProxyTransport``.

    The previous transport is not closed by ``set_proxy`` since closing
    it requires awaiting; it is released when garbage collected.
    """

    def __init__(self, proxy: ProxyTypes | None = None, **kwargs: Any) -> None:
        self._kwargs = kwargs
        self.proxy = proxy
        self._transport = httpx.AsyncHTTPTransport(proxy=proxy, **kwargs)

    def set_proxy(self, proxy: ProxyTypes | None) -> None:
        logger.debug(f"Routing async transport through proxy {proxy}")
        self._transport = httpx.AsyncHTTPTransport(proxy=proxy, **self._kwargs)
        self.proxy = proxy

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


def _describe_request(request: httpx.Request) -> str:
    lines = [f"{request.method} {request.url}"]
    lines.extend(f"{key}: {value}" for key, value in request.headers.items())
    try:
        content = request.content
    except httpx.RequestNotRead:
        content = b"<streaming body>"
    return "\n".join(lines) + "\n\n" + content.decode("utf-8", errors="replace")


def _describe_response(response: httpx.Response, body: bytes) -> str:
    lines = [f"HTTP {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{key}: {value}" for key, value in response.headers.items())
    return "\n".join(lines) + "\n\n" + body.decode("utf-8", errors="replace")


def _replay_response(response: httpx.Response, body: bytes) -> httpx.Response:
    return httpx.Response(
        status_code=response.status_code,
        headers=response.headers,
        content=body,
        extensions=response.extensions,
    )


def _set_wrapped_proxy(wrapped: Any, proxy: ProxyTypes | None) -> None:
    if not isinstance(wrapped, SupportsProxy):
        msg = (
            f"cannot set proxy because transport {type(wrapped).__name__} does not "
            "support proxy configuration"
        )
        raise ProxyNotSupportedError(msg)
    wrapped.set_proxy(proxy)


class LoggingTransport(httpx.BaseTransport):
    """Synchronous transport logging requests and responses.

    Requests and responses are dumped at DEBUG level; transport errors
    are logged at ERROR level and re-raised.

    Args:
        transport: The wrapped transport.
        logger: The logger receiving the dumps. Defaults to this
            module logger.
    """

    def __init__(
        self, transport: httpx.BaseTransport, logger: logging.Logger | None = None
    ) -> None:
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    def set_proxy(self, proxy: ProxyTypes | None) -> None:
        _set_wrapped_proxy(self.transport, proxy)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.logger.debug(f"HttpClient sending request\n{_describe_request(request)}")
        try:
            response = self.transport.handle_request(request)
        except httpx.HTTPError as exc:
            self.logger.error(f"HttpClient transport error: {exc!r}")
            raise
        try:
            body = response.read()
        finally:
            response.close()
        self.logger.debug(f"HttpClient received response\n{_describe_response(response, body)}")
        return _replay_response(response, body)

    def close(self) -> None:
        self.transport.close()


class AsyncLoggingTransport(httpx.AsyncBaseTransport):
    """Asynchronous version of ``LoggingTransport``."""

    def __init__(
        self, transport: httpx.AsyncBaseTransport, logger: logging.Logger | None = None
    ) -> None:
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    def set_proxy(self, proxy: ProxyTypes | None) -> None:
        _set_wrapped_proxy(self.transport, proxy)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.logger.debug(f"HttpClient sending request\n{_describe_request(request)}")
        try:
            response = await self.transport.handle_async_request(request)
        except httpx.HTTPError as exc:
            self.logger.error(f"HttpClient transport error: {exc!r}")
            raise
        try:
            body = await response.aread()
        finally:
            await response.aclose()
        self.logger.debug(f"HttpClient received response\n{_describe_response(response, body)}")
        return _replay_response(response, body)

    async def aclose(self) -> None:
        await self.transport.aclose()


def create_client(
    proxy: ProxyTypes | None = None,
    *,
    verify: bool = True,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> httpx.Client:
    """Create an ``httpx.Client`` whose proxy can be changed by actions.

    Args:
        proxy: Optional initial proxy URL.
        verify: Whether to verify TLS certificates.
        timeout: Timeout of the client.
        logger: If provided, requests and responses are logged to it
            through a ``LoggingTransport``.
        **kwargs: Additional keyword arguments passed to ``httpx.Client``.

    Returns:
        The configured client.

    Example:
        ```pycon
        >>> from httption.transport import create_client
        >>> with create_client(timeout=30.0) as client:  # doctest: +SKIP
        ...     response = client.get("https://api.example.com/data")
        ...

        ```
    """
    validate_timeout(timeout)
    transport: httpx.BaseTransport = ProxyTransport(proxy=proxy, verify=verify)
    if logger is not None:
        transport = LoggingTransport(transport, logger)
    return httpx.Client(transport=transport, timeout=timeout, **kwargs)


def create_async_client(
    proxy: ProxyTypes | None = None,
    *,
    verify: bool = True,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` whose proxy can be changed by
    actions.

    See ``create_client`` for the arguments.
    """
    validate_timeout(timeout)
    transport: httpx.AsyncBaseTransport = AsyncProxyTransport(proxy=proxy, verify=verify)
    if logger is not None:
        transport = AsyncLoggingTransport(transport, logger)
    return httpx.AsyncClient(transport=transport, timeout=timeout, **kwargs)


def set_client_proxy(client: httpx.Client | httpx.AsyncClient, proxy: ProxyTypes | None) -> None:
    """Route all further requests of ``client`` through ``proxy``.

    Args:
        client: A client created by ``create_client`` or
            ``create_async_client``, or any client whose transport
            implements ``set_proxy``.
        proxy: The proxy URL, or ``None`` to disable the proxy.

    Raises:
        ProxyNotSupportedError: If the client transport cannot be
            re-routed.
    """
    # httpx does not expose the default transport of a client publicly
    _set_wrapped_proxy(getattr(client, "_transport", None), proxy)
