r"""Unit tests for the proxy and logging transports."""

from __future__ import annotations

import logging
from unittest.mock import Mock, patch

import httpx
import pytest

from httption.exceptions import ProxyNotSupportedError
from httption.transport import (
    AsyncLoggingTransport,
    AsyncProxyTransport,
    LoggingTransport,
    ProxyTransport,
    SupportsProxy,
    create_async_client,
    create_client,
    set_client_proxy,
)
from tests.helpers import TEST_URL

####################################
#     Tests for ProxyTransport     #
####################################


def test_proxy_transport_supports_proxy() -> None:
    assert isinstance(ProxyTransport(), SupportsProxy)
    assert isinstance(AsyncProxyTransport(), SupportsProxy)


def test_proxy_transport_set_proxy() -> None:
    transport = ProxyTransport(verify=False)
    previous = transport._transport
    with patch.object(previous, "close") as close:
        transport.set_proxy("http://localhost:8080")

    assert transport.proxy == "http://localhost:8080"
    assert transport._transport is not previous
    close.assert_called_once_with()
    transport.close()


def test_proxy_transport_delegates_requests() -> None:
    transport = ProxyTransport()
    response = httpx.Response(200)
    with patch.object(transport._transport, "handle_request", return_value=response) as handle:
        request = httpx.Request("GET", TEST_URL)
        assert transport.handle_request(request) is response
    handle.assert_called_once_with(request)


def test_async_proxy_transport_set_proxy() -> None:
    transport = AsyncProxyTransport()
    previous = transport._transport
    transport.set_proxy("http://localhost:8080")
    assert transport.proxy == "http://localhost:8080"
    assert transport._transport is not previous


######################################
#     Tests for LoggingTransport     #
######################################


def test_logging_transport_logs_and_replays(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test_logging_transport")
    inner = httpx.MockTransport(lambda request: httpx.Response(201, text="created"))
    with (
        caplog.at_level(logging.DEBUG, logger="test_logging_transport"),
        httpx.Client(transport=LoggingTransport(inner, logger)) as client,
    ):
        response = client.post(TEST_URL, content=b"payload", headers={"X-Token": "abc"})

    assert response.status_code == 201
    assert response.text == "created"
    messages = [record.getMessage() for record in caplog.records]
    assert len(messages) == 2
    assert messages[0].startswith(f"HttpClient sending request\nPOST {TEST_URL}")
    assert "x-token: abc" in messages[0]
    assert messages[0].endswith("payload")
    assert messages[1].startswith("HttpClient received response\nHTTP 201 Created")
    assert messages[1].endswith("created")


def test_logging_transport_logs_errors(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test_logging_transport_errors")
    inner = httpx.MockTransport(Mock(side_effect=httpx.ConnectError("unreachable")))
    with (
        caplog.at_level(logging.ERROR, logger="test_logging_transport_errors"),
        httpx.Client(transport=LoggingTransport(inner, logger)) as client,
        pytest.raises(httpx.ConnectError),
    ):
        client.get(TEST_URL)

    assert len(caplog.records) == 1
    assert "HttpClient transport error" in caplog.records[0].getMessage()


def test_logging_transport_set_proxy_delegates() -> None:
    inner = Mock(spec=["set_proxy", "handle_request", "close"])
    LoggingTransport(inner).set_proxy("http://proxy:3128")
    inner.set_proxy.assert_called_once_with("http://proxy:3128")


def test_logging_transport_set_proxy_unsupported() -> None:
    transport = LoggingTransport(httpx.MockTransport(Mock()))
    with pytest.raises(ProxyNotSupportedError, match=r"MockTransport does not support proxy"):
        transport.set_proxy("http://proxy:3128")


@pytest.mark.asyncio
async def test_async_logging_transport_logs_and_replays(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test_async_logging_transport")
    inner = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
    with caplog.at_level(logging.DEBUG, logger="test_async_logging_transport"):
        async with httpx.AsyncClient(transport=AsyncLoggingTransport(inner, logger)) as client:
            response = await client.get(TEST_URL)

    assert response.text == "ok"
    assert len(caplog.records) == 2


###################################
#     Tests for create_client     #
###################################


def test_create_client_uses_proxy_transport() -> None:
    with create_client(timeout=30.0) as client:
        assert isinstance(client._transport, ProxyTransport)
        assert client.timeout == httpx.Timeout(30.0)


def test_create_client_with_logger() -> None:
    with create_client(logger=logging.getLogger("test_create_client")) as client:
        assert isinstance(client._transport, LoggingTransport)
        assert isinstance(client._transport.transport, ProxyTransport)


def test_create_client_with_initial_proxy() -> None:
    with create_client(proxy="http://localhost:8080") as client:
        assert client._transport.proxy == "http://localhost:8080"


def test_create_client_rejects_invalid_timeout() -> None:
    with pytest.raises(ValueError, match=r"timeout must be > 0, got 0"):
        create_client(timeout=0)


@pytest.mark.asyncio
async def test_create_async_client_uses_proxy_transport() -> None:
    async with create_async_client(logger=logging.getLogger("test_create_async")) as client:
        assert isinstance(client._transport, AsyncLoggingTransport)
        assert isinstance(client._transport.transport, AsyncProxyTransport)


######################################
#     Tests for set_client_proxy     #
######################################


def test_set_client_proxy() -> None:
    with create_client(logger=logging.getLogger("test_set_client_proxy")) as client:
        set_client_proxy(client, "http://localhost:8080")
        assert client._transport.transport.proxy == "http://localhost:8080"


def test_set_client_proxy_unsupported_transport() -> None:
    with httpx.Client(transport=httpx.MockTransport(Mock())) as client, pytest.raises(
        ProxyNotSupportedError, match=r"does not support proxy configuration"
    ):
        set_client_proxy(client, "http://localhost:8080")
