r"""Configuration options for HTTP actions.

An option is a small frozen record describing one configuration change.
Options are applied in order by ``apply_options``, which stops at the
first option that fails and lets the error propagate. Options only
change configuration, they never send a request.

Example:
    ```pycon
    >>> from httption.core.config import ActionConfig
    >>> from httption.options import apply_options, with_append_headers, with_headers
    >>> config = ActionConfig(method="GET", url="https://example.com")
    >>> apply_options(
    ...     config,
    ...     [with_headers({"Accept": "text/html"}), with_append_headers({"Accept": "*/*"})],
    ... )
    >>> config.headers
    {'Accept': '*/*'}

    ```
"""

from __future__ import annotations

__all__ = [
    "AppendHeaders",
    "Option",
    "PrependHeaders",
    "RegisterStatusHandler",
    "SetBody",
    "SetHeaders",
    "SetLogger",
    "SetMaxRepeats",
    "SetProxy",
    "SetRetry",
    "apply_options",
    "merged_headers",
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

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from httption.core.config import StatusHandler
from httption.core.validation import validate_retry_params
from httption.transport import set_client_proxy

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from httption.core.config import ActionConfig


@dataclass(frozen=True)
class SetHeaders:
    """Replace all request headers."""

    headers: Mapping[str, str]


@dataclass(frozen=True)
class AppendHeaders:
    """Merge headers into the current ones; new values win on
    conflict."""

    headers: Mapping[str, str]


@dataclass(frozen=True)
class PrependHeaders:
    """Merge headers under the current ones; existing values win on
    conflict."""

    headers: Mapping[str, str]


@dataclass(frozen=True)
class SetBody:
    body: bytes


@dataclass(frozen=True)
class SetLogger:
    logger: logging.Logger | None


@dataclass(frozen=True)
class SetProxy:
    proxy: Any


@dataclass(frozen=True)
class SetRetry:
    """Change a subset of the retry policy.

    Fields left to ``None`` keep their current value.
    """

    max_retry: int | None = None
    need_repeat: bool | None = None
    retry_delay: float | None = None

    def __post_init__(self) -> None:
        validate_retry_params(max_retry=self.max_retry, retry_delay=self.retry_delay)


@dataclass(frozen=True)
class SetMaxRepeats:
    max_repeats: int | None

    def __post_init__(self) -> None:
        validate_retry_params(max_repeats=self.max_repeats)


@dataclass(frozen=True)
class RegisterStatusHandler:
    handler: StatusHandler


Option = Union[
    SetHeaders,
    AppendHeaders,
    PrependHeaders,
    SetBody,
    SetLogger,
    SetProxy,
    SetRetry,
    SetMaxRepeats,
    RegisterStatusHandler,
]


def merged_headers(*mappings: Mapping[str, str]) -> dict[str, str]:
    """Merge header mappings; later mappings win on conflict.

    Example:
        ```pycon
        >>> from httption.options import merged_headers
        >>> merged_headers({"a": "1", "b": "1"}, {"b": "2"})
        {'a': '1', 'b': '2'}

        ```
    """
    merged: dict[str, str] = {}
    for mapping in mappings:
        merged.update(mapping)
    return merged


def apply_options(
    config: ActionConfig,
    options: Iterable[Option],
    client: Any = None,
) -> None:
    """Apply options to an action configuration, in order.

    Args:
        config: The configuration to update in place.
        options: The options to apply.
        client: The HTTP client of the action, required by ``SetProxy``.

    Raises:
        TypeError: If an option is not a known option record.
        ProxyNotSupportedError: If a ``SetProxy`` option targets a client
            whose transport cannot be re-routed.

    The first failing option stops the configuration; the options that
    follow it are not applied.
    """
    for option in options:
        if isinstance(option, SetHeaders):
            config.headers = dict(option.headers)
        elif isinstance(option, AppendHeaders):
            config.headers = merged_headers(config.headers, option.headers)
        elif isinstance(option, PrependHeaders):
            config.headers = merged_headers(option.headers, config.headers)
        elif isinstance(option, SetBody):
            config.body = option.body
        elif isinstance(option, SetLogger):
            config.logger = option.logger
        elif isinstance(option, SetProxy):
            set_client_proxy(client, option.proxy)
        elif isinstance(option, SetRetry):
            if option.max_retry is not None:
                config.max_retry = option.max_retry
            if option.need_repeat is not None:
                config.need_repeat = option.need_repeat
            if option.retry_delay is not None:
                config.retry_delay = option.retry_delay
        elif isinstance(option, SetMaxRepeats):
            config.max_repeats = option.max_repeats
        elif isinstance(option, RegisterStatusHandler):
            config.status_handlers[option.handler.status_code] = option.handler
        else:
            msg = f"Unknown action option: {option!r}"
            raise TypeError(msg)


def with_headers(headers: Mapping[str, str]) -> SetHeaders:
    return SetHeaders(dict(headers))


def with_append_headers(headers: Mapping[str, str]) -> AppendHeaders:
    return AppendHeaders(dict(headers))


def with_prepend_headers(headers: Mapping[str, str]) -> PrependHeaders:
    return PrependHeaders(dict(headers))


def with_body_bytes(body: bytes) -> SetBody:
    return SetBody(bytes(body))


def with_body_string(body: str, encoding: str = "utf-8") -> SetBody:
    return SetBody(body.encode(encoding))


def with_logger(logger: logging.Logger | None) -> SetLogger:
    """Attach a logging sink to the action; ``None`` silences it."""
    return SetLogger(logger)


def with_proxy_url(proxy: Any) -> SetProxy:
    """Route the action client through ``proxy``.

    The client transport must support proxy configuration, see
    ``httption.transport.create_client``.
    """
    return SetProxy(proxy)


def with_retry(
    max_retry: int | None = None,
    need_repeat: bool | None = None,
    retry_delay: float | None = None,
) -> SetRetry:
    """Change the retry policy of the action.

    Args:
        max_retry: Maximum number of retries after a rate-limited
            attempt, or ``None`` to keep the current value.
        need_repeat: Whether a successful action must be repeated, or
            ``None`` to keep the current value.
        retry_delay: Delay in seconds between two attempts, or ``None`` to
            keep the current value.

    Raises:
        ValueError: If ``max_retry`` or ``retry_delay`` is negative.

    Example:
        ```pycon
        >>> from httption.options import with_retry
        >>> with_retry(max_retry=5)
        SetRetry(max_retry=5, need_repeat=None, retry_delay=None)

        ```
    """
    return SetRetry(max_retry=max_retry, need_repeat=need_repeat, retry_delay=retry_delay)


def with_max_retry(max_retry: int) -> SetRetry:
    return SetRetry(max_retry=max_retry)


def with_need_repeat(need_repeat: bool) -> SetRetry:
    return SetRetry(need_repeat=need_repeat)


def with_retry_delay(retry_delay: float) -> SetRetry:
    return SetRetry(retry_delay=retry_delay)


def with_max_repeats(max_repeats: int | None) -> SetMaxRepeats:
    """Bound the number of repeat cycles of one execution; ``None``
    removes the bound."""
    return SetMaxRepeats(max_repeats)


def with_status_code_handler(
    status_code: int,
    predicate: Callable[[Any], bool],
    reason: str | None = None,
) -> RegisterStatusHandler:
    """Register a handler vetoing responses with ``status_code``.

    Args:
        status_code: The HTTP status code the handler applies to.
        predicate: Called with the action client; returning ``True``
            fails the attempt with ``HandlerRejectedError``.
        reason: Optional handler name reported in the error.

    Raises:
        ValueError: If ``status_code`` is not a valid HTTP status code.
    """
    return RegisterStatusHandler(StatusHandler(status_code, predicate, reason))
