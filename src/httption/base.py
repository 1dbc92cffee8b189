r"""Shared logic of the synchronous and asynchronous HTTP actions.

``BaseAction`` owns everything that does not perform I/O: option
application, request construction, response classification, lifecycle
state transitions and result accessors. ``HttpAction`` and
``AsyncHttpAction`` only add the send, wait and loop parts.
"""

from __future__ import annotations

__all__ = ["BaseAction"]

import json
import logging
from typing import TYPE_CHECKING, Any, NoReturn

import httpx

from httption.core.classify import (
    check_status_handler,
    classify_response,
    is_json_response,
    is_retryable,
)
from httption.core.config import ActionConfig
from httption.core.state import ActionPhase, ActionState
from httption.exceptions import (
    ActionCancelledError,
    EmptyRequestError,
    HandlerRejectedError,
    HttpActionError,
    RepeatLimitExceededError,
    ResultDecodeError,
    TransportError,
)
from httption.options import apply_options
from httption.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from httption.options import Option


class BaseAction:
    """Base class of HTTP actions.

    An action is one logical HTTP request together with its retry and
    repeat policy and its outcome. It is configured by options, executed
    (possibly over several attempts and repeat cycles), then read through
    ``last_error``, ``raw_response`` and ``decode_result``.

    Args:
        client: The HTTP client sending the request.
        method: The HTTP method (e.g. "GET", "POST").
        url: The target URL.
        name: Human readable name used in log entries.
        cancel_event: Optional event aborting the execution when set.

    Note:
        An action is not designed for concurrent use; callers must
        serialize access to a single instance.
    """

    def __init__(
        self,
        client: httpx.Client | httpx.AsyncClient,
        method: str,
        url: str,
        *,
        name: str | None = None,
        cancel_event: Any = None,
    ) -> None:
        self.client = client
        self.config = ActionConfig(method=method, url=str(url))
        self.cancel_event = cancel_event
        self._name = name if name is not None else type(self).__name__
        self._state = ActionState()
        self._request: httpx.Request | None = None
        self._response: httpx.Response | None = None
        self._body: bytes | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self._name!r}, method={self.config.method!r}, "
            f"url={self.config.url!r}, phase={self._state.phase.value!r})"
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> ActionState:
        return self._state

    @property
    def request(self) -> httpx.Request | None:
        return self._request

    @property
    def response(self) -> httpx.Response | None:
        return self._response

    @property
    def last_error(self) -> Exception | None:
        """The error of the most recent attempt, ``None`` after a
        success."""
        return self._state.error

    @property
    def raw_response(self) -> bytes | None:
        """The raw body of the most recent response."""
        return self._body

    @property
    def needs_repeat(self) -> bool:
        return self.config.need_repeat

    @needs_repeat.setter
    def needs_repeat(self, value: bool) -> None:
        self.config.need_repeat = value

    def configure(self, *options: Option) -> None:
        """Apply ``options`` then build the request if it was not built
        yet.

        Once the request is built, further options change the template
        but not the built request, until a repeat rebuilds it.

        Raises:
            HttpActionError: If an option fails; the options after it are
                not applied.
        """
        self._log(logging.DEBUG, "action configure")
        try:
            apply_options(self.config, options, self.client)
            if self._request is None:
                self._request = self._build_request()
        except Exception as exc:
            self._log(logging.ERROR, "action configure failed", error=repr(exc))
            self._state = self._state.record(exc)
            raise
        if self._state.phase is not ActionPhase.CONFIGURED:
            self._state = self._state.to(ActionPhase.CONFIGURED)

    def inspect_response(self, response: httpx.Response) -> None:
        """Hook called with every successful response.

        Subclasses set ``needs_repeat`` here when a response means the
        action must run again.
        """

    def decode_result(self, into: MutableMapping[str, Any] | None = None) -> Any:
        """Decode the JSON body of the last response.

        Args:
            into: Optional mapping updated in place with the decoded JSON
                object.

        Returns:
            The decoded JSON value, or ``None`` if there is no body or the
            response is not ``application/json`` (``into`` is then left
            untouched).

        Raises:
            ResultDecodeError: If the JSON body is malformed.
        """
        if not self._body or self._response is None or not is_json_response(self._response):
            return None
        try:
            payload = json.loads(self._body)
        except ValueError as exc:
            raise ResultDecodeError(
                f"cannot decode the JSON response of {self.config.url}: {exc}",
                method=self.config.method,
                url=self.config.url,
                status_code=self._response.status_code,
                response=self._response,
                cause=exc,
            ) from exc
        if into is not None and isinstance(payload, dict):
            into.update(payload)
        return payload

    def _build_request(self) -> httpx.Request:
        return self.client.build_request(
            self.config.method,
            self.config.url,
            headers=self.config.headers,
            content=self.config.body,
        )

    def _start_run(self, force_rebuild: bool, options: tuple[Option, ...]) -> None:
        if force_rebuild:
            self._request = None
        self.configure(*options)
        self._state = self._state.new_cycle(repeat=False)

    def _start_attempt(self, cancel_event: Any) -> HttpActionError | None:
        if self._state.is_terminal:
            self._state = self._state.new_cycle(repeat=False)
        self._state = self._state.start_attempt()
        self._log(logging.DEBUG, "do action", attempt=self._state.attempt)
        if cancel_event is not None and cancel_event.is_set():
            return self._cancelled_error()
        if self._request is None:
            return EmptyRequestError(
                "action request is empty, configure the action before dispatching it",
                method=self.config.method,
                url=self.config.url,
            )
        return None

    def _transport_failed(self, exc: httpx.RequestError) -> TransportError:
        self._response = None
        self._body = None
        error = TransportError(
            f"{self.config.method} request to {self.config.url} failed: {exc!r}",
            method=self.config.method,
            url=self.config.url,
            cause=exc,
        )
        error.__cause__ = exc
        return error

    def _handle_response(self, response: httpx.Response) -> HttpActionError | None:
        try:
            return self._classify_attempt(response)
        except Exception as exc:
            self._abort(exc)
            raise

    def _classify_attempt(self, response: httpx.Response) -> HttpActionError | None:
        self._response = response
        self._body = response.content
        self._log(logging.DEBUG, "response received", status_code=response.status_code)
        method, url = self.config.method, self.config.url
        try:
            check_status_handler(
                self.config.find_handler(response.status_code),
                self.client,
                response,
                method,
                url,
            )
        except HandlerRejectedError as exc:
            return exc
        error = classify_response(response, self._body, method, url)
        if error is None:
            self.inspect_response(response)
            self._log(logging.DEBUG, "response handled")
        return error

    def _conclude_attempt(self, error: HttpActionError | None) -> bool:
        """Record the outcome of an attempt.

        Returns:
            ``True`` if the attempt must be retried, ``False`` on success.

        Raises:
            HttpActionError: The terminal error of the attempt.
        """
        if error is None:
            self._state = self._state.succeed()
            return False
        if is_retryable(error) and self._state.attempt <= self.config.max_retry:
            self._log(
                logging.DEBUG,
                "retryable action error",
                attempt=self._state.attempt,
                max_retry=self.config.max_retry,
                error=repr(error),
            )
            self._state = self._state.wait_retry(error)
            return True
        self._fail(error)

    def _prepare_repeat(self) -> None:
        """Discard the built request and start a repeat cycle with a
        fresh one.

        Raises:
            RepeatLimitExceededError: If the repeat bound is reached.
        """
        max_repeats = self.config.max_repeats
        if max_repeats is not None and self._state.repeats >= max_repeats:
            self._fail(
                RepeatLimitExceededError(
                    f"action {self._name!r} was repeated {self._state.repeats} times "
                    f"(max_repeats={max_repeats})",
                    method=self.config.method,
                    url=self.config.url,
                )
            )
        self._log(logging.DEBUG, "action repeat", repeats=self._state.repeats + 1)
        self._state = self._state.new_cycle(repeat=True)
        self._request = None
        try:
            self._request = self._build_request()
        except Exception as exc:
            self._state = self._state.record(exc)
            raise

    def _cancelled_error(self) -> ActionCancelledError:
        return ActionCancelledError(
            f"action {self._name!r} was cancelled",
            method=self.config.method,
            url=self.config.url,
        )

    def _abort(self, exc: Exception) -> None:
        """Fail the current attempt on an exception raised by caller code
        (status handler, ``inspect_response`` or client), which the
        caller re-raises."""
        self._state = self._state.fail(exc)
        self._log(logging.ERROR, "action aborted", error=repr(exc))

    def _fail(self, error: HttpActionError) -> NoReturn:
        self._state = self._state.fail(error)
        self._log(logging.ERROR, "action failed", error=repr(error))
        raise error

    def _log(self, level: int, message: str, **extra: Any) -> None:
        log_structured(self.config.logger, level, message, action_name=self._name, **extra)
