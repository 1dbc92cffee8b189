r"""Synchronous HTTP action executor.

This module provides ``HttpAction``, which builds one HTTP request from
options, sends it through an ``httpx.Client``, classifies the response,
retries rate-limited attempts and repeats the whole action while a
successful response asks for it.
"""

from __future__ import annotations

__all__ = ["HttpAction"]

import logging
import time
from typing import TYPE_CHECKING

import httpx

from httption.base import BaseAction

if TYPE_CHECKING:
    import threading

    from httption.exceptions import HttpActionError
    from httption.options import Option

logger: logging.Logger = logging.getLogger(__name__)


class HttpAction(BaseAction):
    r"""Synchronous HTTP action.

    Lifecycle::

        unconfigured -> configured -> dispatching -> succeeded | retry-wait | failed
                                          ^              |           |
                                          |              v           |
                                          +----- (repeat) <----------+

    Only ``RateLimitedError`` (HTTP 429) is retried, at most
    ``max_retry`` times, waiting ``retry_delay`` seconds between
    attempts. The built request is reused across retries. When a
    successful response leaves ``needs_repeat`` set, the request is
    rebuilt from the template and the action runs again, at most
    ``max_repeats`` times.

    Args:
        client: The ``httpx.Client`` sending the request.
        method: The HTTP method (e.g. "GET", "POST").
        url: The target URL.
        name: Human readable name used in log entries. Defaults to the
            class name.
        cancel_event: Optional ``threading.Event``; once set, the next
            attempt or retry delay raises ``ActionCancelledError``.

    Example:
        ```pycon
        >>> import httpx
        >>> from httption import HttpAction, with_headers, with_retry
        >>> with httpx.Client() as client:  # doctest: +SKIP
        ...     action = HttpAction(client, "GET", "https://api.example.com/data", name="data")
        ...     action.execute(
        ...         with_headers({"Accept": "application/json"}),
        ...         with_retry(max_retry=5, retry_delay=2.0),
        ...     )
        ...     result = action.decode_result()
        ...

        ```
    """

    client: httpx.Client

    def __init__(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        *,
        name: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        super().__init__(client, method, url, name=name, cancel_event=cancel_event)

    def execute(self, *options: Option, cancel_event: threading.Event | None = None) -> None:
        """Configure the action then run it with the retry and repeat
        protocol.

        Args:
            *options: Options applied before the request is built.
            cancel_event: Optional event overriding the one given to the
                constructor for this execution.

        Raises:
            HttpActionError: The terminal error of the execution. It is
                also available afterwards as ``last_error``.
        """
        self._log(logging.DEBUG, "action execute")
        self._start_run(False, options)
        self._run(self._resolve_cancel_event(cancel_event))

    def repeat(
        self,
        force_reconfigure: bool = False,
        *options: Option,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Run a completed action again.

        Args:
            force_reconfigure: If ``True`` the built request is discarded
                and rebuilt from the current template; otherwise the
                existing request is sent again.
            *options: Options applied before the run.
            cancel_event: Optional event overriding the one given to the
                constructor for this run.

        Raises:
            HttpActionError: The terminal error of the run.
        """
        self._log(logging.DEBUG, "action repeat requested", force_reconfigure=force_reconfigure)
        self._start_run(force_reconfigure, options)
        self._run(self._resolve_cancel_event(cancel_event))

    def dispatch(self, cancel_event: threading.Event | None = None) -> None:
        """Send a single attempt, without retry or repeat.

        Raises:
            EmptyRequestError: If the action was never configured.
            HttpActionError: If the attempt failed, including
                ``RateLimitedError``.
        """
        error = self._attempt(self._resolve_cancel_event(cancel_event))
        if error is not None:
            self._fail(error)
        self._conclude_attempt(None)

    def _resolve_cancel_event(
        self, cancel_event: threading.Event | None
    ) -> threading.Event | None:
        return cancel_event if cancel_event is not None else self.cancel_event

    def _run(self, cancel_event: threading.Event | None) -> None:
        while True:
            self._dispatch_with_retry(cancel_event)
            if not self.needs_repeat:
                return
            self._prepare_repeat()

    def _dispatch_with_retry(self, cancel_event: threading.Event | None) -> None:
        while self._conclude_attempt(self._attempt(cancel_event)):
            self._wait(self.config.retry_delay, cancel_event)

    def _attempt(self, cancel_event: threading.Event | None) -> HttpActionError | None:
        error = self._start_attempt(cancel_event)
        if error is not None:
            return error
        self._log(logging.DEBUG, "sending request")
        try:
            response = self.client.send(self._request)
        except httpx.RequestError as exc:
            logger.debug(f"{self.config.method} request to {self.config.url} failed: {exc!r}")
            return self._transport_failed(exc)
        except Exception as exc:
            self._abort(exc)
            raise
        return self._handle_response(response)

    def _wait(self, delay: float, cancel_event: threading.Event | None) -> None:
        if delay <= 0:
            return
        self._log(logging.DEBUG, "waiting before retry", delay=delay)
        if cancel_event is None:
            time.sleep(delay)
        elif cancel_event.wait(delay):
            self._fail(self._cancelled_error())
