r"""Asynchronous HTTP action executor.

This module provides ``AsyncHttpAction``, the ``httpx.AsyncClient``
counterpart of ``HttpAction``. The retry and repeat protocol is the
same; waits use ``asyncio.sleep`` so the execution can also be aborted
by cancelling the task running it.
"""

from __future__ import annotations

__all__ = ["AsyncHttpAction"]

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from httption.base import BaseAction

if TYPE_CHECKING:
    from httption.exceptions import HttpActionError
    from httption.options import Option

logger: logging.Logger = logging.getLogger(__name__)


class AsyncHttpAction(BaseAction):
    """Asynchronous HTTP action.

    See ``HttpAction`` for the lifecycle and the retry and repeat rules.

    Args:
        client: The ``httpx.AsyncClient`` sending the request.
        method: The HTTP method (e.g. "GET", "POST").
        url: The target URL.
        name: Human readable name used in log entries.
        cancel_event: Optional ``asyncio.Event``; once set, the next
            attempt or retry delay raises ``ActionCancelledError``.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from httption import AsyncHttpAction, with_max_retry
        >>> async def main():
        ...     async with httpx.AsyncClient() as client:
        ...         action = AsyncHttpAction(client, "GET", "https://api.example.com/data")
        ...         await action.execute(with_max_retry(3))
        ...         return action.decode_result()
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    client: httpx.AsyncClient

    def __init__(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        name: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        super().__init__(client, method, url, name=name, cancel_event=cancel_event)

    async def execute(self, *options: Option, cancel_event: asyncio.Event | None = None) -> None:
        """Configure the action then run it with the retry and repeat
        protocol.

        Raises:
            HttpActionError: The terminal error of the execution.
        """
        self._log(logging.DEBUG, "action execute")
        self._start_run(False, options)
        await self._run(self._resolve_cancel_event(cancel_event))

    async def repeat(
        self,
        force_reconfigure: bool = False,
        *options: Option,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Run a completed action again.

        Args:
            force_reconfigure: If ``True`` the built request is discarded
                and rebuilt from the current template.
            *options: Options applied before the run.
            cancel_event: Optional event overriding the one given to the
                constructor for this run.

        Raises:
            HttpActionError: The terminal error of the run.
        """
        self._log(logging.DEBUG, "action repeat requested", force_reconfigure=force_reconfigure)
        self._start_run(force_reconfigure, options)
        await self._run(self._resolve_cancel_event(cancel_event))

    async def dispatch(self, cancel_event: asyncio.Event | None = None) -> None:
        """Send a single attempt, without retry or repeat.

        Raises:
            EmptyRequestError: If the action was never configured.
            HttpActionError: If the attempt failed.
        """
        error = await self._attempt(self._resolve_cancel_event(cancel_event))
        if error is not None:
            self._fail(error)
        self._conclude_attempt(None)

    def _resolve_cancel_event(self, cancel_event: asyncio.Event | None) -> asyncio.Event | None:
        return cancel_event if cancel_event is not None else self.cancel_event

    async def _run(self, cancel_event: asyncio.Event | None) -> None:
        while True:
            await self._dispatch_with_retry(cancel_event)
            if not self.needs_repeat:
                return
            self._prepare_repeat()

    async def _dispatch_with_retry(self, cancel_event: asyncio.Event | None) -> None:
        while self._conclude_attempt(await self._attempt(cancel_event)):
            await self._wait(self.config.retry_delay, cancel_event)

    async def _attempt(self, cancel_event: asyncio.Event | None) -> HttpActionError | None:
        error = self._start_attempt(cancel_event)
        if error is not None:
            return error
        self._log(logging.DEBUG, "sending request")
        try:
            response = await self.client.send(self._request)
        except httpx.RequestError as exc:
            logger.debug(f"{self.config.method} request to {self.config.url} failed: {exc!r}")
            return self._transport_failed(exc)
        except Exception as exc:
            self._abort(exc)
            raise
        return self._handle_response(response)

    async def _wait(self, delay: float, cancel_event: asyncio.Event | None) -> None:
        if delay <= 0:
            return
        self._log(logging.DEBUG, "waiting before retry", delay=delay)
        if cancel_event is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self._fail(self._cancelled_error())
