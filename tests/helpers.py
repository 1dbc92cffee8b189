r"""Shared test helpers for action tests."""

from __future__ import annotations

__all__ = ["TEST_URL", "json_response", "responder"]

from typing import Any
from unittest.mock import Mock

import httpx

TEST_URL = "https://api.example.com/data"


def json_response(status_code: int, payload: Any) -> httpx.Response:
    """Create a response with a JSON body and an ``application/json``
    content type."""
    return httpx.Response(status_code, json=payload)


def responder(*responses: httpx.Response | Exception) -> Mock:
    """Create a transport handler answering with ``responses`` in order.

    Exceptions in ``responses`` are raised instead of returned.
    """
    return Mock(side_effect=list(responses))
