"""
Shared fixtures for Fortie tests.

The transport is replaced by an AsyncMock so no test touches the network;
responses are scripted with ``make_response``.
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from fortie.core.dispatcher import Dispatcher, RateLimitPolicy, RetryPolicy
from fortie.core.transport import HttpResponse


def make_response(
    status: int = 200,
    payload: Any = None,
    content_type: str = "application/json",
    body: bytes | None = None,
) -> HttpResponse:
    """Build an HttpResponse with a JSON payload or a raw body."""
    if body is None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
    return HttpResponse(
        status=status,
        headers={"Content-Type": content_type},
        body=body,
        url="https://api.fortnox.se/3/test",
    )


@pytest.fixture
def transport():
    """Transport double; script responses via ``transport.request``."""
    mock = MagicMock()
    mock.request = AsyncMock(return_value=make_response(200, {}))
    mock.start = AsyncMock()
    mock.close = AsyncMock()
    mock.stats = {"request_count": 0, "error_count": 0, "error_rate": 0}
    return mock


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def dispatcher(transport, sleep):
    return Dispatcher(
        transport,
        rate_limit_policy=RateLimitPolicy(requests_per_second=4),
        retry_policy=RetryPolicy(max_retries=3),
        sleep=sleep,
    )


def sent_json(transport, call_index: int = -1) -> Any:
    """JSON body passed to the transport in the given call."""
    return transport.request.call_args_list[call_index].kwargs.get("json")
