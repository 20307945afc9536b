"""
Dispatch Engine.

Executes FortieRequest descriptors against the transport:

- GET/DELETE are sent without a body
- POST/PUT with a file are sent as multipart (POST) or raw stream (PUT)
- POST/PUT without a file are filtered through the attribute schema,
  wrapped and sent as JSON
- POST/PUT without data and without required attributes carry no body
- 2xx responses are decoded by content type
- HTTP 429 is retried after ``1 / requests_per_second`` seconds, up to
  ``RetryPolicy.max_retries`` times
- any other error response is translated into RemoteServiceError

Usage:
    dispatcher = Dispatcher(
        transport,
        rate_limit_policy=RateLimitPolicy(requests_per_second=4),
    )
    result = await dispatcher.send(request, schema)
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import aiohttp

from .decoder import decode_response
from .envelope import parse_error_body
from .exceptions import RateLimitExceededError, RequestCancelledError
from .request import FortieRequest, HttpMethod
from .schema import AttributeSchema
from .transport import HttpResponse, Transport

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429

SleepFunc = Callable[[float], Awaitable[Any]]
ClockFunc = Callable[[], float]


@dataclass
class RetryPolicy:
    """
    Retry policy for rate-limited requests.

    Attributes:
        max_retries: Maximum number of retries after HTTP 429, None for no cap
        exponential_base: Growth factor of the delay per attempt
        max_delay: Maximum delay between retries in seconds
    """
    max_retries: int | None = 10
    exponential_base: float = 1.0
    max_delay: float = 60.0

    def calculate_delay(self, attempt: int, base_delay: float) -> float:
        """Calculate delay for a given retry attempt."""
        delay = base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)

    def exhausted(self, attempt: int) -> bool:
        return self.max_retries is not None and attempt >= self.max_retries


@dataclass
class RateLimitPolicy:
    """
    Rate limiting policy.

    Attributes:
        requests_per_second: Requests per second allowed per access token
        throttle: Space consecutive requests by ``min_interval``
    """
    requests_per_second: float = 4
    throttle: bool = False

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")

    @property
    def min_interval(self) -> float:
        """Minimum interval between requests in seconds."""
        return 1.0 / self.requests_per_second


class CancellationToken:
    """Cooperative cancellation for pending dispatches."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class Dispatcher:
    """
    Sends request descriptors and applies the retry / error policy.

    The dispatcher holds no per-call state; the only values shared between
    calls are its policies and, when throttling, the time of the last request.
    """

    def __init__(
        self,
        transport: Transport,
        rate_limit_policy: RateLimitPolicy | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: ClockFunc = time.monotonic,
    ) -> None:
        self.transport = transport
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy()
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock
        self._last_request_time: float | None = None

    async def send(
        self,
        request: FortieRequest,
        schema: AttributeSchema | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        """
        Execute ``request`` and return the decoded response.

        Raises:
            MissingRequiredAttributeError: Before any network call
            RemoteServiceError: Fortnox answered with an error
            RateLimitExceededError: HTTP 429 outlasted the retry policy
            RequestCancelledError: ``cancel_token`` fired
            UnsupportedContentTypeError: Successful response of unknown type
            TransportError: Network failure
        """
        body = self._prepare_body(request, schema)
        attempt = 0

        while True:
            self._check_cancelled(request, cancel_token)
            await self._apply_rate_limit(cancel_token, request)

            logger.debug(f"{request.method.value} {request.url} (attempt {attempt + 1})")
            response = await self._execute(request, body)

            if response.ok:
                return decode_response(response)

            if response.status != HTTP_TOO_MANY_REQUESTS:
                raise self._translate_error(request, response)

            if self.retry_policy.exhausted(attempt):
                logger.error(
                    f"{request.method.value} {request.url} still rate limited after {attempt} retries"
                )
                raise RateLimitExceededError(attempt, request.url)

            delay = self.retry_policy.calculate_delay(
                attempt, self.rate_limit_policy.min_interval
            )
            logger.warning(
                f"{request.method.value} {request.url} rate limited, retrying in {delay:.3f}s"
            )
            await self._wait(delay, cancel_token, request)
            attempt += 1

    def _prepare_body(
        self,
        request: FortieRequest,
        schema: AttributeSchema | None,
    ) -> Any:
        """Filter and wrap the JSON body of a write request."""
        if not request.method.has_body or request.is_upload:
            return None

        if request.data is None and not request.required:
            return None

        data = request.data or {}
        if schema is None:
            return {request.wrapper: dict(data)} if request.wrapper else dict(data)
        return schema.filter(request.required, request.wrapper, data)

    async def _execute(self, request: FortieRequest, body: Any) -> HttpResponse:
        if request.is_upload:
            return await self._upload(request)

        self._last_request_time = self._clock()
        return await self.transport.request(
            request.method,
            request.path_string,
            params=request.params,
            json=body,
        )

    async def _upload(self, request: FortieRequest) -> HttpResponse:
        """Multipart upload for POST, raw file stream for PUT."""
        with open(request.file_path, "rb") as handle:
            if request.method == HttpMethod.POST:
                data: Any = aiohttp.FormData()
                data.add_field(
                    "file",
                    handle,
                    filename=os.path.basename(request.file_path),
                )
            else:
                data = handle

            self._last_request_time = self._clock()
            return await self.transport.request(
                request.method,
                request.path_string,
                params=request.params,
                data=data,
            )

    async def _apply_rate_limit(
        self,
        cancel_token: CancellationToken | None,
        request: FortieRequest,
    ) -> None:
        """Apply rate limiting before request."""
        if not self.rate_limit_policy.throttle or self._last_request_time is None:
            return

        elapsed = self._clock() - self._last_request_time
        min_interval = self.rate_limit_policy.min_interval
        if elapsed < min_interval:
            await self._wait(min_interval - elapsed, cancel_token, request)

    async def _wait(
        self,
        delay: float,
        cancel_token: CancellationToken | None,
        request: FortieRequest,
    ) -> None:
        if cancel_token is None:
            await self._sleep(delay)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay))
        watcher = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({sleeper, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, watcher):
                if not task.done():
                    task.cancel()

        if sleeper.done() and not sleeper.cancelled():
            sleeper.result()
        self._check_cancelled(request, cancel_token)

    @staticmethod
    def _check_cancelled(
        request: FortieRequest,
        cancel_token: CancellationToken | None,
    ) -> None:
        if cancel_token is not None and cancel_token.cancelled:
            logger.info(f"{request.method.value} {request.url} cancelled")
            raise RequestCancelledError(request.url)

    @staticmethod
    def _translate_error(request: FortieRequest, response: HttpResponse) -> Exception:
        information = parse_error_body(response.body, response.status)
        error = information.to_exception(response.status, response)
        logger.error(
            f"{request.method.value} {request.url} failed with HTTP {response.status}: "
            f"{information.error} {information.message} ({information.code})"
        )
        return error
