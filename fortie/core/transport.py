"""
HTTP Transport for the Fortnox API.

Thin wrapper around an aiohttp session that knows the Fortnox base URL
and authentication headers. It performs exactly one HTTP call per
``request()`` and returns an HttpResponse for every status code; deciding
what a non-2xx status means is left to the dispatcher.

Usage:
    async with Transport(base_url="https://api.fortnox.se/3/", headers=headers) as transport:
        response = await transport.request(HttpMethod.GET, "pricelists")
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import aiohttp

from .exceptions import TransportError
from .request import HttpMethod

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """
    HTTP response model.

    Attributes:
        status: HTTP status code
        headers: Response headers
        body: Raw response body
        elapsed: Time elapsed in seconds
        url: Requested URL
    """
    status: int = 0
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    elapsed: float = 0.0
    url: str = ""

    @property
    def ok(self) -> bool:
        """Check if response is successful (2xx)."""
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "headers": dict(self.headers),
            "body": self.text[:500] if self.body else None,
            "elapsed": self.elapsed,
            "ok": self.ok,
        }


class Transport:
    """
    aiohttp based transport.

    Features:
    - Session management (lazy start, async context manager)
    - Default Fortnox headers on every request
    - Timeout handling
    - Network failures raised as TransportError
    """

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        content_type: str = "application/json",
        timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        # Content-Type is set per request so uploads keep their own
        self.default_headers = {
            key: value for key, value in (headers or {}).items()
            if key.lower() != "content-type"
        }
        self.content_type = content_type
        self.default_timeout = timeout

        self._session = session
        self._owns_session = session is None
        self._request_count: int = 0
        self._error_count: int = 0

    async def __aenter__(self) -> "Transport":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.default_timeout),
                headers=self.default_headers,
            )
            self._owns_session = True
            logger.debug("HTTP transport session started")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP transport session closed")

    def build_url(self, path: str) -> str:
        return self.base_url + path.lstrip("/")

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        """
        Execute a single HTTP request.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters
            json: JSON body
            data: Raw body or aiohttp.FormData for uploads
            headers: Extra headers for this request only

        Returns:
            HTTP response, whatever its status

        Raises:
            TransportError: The request could not be completed
        """
        if self._session is None or self._session.closed:
            await self.start()

        url = self.build_url(path)
        request_headers = dict(headers or {})
        if data is None:
            request_headers.setdefault("Content-Type", self.content_type)

        start_time = time.monotonic()
        self._request_count += 1

        try:
            async with self._session.request(
                method=method.value,
                url=url,
                params=dict(params) if params else None,
                json=json,
                data=data,
                headers=request_headers,
            ) as response:
                body = await response.read()
                return HttpResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                    elapsed=time.monotonic() - start_time,
                    url=str(response.url),
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._error_count += 1
            logger.error(f"{method.value} {url} failed: {e!r}")
            raise TransportError(f"{method.value} {url} failed: {e!r}", url=url) from e

    @property
    def stats(self) -> dict[str, Any]:
        """Get transport statistics."""
        return {
            "request_count": self._request_count,
            "error_count": self._error_count,
            "error_rate": self._error_count / self._request_count if self._request_count > 0 else 0,
        }
