"""
Async HTTP client for the GtR JSON APIs.

Built on httpx with:
- One connection pool for the whole run
- Explicit, configurable request timeout
- JSON decoding with HTTP status checking

Requests are never retried; callers decide whether a failure is fatal.
"""

import json
from typing import Any, Optional

import httpx
import structlog

from gtr_extractor import __version__

logger = structlog.get_logger(__name__)

USER_AGENT = f"gtr-extractor/{__version__} (+https://gtr.ukri.org)"

# Everything a single GET can fail with: transport errors, HTTP error
# statuses and undecodable bodies.
FETCH_ERRORS = (httpx.HTTPError, json.JSONDecodeError, UnicodeDecodeError)


class HttpClient:
    """
    Async HTTP client returning decoded JSON.

    Usage:
        async with HttpClient(timeout=30.0) as client:
            data = await client.get_json(url, headers={"Accept": "..."})
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        """
        GET request; raises on HTTP error status.

        Args:
            url: Fully built URL (query string included)
            headers: Extra request headers

        Returns:
            httpx.Response object
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        logger.debug("http_get", url=url)

        response = await self._client.get(url, headers=headers or {})
        response.raise_for_status()

        return response

    async def get_json(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET request returning the decoded JSON body."""
        response = await self.get(url, headers=headers)
        return response.json()
