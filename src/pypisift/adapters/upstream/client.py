"""Upstream client — Forwards search calls to remote PyPI-compatible XML-RPC servers.

Uses ``httpx`` (async). The remote reply is parsed with the streaming
response parser, so fault replies simply produce no results.

Usage::

    client = UpstreamClient(timeout=10.0)
    await client.initialize()
    results = await client.search("https://pypi.org/pypi", request_body)
"""

from __future__ import annotations

import logging
import time

import httpx

from pypisift.adapters.base.exceptions import UpstreamUnavailable
from pypisift.models.result import SearchResult
from pypisift.protocol.exceptions import MalformedDocument
from pypisift.protocol.response import parse_search_response

logger = logging.getLogger(__name__)

XML_CONTENT_TYPE = "text/xml"


class UpstreamClient:
    """Async client posting XML-RPC search requests to remote servers.

    Args:
        timeout: HTTP request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(self, timeout: float = 30.0, **httpx_kwargs: object) -> None:
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Create the shared ``httpx.AsyncClient``."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers={"Content-Type": XML_CONTENT_TYPE, "Accept": XML_CONTENT_TYPE},
            **self._httpx_kwargs,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def search(self, remote_url: str, body: bytes) -> list[SearchResult]:
        """Post ``body`` to ``remote_url`` and parse the search response.

        Raises:
            UpstreamUnavailable: If the request fails, the server answers with an error
                status, or the reply is not a well-formed XML-RPC document.
        """
        if not self._client:
            raise UpstreamUnavailable("Upstream client not initialized.")

        try:
            start = time.monotonic()
            resp = await self._client.post(remote_url, content=body)
            resp.raise_for_status()
            took_ms = int((time.monotonic() - start) * 1000)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Upstream search at {remote_url} failed: {e}") from e

        try:
            results = parse_search_response(resp.content)
        except MalformedDocument as e:
            raise UpstreamUnavailable(f"Upstream search at {remote_url} sent an unreadable reply: {e}") from e
        logger.info("Upstream %s returned %d results in %d ms", remote_url, len(results), took_ms)
        return results
