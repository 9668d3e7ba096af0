"""OpenSearch index — Executes boolean search queries against OpenSearch (v2+).

Component metadata is expected in the layout produced by the repository
indexer: one document per component, with the owning repository in
``repository_name`` and format attributes under ``attributes.<format>``::

    {
        "repository_name": "pypi-hosted",
        "attributes": {"pypi": {"name": "flask", "version": "2.0.1", "summary": "..."}}
    }

Unrestricted browsing walks every matching hit through the scroll API.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

from opensearchpy import AsyncOpenSearch

from pypisift.adapters.base.adapter import AdapterHealth, SearchIndex
from pypisift.adapters.base.exceptions import IndexUnavailable
from pypisift.models.query import BooleanQuery

logger = logging.getLogger(__name__)


class OpenSearchIndex(SearchIndex):
    """Search index executor for OpenSearch (v2+).

    Args:
        hosts: List of OpenSearch node URLs.
        index_pattern: Index pattern to search. ``{repository}`` is replaced
            with the repository name, for deployments with one index per repository.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        verify_certs: Whether to verify TLS certificates.
        page_size: Number of hits fetched per round trip.
        scroll: How long OpenSearch keeps a scroll context alive between pages.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        index_pattern: str = "*",
        username: str | None = None,
        password: str | None = None,
        verify_certs: bool = True,
        page_size: int = 500,
        scroll: str = "1m",
        **kwargs: Any,
    ) -> None:
        self._hosts = hosts or ["https://localhost:9200"]
        self._index_pattern = index_pattern
        self._username = username
        self._password = password
        self._verify_certs = verify_certs
        self._page_size = page_size
        self._scroll = scroll
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    async def initialize(self) -> None:
        """Create and verify the ``AsyncOpenSearch`` client."""
        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
        }
        if self._username and self._password:
            client_kwargs["http_auth"] = (self._username, self._password)

        client_kwargs.update(self._extra_kwargs)

        try:
            self._client = AsyncOpenSearch(**client_kwargs)
            info = await self._client.info()
            version = info.get("version", {}).get("number", "unknown")
            cluster = info.get("cluster_name", "unknown")
            logger.info("Connected to OpenSearch cluster: %s (v%s)", cluster, version)
        except Exception as e:
            raise IndexUnavailable(f"Failed to connect to OpenSearch: {e}") from e

    async def shutdown(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            await self._client.close()
            self._client = None

    # ── Browse ───────────────────────────────────────────────────────────

    async def browse(
        self,
        query: BooleanQuery,
        repository: str,
        *,
        unrestricted: bool = False,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield raw hits for ``query``, one page at a time."""
        if not self._client:
            raise IndexUnavailable("OpenSearch client not initialized.")

        index = self.index_for(repository)
        body: dict[str, Any] = {"query": query.to_dsl(), "_source": True}
        start = time.monotonic()
        count = 0

        if not unrestricted:
            hits = await self._search(index=index, body=body, size=self._page_size)
            for hit in hits.get("hits", {}).get("hits", []):
                count += 1
                yield hit
            logger.debug("Browsed %d hits from %s in %d ms", count, index, (time.monotonic() - start) * 1000)
            return

        response = await self._search(index=index, body=body, size=self._page_size, scroll=self._scroll)
        scroll_id = response.get("_scroll_id")
        try:
            while True:
                page = response.get("hits", {}).get("hits", [])
                if not page:
                    break
                for hit in page:
                    count += 1
                    yield hit
                if not scroll_id:
                    break
                response = await self._scroll_page(scroll_id)
                scroll_id = response.get("_scroll_id", scroll_id)
        finally:
            if scroll_id:
                await self._clear_scroll(scroll_id)

        logger.debug("Browsed %d hits from %s in %d ms", count, index, (time.monotonic() - start) * 1000)

    def index_for(self, repository: str) -> str:
        """Resolve the index pattern for ``repository``."""
        return self._index_pattern.replace("{repository}", repository)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check OpenSearch cluster health."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            health = await self._client.cluster.health()
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return AdapterHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Nodes: {health.get('number_of_nodes')}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _search(self, **kwargs: Any) -> dict[str, Any]:
        try:
            return await self._client.search(**kwargs)
        except Exception as e:
            raise IndexUnavailable(f"OpenSearch query failed: {e}") from e

    async def _scroll_page(self, scroll_id: str) -> dict[str, Any]:
        try:
            return await self._client.scroll(scroll_id=scroll_id, scroll=self._scroll)
        except Exception as e:
            raise IndexUnavailable(f"OpenSearch scroll failed: {e}") from e

    async def _clear_scroll(self, scroll_id: str) -> None:
        try:
            await self._client.clear_scroll(scroll_id=scroll_id)
        except Exception:
            logger.warning("Failed to clear OpenSearch scroll context", exc_info=True)
