"""PyPI search service — Answers XML-RPC search calls per repository.

Repository types are handled as follows:
  - **hosted**: request → QueryIntent → BooleanQuery → index hits → results
  - **proxy**: the request body is forwarded to the remote server and its
    reply is parsed back into results
  - **group**: every member is searched concurrently and the successful
    member results are merged in member order

Every path ends in the same XML-RPC response writer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from pypisift.adapters.base.exceptions import IndexUnavailable, UpstreamUnavailable
from pypisift.models.result import SearchResult
from pypisift.protocol.exceptions import MalformedDocument
from pypisift.protocol.projector import project
from pypisift.protocol.request import parse_search_request
from pypisift.protocol.response import build_search_response
from pypisift.protocol.translator import translate

if TYPE_CHECKING:
    from pypisift.adapters.base.adapter import SearchIndex
    from pypisift.adapters.upstream.client import UpstreamClient
    from pypisift.config.settings import RepositoryConfig, Settings

logger = logging.getLogger(__name__)

# Failures of a single group member; the remaining members are still merged.
MEMBER_ERRORS = (IndexUnavailable, UpstreamUnavailable)


class RepositoryNotFoundError(Exception):
    """Raised when a search targets a repository that is not configured."""


class PyPiSearchService:
    """Runs XML-RPC searches against configured repositories.

    Attributes:
        settings: Application configuration.
        index: Index executor used for hosted repositories.
        upstream: Client used for proxy repositories.
    """

    def __init__(self, settings: Settings, index: SearchIndex, upstream: UpstreamClient) -> None:
        self.settings = settings
        self.index = index
        self.upstream = upstream
        self._member_limit = asyncio.Semaphore(settings.upstream.max_concurrent)

    async def initialize(self) -> None:
        """Open index and upstream connections."""
        await self.index.initialize()
        await self.upstream.initialize()
        logger.info("Search service initialized with %d repositories", len(self.settings.repositories))

    async def shutdown(self) -> None:
        """Close index and upstream connections."""
        await self.upstream.shutdown()
        await self.index.shutdown()
        logger.info("Search service shut down")

    async def search(self, repository: str, body: bytes) -> bytes:
        """Answer an XML-RPC search request for ``repository``.

        Args:
            repository: Name of the repository being searched.
            body: The raw XML-RPC request document.

        Returns:
            The XML-RPC response document.

        Raises:
            RepositoryNotFoundError: If ``repository`` is not configured.
            MalformedDocument: If the request is not a well-formed search call.
            UnsupportedOperation: If the request uses an unsupported method, operator or key.
            IndexUnavailable: If a hosted repository's index cannot be searched.
            UpstreamUnavailable: If a proxy repository's remote cannot be reached or
                sends an unreadable reply.
        """
        start = time.monotonic()
        config = self._config(repository)

        # Validates the request for every repository type, including before forwarding it.
        parse_search_request(repository, body)

        results = await self._search_repository(repository, config, body, visited=frozenset())
        logger.info(
            "Search on %s (%s) returned %d results in %d ms",
            repository,
            config.type,
            len(results),
            int((time.monotonic() - start) * 1000),
        )
        return build_search_response(results)

    async def search_hosted(self, repository: str, body: bytes) -> list[SearchResult]:
        """Run the index pipeline for a hosted repository."""
        intent = parse_search_request(repository, body)
        query = translate(repository, intent)
        logger.debug("Index query for %s: %s", repository, query.to_dsl())
        return [project(hit) async for hit in self.index.browse(query, repository, unrestricted=True)]

    async def search_group(
        self,
        repository: str,
        members: list[str],
        body: bytes,
        visited: frozenset[str],
    ) -> list[SearchResult]:
        """Search every group member and merge the results.

        A member that fails is logged and skipped. Results keep member order;
        a ``(name, version)`` pair already contributed by an earlier member is dropped.
        """
        visited = visited | {repository}
        searchable = [member for member in members if member not in visited]
        for member in members:
            if member in visited:
                logger.warning("Skipping group member %s of %s: already being searched", member, repository)

        outcomes = await asyncio.gather(
            *(self._search_member(member, body, visited) for member in searchable),
            return_exceptions=True,
        )

        merged: dict[tuple[str, str], SearchResult] = {}
        for member, outcome in zip(searchable, outcomes, strict=True):
            if isinstance(outcome, MEMBER_ERRORS):
                logger.warning("Group %s: member %s failed, skipping: %s", repository, member, outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            for result in outcome:
                merged.setdefault(result.key, result)
        return list(merged.values())

    async def _search_member(self, member: str, body: bytes, visited: frozenset[str]) -> list[SearchResult]:
        config = self._config(member)
        if config.type == "group":
            return await self._search_repository(member, config, body, visited)
        # Only leaf searches hold a slot, so nested groups cannot starve each other.
        async with self._member_limit:
            return await self._search_repository(member, config, body, visited)

    async def _search_repository(
        self,
        repository: str,
        config: RepositoryConfig,
        body: bytes,
        visited: frozenset[str],
    ) -> list[SearchResult]:
        if config.type == "proxy":
            return await self._search_proxy(repository, str(config.remote_url), body)
        if config.type == "group":
            return await self.search_group(repository, config.members, body, visited)
        return await self.search_hosted(repository, body)

    async def _search_proxy(self, repository: str, remote_url: str, body: bytes) -> list[SearchResult]:
        try:
            return await self.upstream.search(remote_url, body)
        except MalformedDocument as e:
            raise UpstreamUnavailable(f"Remote of {repository} sent an unreadable reply: {e}") from e

    def _config(self, repository: str) -> RepositoryConfig:
        config = self.settings.repositories.get(repository)
        if config is None:
            raise RepositoryNotFoundError(f"Repository '{repository}' is not configured.")
        return config
