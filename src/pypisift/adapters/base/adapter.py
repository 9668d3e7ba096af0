"""Base index interface — Abstract executor for boolean search queries.

The search service never talks to an index backend directly. Each backend
implements this interface and is responsible for:
  1. Executing a ``BooleanQuery`` scoped to one repository
  2. Streaming back raw hit records
  3. Reporting health status
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, Field

from pypisift.models.query import BooleanQuery


class AdapterHealth(BaseModel):
    """Health status of an index adapter."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class SearchIndex(ABC):
    """Abstract base class for search index executors.

    Implementations should be safe to share between concurrent requests;
    connections are set up in ``initialize()`` and released in ``shutdown()``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique index adapter name (e.g., 'opensearch')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections. Called once during application startup."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Close connections. Called during application shutdown."""

    @abstractmethod
    def browse(
        self,
        query: BooleanQuery,
        repository: str,
        *,
        unrestricted: bool = False,
    ) -> AsyncIterator[dict[str, Any]]:
        """Lazily yield every raw hit matching ``query``.

        Args:
            query: The boolean query to execute.
            repository: Repository the query is scoped to.
            unrestricted: Browse all matching hits instead of the first page only.

        Raises:
            IndexUnavailable: If the backend cannot execute the query.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the index backend."""
