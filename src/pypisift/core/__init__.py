"""Core search orchestration."""

from pypisift.core.service import PyPiSearchService, RepositoryNotFoundError

__all__ = ["PyPiSearchService", "RepositoryNotFoundError"]
