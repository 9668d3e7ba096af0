"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from pypisift.core.service import PyPiSearchService

# Global service instance (set during application lifespan)
_service: PyPiSearchService | None = None


def set_service(service: PyPiSearchService | None) -> None:
    """Set the global search service instance (called during app lifespan)."""
    global _service
    _service = service


def get_service() -> PyPiSearchService:
    """Get the global search service instance.

    Raises:
        RuntimeError: If the service is not initialized.
    """
    if _service is None:
        raise RuntimeError("Search service not initialized. Is the server running?")
    return _service
