"""Health check endpoints — Service and index health monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pypisift import __version__
from pypisift.adapters.base.adapter import AdapterHealth
from pypisift.api.deps import get_service
from pypisift.core.service import PyPiSearchService

router = APIRouter()


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="PyPISift server version")
    service: str = Field(description="Service name ('pypisift')")
    index: str = Field(description="Name of the index adapter")
    repositories: dict[str, str] = Field(description="Configured repositories and their type")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Returns server version, the index adapter in use and the configured repositories.",
)
async def health_check(
    service: PyPiSearchService = Depends(get_service),
) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="pypisift",
        index=service.index.name,
        repositories={name: repo.type for name, repo in service.settings.repositories.items()},
    )


@router.get(
    "/health/index",
    response_model=AdapterHealth,
    summary="Index Health Check",
    description="Run a health check against the search index backend.",
)
async def index_health(
    service: PyPiSearchService = Depends(get_service),
) -> AdapterHealth:
    """Check health of the search index."""
    return await service.index.health_check()
