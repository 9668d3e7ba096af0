"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from pypisift import __version__
from pypisift.adapters.opensearch.adapter import OpenSearchIndex
from pypisift.adapters.upstream.client import UpstreamClient
from pypisift.api.deps import set_service
from pypisift.api.v1.router import router as v1_router
from pypisift.api.xmlrpc import router as xmlrpc_router
from pypisift.config.settings import Settings
from pypisift.core.service import PyPiSearchService
from pypisift.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # PYPISIFT_CONFIG wins; otherwise auto-detect pypisift-config.yaml
        yaml_path = Path(os.environ.get("PYPISIFT_CONFIG", "pypisift-config.yaml"))
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings.observability)
        logger.info("Starting PyPISift v%s", __version__)

        service = build_service(settings)
        await service.initialize()
        set_service(service)

        app.state.settings = settings
        app.state.service = service

        logger.info("PyPISift is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down PyPISift...")
        await service.shutdown()
        set_service(None)
        logger.info("PyPISift shutdown complete")

    app = FastAPI(
        title="PyPISift",
        description="Legacy PyPI XML-RPC search (`pip search`) served from an OpenSearch index.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(xmlrpc_router, tags=["xmlrpc"])
    app.include_router(v1_router, prefix="/v1")

    return app


def build_service(settings: Settings) -> PyPiSearchService:
    """Wire the search service from settings."""
    index_cfg = settings.index
    index = OpenSearchIndex(
        hosts=index_cfg.hosts,
        index_pattern=index_cfg.index_pattern,
        username=index_cfg.username,
        password=index_cfg.password,
        verify_certs=index_cfg.verify_certs,
        page_size=index_cfg.page_size,
    )
    upstream = UpstreamClient(timeout=settings.upstream.timeout)
    return PyPiSearchService(settings, index, upstream)
