"""API v1 Router — Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from pypisift.api.v1.endpoints.health import router as health_router

router = APIRouter(tags=["v1"])
router.include_router(health_router)
