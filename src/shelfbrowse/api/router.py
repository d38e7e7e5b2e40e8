"""API router — Browse under /api, health and version at the root."""

from __future__ import annotations

from fastapi import APIRouter

from shelfbrowse.api.endpoints.browse import router as browse_router
from shelfbrowse.api.endpoints.health import router as health_router

api_router = APIRouter(prefix="/api", tags=["browse"])
api_router.include_router(browse_router)

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(api_router)
