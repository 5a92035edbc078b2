"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from tunebase.api.routes.admin import router as admin_router
from tunebase.api.routes.auth import router as auth_router
from tunebase.api.routes.favorites import router as favorites_router
from tunebase.api.routes.health import router as health_router
from tunebase.api.routes.me import router as me_router
from tunebase.api.routes.playlists import router as playlists_router
from tunebase.api.routes.songs import router as songs_router

API_PREFIX = "/api"


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    /health is served at the root; everything else lives under /api.

    Returns:
        Configured APIRouter with all routes registered.
    """
    resource_router = APIRouter(prefix=API_PREFIX)
    resource_router.include_router(auth_router, tags=["auth"])
    resource_router.include_router(me_router, tags=["user"])
    resource_router.include_router(songs_router, tags=["songs"])
    resource_router.include_router(favorites_router, tags=["favorites"])
    resource_router.include_router(playlists_router, tags=["playlists"])
    resource_router.include_router(admin_router, tags=["admin"])

    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(resource_router)
    return api_router


__all__ = ["create_api_router"]
