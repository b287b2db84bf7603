"""
Combined router for all API endpoints.

Aggregates the auth, content, upload, user, rebuild and site routers under /api so
the app includes a single router.
"""

from fastapi import APIRouter

from easel.interfaces.api.web import artworks_if, auth_if, content_if, rebuild_if, site_if, upload_if, users_if

router = APIRouter(prefix="/api")

router.include_router(auth_if.router)
router.include_router(artworks_if.router)
router.include_router(content_if.router)
router.include_router(users_if.router)
router.include_router(upload_if.router)
router.include_router(rebuild_if.router)
router.include_router(site_if.router)
