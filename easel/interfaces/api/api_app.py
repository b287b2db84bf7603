"""
FastAPI application setup and configuration.
Main entry point for the Easel HTTP service.

Architecture:
- All JSON endpoints live under /api (see web/router.py)
- Uploaded image variants are served from /attached_assets
- The prerendered static site is mounted at / after the API routes, so
  /api paths always win
- Error bodies are always {"error": <message>}; storage internals are never sent
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from easel.__version__ import __version__
from easel.helpers.exceptions import ContentValidationError, FatalSwapError, StorageError
from easel.helpers.logging_helper import sanitize_exception_message
from easel.interfaces.api.web import router as web_router
from easel.services.infrastructure.image_upload_svc import ASSETS_URL_PREFIX

logger = logging.getLogger(__name__)

SITE_MOUNT_NAME = "site"
ASSETS_MOUNT_NAME = "attached_assets"


# ----------------------------------------------------------------------
#  App lifecycle
# ----------------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app_instance: FastAPI):
    """
    FastAPI lifespan context manager.

    Note: Application.start() is called by start.py BEFORE uvicorn runs.
    This lifespan only handles cleanup on API shutdown.
    """
    from easel.app import application

    logger.info("[API] FastAPI starting (Application already initialized)")
    try:
        yield
    finally:
        logger.info("[API] FastAPI shutting down...")
        if application.rebuild is not None:
            await application.rebuild.drain()
        application.stop()
        logger.info("[API] Shutdown complete")


# ----------------------------------------------------------------------
#  FastAPI app
# ----------------------------------------------------------------------
api_app = FastAPI(title="Easel", version=__version__, lifespan=lifespan)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {message}" if field else message


@api_app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _first_validation_message(exc)})


@api_app.exception_handler(ContentValidationError)
async def content_validation_handler(request: Request, exc: ContentValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@api_app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@api_app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content={"error": sanitize_exception_message(exc, "Internal server error")})


@api_app.exception_handler(FatalSwapError)
async def fatal_swap_handler(request: Request, exc: FatalSwapError):
    # Already logged CRITICAL by the orchestrator
    return JSONResponse(status_code=500, content={"error": str(exc)})


# Global exception handler
@api_app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    logger.exception(f"[API] Unhandled exception: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ----------------------------------------------------------------------
#  Routes
# ----------------------------------------------------------------------
api_app.include_router(web_router.router)


# ----------------------------------------------------------------------
#  Static site
# ----------------------------------------------------------------------
class LiveSiteFiles(StaticFiles):
    """StaticFiles over a directory that is replaced by rename during rebuilds.

    The directory may not exist yet (before the first build) or briefly
    between the two swap renames; both cases answer 404 instead of failing
    the startup check. Paths are resolved per request, so a swapped-in tree
    is served immediately.
    """

    async def check_config(self) -> None:
        return None


def mount_site(app: FastAPI, live_dir: str) -> bool:
    """Serve the prerendered site at / (index.html for directories).

    Returns:
        False if the site was already mounted
    """
    if any(getattr(route, "name", None) == SITE_MOUNT_NAME for route in app.routes):
        return False
    app.mount("/", LiveSiteFiles(directory=live_dir, html=True, check_dir=False), name=SITE_MOUNT_NAME)
    logger.info(f"[API] Serving static site from {os.path.abspath(live_dir)}")
    return True


def mount_assets(app: FastAPI, assets_dir: str) -> bool:
    """Serve uploaded images at /attached_assets. Mount before the site.

    Returns:
        False if the assets were already mounted
    """
    if any(getattr(route, "name", None) == ASSETS_MOUNT_NAME for route in app.routes):
        return False
    app.mount(
        ASSETS_URL_PREFIX,
        LiveSiteFiles(directory=assets_dir, check_dir=False),
        name=ASSETS_MOUNT_NAME,
    )
    logger.info(f"[API] Serving uploaded images from {os.path.abspath(assets_dir)}")
    return True
