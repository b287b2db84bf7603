"""Health check and contact form endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from easel.helpers.exceptions import StorageError
from easel.helpers.time_helper import iso_now
from easel.interfaces.api.types.auth_types import ContactRequest, SuccessResponse
from easel.interfaces.api.web.dependencies import get_database
from easel.persistence.db import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Site"])


@router.get("/health")
def health(db: Database | None = Depends(get_database)) -> JSONResponse:
    """Healthy when a trivial storage read succeeds. Never names the backend."""
    try:
        if db is None:
            raise StorageError("Database not initialized")
        db.ping()
    except StorageError as e:
        logger.error(f"[Web API] Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": "Database connection failed"})
    return JSONResponse(status_code=200, content={"status": "healthy", "timestamp": iso_now()})


@router.post("/contact")
def contact(request: ContactRequest) -> SuccessResponse:
    """Accept a contact form submission. Submissions are logged, not stored."""
    logger.info(
        f"[Web API] Contact form: {request.inquiryType} inquiry from {request.name} <{request.email}>: {request.subject}"
    )
    return SuccessResponse(message="Your message has been received. We'll get back to you soon!")
