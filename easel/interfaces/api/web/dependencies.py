"""
FastAPI dependency injection helpers for web endpoints.

ARCHITECTURE:
- Endpoints should ONLY inject services, never Database or raw infrastructure
- Services encapsulate all business logic and data access
- Endpoints are thin presentation layers that call services and format responses
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import HTTPException

if TYPE_CHECKING:
    from easel.persistence.db import Database
    from easel.services.domain.artist_svc import ArtistService
    from easel.services.domain.artwork_svc import ArtworkService
    from easel.services.domain.faq_svc import FaqService
    from easel.services.domain.settings_svc import SettingsService
    from easel.services.domain.user_svc import UserService
    from easel.services.infrastructure.image_upload_svc import ImageUploadService
    from easel.services.infrastructure.rebuild_svc import RebuildOrchestrator


def _service(name: str) -> Any:
    from easel.app import application

    try:
        return application.get_service(name)
    except KeyError:
        raise HTTPException(status_code=503, detail="Service not available") from None


def get_artwork_service() -> ArtworkService:
    return _service("artworks")  # type: ignore[no-any-return]


def get_artist_service() -> ArtistService:
    return _service("artist")  # type: ignore[no-any-return]


def get_faq_service() -> FaqService:
    return _service("faqs")  # type: ignore[no-any-return]


def get_settings_service() -> SettingsService:
    return _service("settings")  # type: ignore[no-any-return]


def get_user_service() -> UserService:
    return _service("users")  # type: ignore[no-any-return]


def get_rebuild_orchestrator() -> RebuildOrchestrator:
    return _service("rebuild")  # type: ignore[no-any-return]


def get_image_upload_service() -> ImageUploadService:
    return _service("images")  # type: ignore[no-any-return]


def get_database() -> Database | None:
    """Database for the health check only (None before startup)."""
    from easel.app import application

    return application.db
