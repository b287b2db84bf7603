"""Artist info, FAQ and site settings endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from easel.interfaces.api.auth import require_admin
from easel.interfaces.api.id_helpers import public_record, public_records, to_public_id
from easel.interfaces.api.types.auth_types import SuccessResponse
from easel.interfaces.api.types.content_types import (
    ArtistUpdateRequest,
    FaqCreateRequest,
    FaqUpdateRequest,
    SettingsUpdateRequest,
)
from easel.interfaces.api.web.dependencies import get_artist_service, get_faq_service, get_settings_service
from easel.services.domain.artist_svc import ArtistService
from easel.services.domain.faq_svc import FaqService
from easel.services.domain.settings_svc import SettingsService

router = APIRouter(tags=["Content"])


# ──────────────────────────────────────────────────────────────────────
# Artist info (singleton)
# ──────────────────────────────────────────────────────────────────────


@router.get("/artist")
def get_artist(artist: ArtistService = Depends(get_artist_service)) -> dict[str, Any] | None:
    """The artist record, or null before one has been saved."""
    return public_record(artist.get())


@router.patch("/admin/artist", dependencies=[Depends(require_admin)])
def update_artist(
    request: ArtistUpdateRequest,
    artist: ArtistService = Depends(get_artist_service),
) -> dict[str, Any]:
    return public_record(artist.update(request.model_dump(exclude_unset=True)))  # type: ignore[return-value]


# ──────────────────────────────────────────────────────────────────────
# FAQs
# ──────────────────────────────────────────────────────────────────────


@router.get("/faqs")
def list_faqs(faqs: FaqService = Depends(get_faq_service)) -> list[dict[str, Any]]:
    return public_records(faqs.list_faqs())


@router.post("/admin/faqs", status_code=201, dependencies=[Depends(require_admin)])
def create_faq(request: FaqCreateRequest, faqs: FaqService = Depends(get_faq_service)) -> dict[str, Any]:
    return public_record(faqs.create(request.model_dump()))  # type: ignore[return-value]


@router.patch("/admin/faqs/{faq_id}", dependencies=[Depends(require_admin)])
def update_faq(
    faq_id: str,
    request: FaqUpdateRequest,
    faqs: FaqService = Depends(get_faq_service),
) -> dict[str, Any]:
    updated = faqs.update(to_public_id(faq_id, "FAQ ID"), request.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="FAQ not found")
    return public_record(updated)  # type: ignore[return-value]


@router.delete("/admin/faqs/{faq_id}", dependencies=[Depends(require_admin)])
def delete_faq(faq_id: str, faqs: FaqService = Depends(get_faq_service)) -> SuccessResponse:
    if not faqs.delete(to_public_id(faq_id, "FAQ ID")):
        raise HTTPException(status_code=404, detail="FAQ not found")
    return SuccessResponse()


# ──────────────────────────────────────────────────────────────────────
# Site settings (singleton)
# ──────────────────────────────────────────────────────────────────────


@router.get("/settings")
def get_settings(settings: SettingsService = Depends(get_settings_service)) -> dict[str, Any]:
    """Accent color settings; defaults are created on first read."""
    return public_record(settings.get())  # type: ignore[return-value]


@router.put("/admin/settings", dependencies=[Depends(require_admin)])
def update_settings(
    request: SettingsUpdateRequest,
    settings: SettingsService = Depends(get_settings_service),
) -> dict[str, Any]:
    return public_record(settings.update(request.model_dump(exclude_unset=True)))  # type: ignore[return-value]
