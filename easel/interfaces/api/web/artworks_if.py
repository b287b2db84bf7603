"""Artwork endpoints: public gallery reads and admin writes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from easel.interfaces.api.auth import require_admin
from easel.interfaces.api.id_helpers import public_record, public_records, to_public_id
from easel.interfaces.api.types.auth_types import SuccessResponse
from easel.interfaces.api.types.content_types import ArtworkCreateRequest, ArtworkUpdateRequest
from easel.interfaces.api.web.dependencies import get_artwork_service
from easel.services.domain.artwork_svc import ArtworkService

router = APIRouter(tags=["Artworks"])


# ──────────────────────────────────────────────────────────────────────
# Public
# ──────────────────────────────────────────────────────────────────────


@router.get("/artworks")
def list_artworks(artworks: ArtworkService = Depends(get_artwork_service)) -> list[dict[str, Any]]:
    """All artworks, newest first."""
    return public_records(artworks.list_artworks())


@router.get("/artworks/featured")
def list_featured(artworks: ArtworkService = Depends(get_artwork_service)) -> list[dict[str, Any]]:
    return public_records(artworks.list_featured())


@router.get("/artworks/related/{slug}")
def list_related(slug: str, artworks: ArtworkService = Depends(get_artwork_service)) -> list[dict[str, Any]]:
    """Up to three artworks in the same category. Unknown slug gives []."""
    return public_records(artworks.list_related(slug))


@router.get("/artworks/{slug}")
def get_artwork(slug: str, artworks: ArtworkService = Depends(get_artwork_service)) -> dict[str, Any]:
    artwork = artworks.get_by_slug(slug)
    if artwork is None:
        raise HTTPException(status_code=404, detail="Artwork not found")
    return public_record(artwork)  # type: ignore[return-value]


# ──────────────────────────────────────────────────────────────────────
# Admin
# ──────────────────────────────────────────────────────────────────────


@router.post("/admin/artworks", status_code=201, dependencies=[Depends(require_admin)])
def create_artwork(
    request: ArtworkCreateRequest,
    artworks: ArtworkService = Depends(get_artwork_service),
) -> dict[str, Any]:
    return public_record(artworks.create(request.model_dump(exclude_none=True)))  # type: ignore[return-value]


@router.patch("/admin/artworks/{artwork_id}", dependencies=[Depends(require_admin)])
def update_artwork(
    artwork_id: str,
    request: ArtworkUpdateRequest,
    artworks: ArtworkService = Depends(get_artwork_service),
) -> dict[str, Any]:
    updated = artworks.update(to_public_id(artwork_id, "artwork ID"), request.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Artwork not found")
    return public_record(updated)  # type: ignore[return-value]


@router.delete("/admin/artworks/{artwork_id}", dependencies=[Depends(require_admin)])
def delete_artwork(artwork_id: str, artworks: ArtworkService = Depends(get_artwork_service)) -> SuccessResponse:
    if not artworks.delete(to_public_id(artwork_id, "artwork ID")):
        raise HTTPException(status_code=404, detail="Artwork not found")
    return SuccessResponse()
