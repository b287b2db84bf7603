"""
Artwork service - gallery listings and admin edits.

Owns the artworks collection. Lookups from the public site go by slug; admin
writes go by numeric public id. Slugs are unique: a create or update that
would reuse another artwork's slug raises ConflictError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from easel.helpers.exceptions import ConflictError

if TYPE_CHECKING:
    from easel.persistence.db import Database

logger = logging.getLogger(__name__)

RELATED_LIMIT = 3

NEWEST_FIRST = [("createdAt", -1)]


def normalize_images(images: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Keep at most one image flagged primary: the first one flagged wins."""
    if not images:
        return []
    seen_primary = False
    normalized = []
    for image in images:
        image = dict(image)
        if image.get("isPrimary") and not seen_primary:
            seen_primary = True
            image["isPrimary"] = True
        else:
            image["isPrimary"] = False
        normalized.append(image)
    return normalized


class ArtworkService:
    """Service for artwork reads and admin writes."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Public reads
    # ------------------------------------------------------------------
    def list_artworks(self) -> list[dict[str, Any]]:
        return self._db.artworks.find().sort(NEWEST_FIRST).all()

    def list_featured(self) -> list[dict[str, Any]]:
        return self._db.artworks.find({"featured": True}).sort(NEWEST_FIRST).all()

    def get_by_slug(self, slug: str) -> dict[str, Any] | None:
        return self._db.artworks.find_one({"slug": slug})

    def list_related(self, slug: str, limit: int = RELATED_LIMIT) -> list[dict[str, Any]]:
        """
        Artworks in the same category as `slug`, excluding it.

        Returns an empty list when the slug is unknown.
        """
        current = self._db.artworks.find_one({"slug": slug})
        if current is None:
            return []
        return self._db.artworks.find({"category": current.get("category"), "slug": {"$ne": slug}}).limit(limit).all()

    def get(self, public_id: int) -> dict[str, Any] | None:
        return self._db.artworks.get_by_public_id(public_id)

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------
    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create an artwork.

        Raises:
            ConflictError: If the slug is already taken
        """
        doc = dict(data)
        doc["images"] = normalize_images(doc.get("images"))
        doc.setdefault("featured", False)
        with self._db.artworks.lock:
            self._ensure_slug_free(doc.get("slug"))
            artwork = self._db.artworks.create(doc)
        logger.info(f"[Artworks] Created '{artwork.get('slug')}' (id={artwork['id']})")
        return artwork

    def update(self, public_id: int, patch: Mapping[str, Any]) -> dict[str, Any] | None:
        """
        Merge `patch` into the artwork with this public id.

        Returns:
            The updated artwork, or None if no artwork has this id

        Raises:
            ConflictError: If the patch renames the slug to one already taken
        """
        key = self._db.artworks.resolve_native_key(public_id)
        if key is None:
            return None
        changes = dict(patch)
        if "images" in changes:
            changes["images"] = normalize_images(changes["images"])
        with self._db.artworks.lock:
            if "slug" in changes:
                self._ensure_slug_free(changes["slug"], except_key=key)
            self._db.artworks.update_one({"_id": key}, changes)
        return self._db.artworks.find_one({"_id": key})

    def delete(self, public_id: int) -> bool:
        deleted = self._db.artworks.delete_by_public_id(public_id)
        if deleted:
            logger.info(f"[Artworks] Deleted artwork id={public_id}")
        return deleted > 0

    def _ensure_slug_free(self, slug: Any, except_key: str | None = None) -> None:
        if not slug:
            return
        existing = self._db.artworks.find_one({"slug": slug})
        if existing is not None and existing["_id"] != except_key:
            raise ConflictError(f"An artwork with slug '{slug}' already exists")
