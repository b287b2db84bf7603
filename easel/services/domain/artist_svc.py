"""Artist info service - the singleton biography record."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from easel.persistence.db import Database

logger = logging.getLogger(__name__)


class ArtistService:
    """
    Zero or one artist record ever exists.

    update() is an upsert: it creates the record on first call and merges
    into that same record afterwards.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self) -> dict[str, Any] | None:
        return self._db.artist.find_one()

    def update(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        with self._db.artist.lock:
            existing = self._db.artist.find_one()
            if existing is None:
                logger.info("[Artist] Creating artist info")
                return self._db.artist.create(patch)
            self._db.artist.update_one({"_id": existing["_id"]}, patch)
            updated = self._db.artist.find_one({"_id": existing["_id"]})
        return updated if updated is not None else existing
