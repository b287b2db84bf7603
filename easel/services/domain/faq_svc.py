"""FAQ service - frequently asked questions shown in display order."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from easel.persistence.db import Database


class FaqService:
    """Service for FAQ reads and admin writes."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def list_faqs(self) -> list[dict[str, Any]]:
        """All FAQs by ascending display order (ties keep insertion order)."""
        return self._db.faqs.find().sort([("order", 1)]).all()

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        doc = dict(data)
        doc.setdefault("order", 0)
        return self._db.faqs.create(doc)

    def update(self, public_id: int, patch: Mapping[str, Any]) -> dict[str, Any] | None:
        """
        Returns:
            The updated FAQ, or None if no FAQ has this id
        """
        key = self._db.faqs.resolve_native_key(public_id)
        if key is None:
            return None
        self._db.faqs.update_one({"_id": key}, patch)
        return self._db.faqs.find_one({"_id": key})

    def delete(self, public_id: int) -> bool:
        return self._db.faqs.delete_by_public_id(public_id) > 0
