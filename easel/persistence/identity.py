"""Explicit numeric-id resolution for one collection.

Every record handed to callers carries `id`, the numeric public identifier
derived from its native `_id` (see helpers.numeric_id). How the id is kept
depends on the backend:

- Persisting backends (embedded store) write `id` next to the native key the
  first time a record without one is resolved, so resolve_native_key() can
  query it directly.
- Non-persisting backends (MongoDB) recompute `id` on every read and resolve
  public ids by scanning the collection and comparing hashes.

The native key itself is never modified.
"""

from __future__ import annotations

import logging
from typing import Any

from easel.helpers.numeric_id import numeric_id
from easel.persistence.backend import CollectionStore

logger = logging.getLogger(__name__)

PUBLIC_ID_FIELD = "id"

# Attempts at drawing a native key whose public id is unused before giving up
MAX_KEY_ATTEMPTS = 32


class IdentityResolver:
    """Maps native keys to public ids and back for one CollectionStore."""

    def __init__(self, store: CollectionStore, persist: bool) -> None:
        self.store = store
        self.persist = persist

    def resolve(self, record: dict[str, Any]) -> dict[str, Any]:
        """Attach the public id to a record read from the store.

        For persisting backends a missing or stale stored id is written back.

        Returns:
            The same record, with `id` set
        """
        expected = numeric_id(record["_id"])
        if self.persist and record.get(PUBLIC_ID_FIELD) != expected:
            self.store.set_field(record["_id"], PUBLIC_ID_FIELD, expected)
        record[PUBLIC_ID_FIELD] = expected
        return record

    def resolve_native_key(self, public_id: int) -> str | None:
        """Find the native key whose hash equals `public_id`.

        Returns:
            Native key, or None when no record hashes to the id
        """
        if self.persist:
            doc = self.store.find_one({PUBLIC_ID_FIELD: public_id})
            if doc is not None and numeric_id(doc["_id"]) == public_id:
                return str(doc["_id"])
        for doc in self.store.fetch({}):
            if numeric_id(doc["_id"]) == public_id:
                return str(doc["_id"])
        return None

    def allocate_key(self) -> str:
        """Draw a fresh native key whose public id collides with no existing record.

        Raises:
            RuntimeError: If no collision-free key was found (practically unreachable)
        """
        taken = {numeric_id(doc["_id"]) for doc in self.store.fetch({})}
        for _ in range(MAX_KEY_ATTEMPTS):
            key = self.store.new_key()
            if numeric_id(key) not in taken:
                return key
            logger.warning("[Store] Public id collision in %s, drawing a new key", self.store.name)
        msg = f"Could not allocate a collision-free key in {self.store.name}"
        raise RuntimeError(msg)
