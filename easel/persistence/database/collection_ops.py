"""Document operations for one logical collection.

This is the uniform CRUD contract the content services consume. It behaves
identically over both backends:

- find(filter) -> Query        chain .sort(spec).limit(n), then .all()
- find_one(filter) -> record | None
- create(doc) -> record
- update_one(filter, patch) -> affected count   (merge-then-replace)
- delete_one(filter) -> affected count
- count(filter) -> int

Plus the write-by-public-id family used by admin endpoints, which resolve the
numeric id to a native key first and report 0 / None when nothing hashes to it.

CRITICAL: filters use native-meaningful fields (or `_id` with a native key);
filtering on the public `id` is rejected, use the *_by_public_id methods.

Check-then-write sequences (singleton upserts, unique-field checks) must hold
`lock` for their whole duration: routes run in a threadpool and the backends
only serialize single operations.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from easel.helpers.exceptions import StorageError
from easel.helpers.time_helper import now_ms
from easel.persistence.backend import Filter, Query, StorageBackend
from easel.persistence.identity import PUBLIC_ID_FIELD, IdentityResolver

logger = logging.getLogger(__name__)

# Fields callers may never set directly
_RESERVED_FIELDS = frozenset({"_id", PUBLIC_ID_FIELD})


class CollectionOperations:
    """Operations for one of the five collections."""

    def __init__(self, backend: StorageBackend, name: str, timestamps: bool = True) -> None:
        self.name = name
        self.store = backend.collection(name)
        self.identity = IdentityResolver(self.store, persist=backend.persists_numeric_id)
        self.timestamps = timestamps
        self.lock = threading.RLock()

    def _check_filter(self, filter: Filter | None) -> Filter:
        if filter is None:
            return {}
        if not isinstance(filter, Mapping):
            raise StorageError(f"Filter must be a mapping, got {type(filter).__name__}")
        if PUBLIC_ID_FIELD in filter:
            raise StorageError(f"Cannot filter {self.name} on public id; use the *_by_public_id operations")
        return filter

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find(self, filter: Filter | None = None) -> Query:
        """Start a query; nothing is read until the Query is materialized."""
        return Query(self.store, self._check_filter(filter), self.identity.resolve)

    def find_one(self, filter: Filter | None = None) -> dict[str, Any] | None:
        doc = self.store.find_one(self._check_filter(filter))
        return self.identity.resolve(doc) if doc is not None else None

    def count(self, filter: Filter | None = None) -> int:
        return self.store.count(self._check_filter(filter))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a new record. Any caller-supplied `_id` / `id` is ignored.

        Returns:
            The stored record, including its public `id`
        """
        body = {k: v for k, v in doc.items() if k not in _RESERVED_FIELDS}
        if self.timestamps:
            now = now_ms()
            body.setdefault("createdAt", now)
            body["updatedAt"] = now
        with self.lock:
            body["_id"] = self.identity.allocate_key()
            stored = self.store.insert(body)
        return self.identity.resolve(stored)

    def update_one(self, filter: Filter, patch: Mapping[str, Any]) -> int:
        """Shallow-merge `patch` into the first match and write the full record back.

        Returns:
            1 if a record was updated, 0 if nothing matched
        """
        filter = self._check_filter(filter)
        with self.lock:
            existing = self.store.find_one(filter)
            if existing is None:
                return 0
            return self._merge_and_replace(existing, patch)

    def delete_one(self, filter: Filter) -> int:
        existing = self.store.find_one(self._check_filter(filter))
        if existing is None:
            return 0
        return self.store.remove(existing["_id"])

    def _merge_and_replace(self, existing: dict[str, Any], patch: Mapping[str, Any]) -> int:
        merged = {**existing, **{k: v for k, v in patch.items() if k not in _RESERVED_FIELDS}}
        if self.timestamps:
            merged["updatedAt"] = now_ms()
        return self.store.replace(existing["_id"], merged)

    # ------------------------------------------------------------------
    # By public id
    # ------------------------------------------------------------------
    def resolve_native_key(self, public_id: int) -> str | None:
        return self.identity.resolve_native_key(public_id)

    def get_by_public_id(self, public_id: int) -> dict[str, Any] | None:
        key = self.resolve_native_key(public_id)
        if key is None:
            return None
        return self.find_one({"_id": key})

    def update_by_public_id(self, public_id: int, patch: Mapping[str, Any]) -> int:
        key = self.resolve_native_key(public_id)
        if key is None:
            return 0
        return self.update_one({"_id": key}, patch)

    def delete_by_public_id(self, public_id: int) -> int:
        key = self.resolve_native_key(public_id)
        if key is None:
            return 0
        return self.store.remove(key)
