"""Embedded file-based document store.

Zero-dependency backend used when no networked database is configured (or
when it cannot be reached at startup). Layout: one file per collection under
a fixed data directory, newline-delimited JSON, append-only.

File format:
- Each line is a full record carrying its `_id` (16 alphanumeric chars).
- A later line for the same `_id` supersedes earlier ones.
- `{"$$deleted": true, "_id": ...}` tombstones a record.
- Files are compacted on load (rewritten through a temp file + os.replace).

All records live in memory; reads never touch disk. Every write appends one
line before returning, so a single caller always observes its own writes.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import secrets
import string
import threading
from typing import Any

from easel.helpers.exceptions import StorageError
from easel.persistence.backend import (
    COLLECTIONS,
    CollectionStore,
    Filter,
    SortSpec,
    StorageBackend,
    matches,
    sort_records,
    validate_filter,
)

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_letters + string.digits
KEY_LENGTH = 16
TOMBSTONE = "$$deleted"


def _dumps(doc: dict[str, Any]) -> str:
    try:
        return json.dumps(doc, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Record is not JSON-serializable: {exc}") from exc


class EmbeddedCollection(CollectionStore):
    """One collection persisted in one append-only file."""

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self.path = path
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._load()

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------
    def _load(self) -> None:
        if not os.path.exists(self.path):
            self._touch()
            return
        corrupt = 0
        try:
            with open(self.path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        doc = json.loads(line)
                    except json.JSONDecodeError:
                        corrupt += 1
                        continue
                    key = doc.get("_id") if isinstance(doc, dict) else None
                    if not isinstance(key, str):
                        corrupt += 1
                        continue
                    if doc.get(TOMBSTONE):
                        self._docs.pop(key, None)
                    else:
                        self._docs[key] = doc
        except OSError as exc:
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc
        if corrupt:
            logger.warning("[Store] Skipped %d corrupt line(s) in %s", corrupt, self.path)
        self._compact()

    def _touch(self) -> None:
        try:
            with open(self.path, "a", encoding="utf-8"):
                pass
        except OSError as exc:
            raise StorageError(f"Failed to create {self.path}: {exc}") from exc

    def _compact(self) -> None:
        tmp_path = f"{self.path}~"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                for doc in self._docs.values():
                    f.write(_dumps(doc) + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Failed to compact {self.path}: {exc}") from exc

    def _append(self, doc: dict[str, Any]) -> None:
        line = _dumps(doc) + "\n"
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # CollectionStore
    # ------------------------------------------------------------------
    def new_key(self) -> str:
        with self._lock:
            while True:
                key = "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_LENGTH))
                if key not in self._docs:
                    return key

    def fetch(self, filter: Filter, sort: SortSpec | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        validate_filter(filter)
        with self._lock:
            hits = [doc for doc in self._docs.values() if matches(doc, filter)]
            if sort:
                hits = sort_records(hits, sort)
            if limit is not None:
                hits = hits[:limit]
            return copy.deepcopy(hits)

    def find_one(self, filter: Filter) -> dict[str, Any] | None:
        validate_filter(filter)
        with self._lock:
            key = filter.get("_id") if isinstance(filter, dict) and len(filter) == 1 else None
            if isinstance(key, str):
                doc = self._docs.get(key)
                return copy.deepcopy(doc) if doc is not None else None
            for doc in self._docs.values():
                if matches(doc, filter):
                    return copy.deepcopy(doc)
            return None

    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        key = doc.get("_id")
        if not isinstance(key, str) or not key:
            raise StorageError("Embedded records need a string _id")
        with self._lock:
            if key in self._docs:
                raise StorageError(f"Duplicate _id in {self.name}")
            stored = copy.deepcopy(doc)
            self._append(stored)
            self._docs[key] = stored
            return copy.deepcopy(stored)

    def replace(self, key: str, doc: dict[str, Any]) -> int:
        with self._lock:
            if key not in self._docs:
                return 0
            stored = copy.deepcopy(doc)
            stored["_id"] = key
            self._append(stored)
            self._docs[key] = stored
            return 1

    def remove(self, key: str) -> int:
        with self._lock:
            if key not in self._docs:
                return 0
            self._append({"_id": key, TOMBSTONE: True})
            del self._docs[key]
            return 1

    def count(self, filter: Filter) -> int:
        validate_filter(filter)
        with self._lock:
            if not filter:
                return len(self._docs)
            return sum(1 for doc in self._docs.values() if matches(doc, filter))

    def set_field(self, key: str, field: str, value: Any) -> None:
        with self._lock:
            doc = self._docs.get(key)
            if doc is None:
                return
            updated = dict(doc)
            updated[field] = value
            self._append(updated)
            self._docs[key] = updated


class EmbeddedBackend(StorageBackend):
    """File-based backend: one EmbeddedCollection per logical collection."""

    name = "embedded"
    persists_numeric_id = True

    def __init__(self, data_dir: str) -> None:
        self.data_dir = data_dir
        try:
            os.makedirs(data_dir, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to create data directory '{data_dir}': {exc}") from exc
        self._collections = {
            logical: EmbeddedCollection(logical, os.path.join(data_dir, filename))
            for logical, (filename, _) in COLLECTIONS.items()
        }
        logger.info("[Store] Embedded store ready (%d collections)", len(self._collections))

    def collection(self, name: str) -> EmbeddedCollection:
        try:
            return self._collections[name]
        except KeyError:
            raise StorageError(f"Unknown collection: {name}") from None

    def ping(self) -> None:
        if not os.path.isdir(self.data_dir):
            raise StorageError("Embedded data directory is missing")

    def close(self) -> None:
        for collection in self._collections.values():
            with collection._lock:
                collection._compact()
