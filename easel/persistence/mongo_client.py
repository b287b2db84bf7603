"""MongoDB backend for Easel.

Connection pooling handled automatically by pymongo.
Thread-safe within a single process. Each process creates its own pool.

# =============================================================================
# Native Key Boundary
# =============================================================================
# MongoDB keys records with 12-byte ObjectIds. Nothing above persistence ever
# sees an ObjectId:
# - Outgoing records carry `_id` as its 24-char hex string.
# - Incoming `_id` filters and keys are converted back to ObjectId here.
# - A string that is not a valid ObjectId can never match; lookups by it
#   return None / 0 instead of raising.
# =============================================================================
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from easel.helpers.exceptions import ConflictError, StorageError
from easel.helpers.logging_helper import redact_uri
from easel.persistence.backend import COLLECTIONS, CollectionStore, Filter, SortSpec, StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "easel"

# (logical collection, field) pairs that must stay unique
UNIQUE_FIELDS = [("artworks", "slug"), ("users", "email")]


class _NoMatch(Exception):
    """Filter references an `_id` that cannot exist in this backend."""


def _to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise _NoMatch from None


def _native_filter(filter: Filter) -> dict[str, Any]:
    if not isinstance(filter, Mapping):
        raise StorageError(f"Filter must be a mapping, got {type(filter).__name__}")
    native = dict(filter)
    if "_id" in native:
        key = native["_id"]
        if isinstance(key, Mapping):
            native["_id"] = {
                op: [_to_object_id(v) for v in operand] if isinstance(operand, list) else _to_object_id(operand)
                for op, operand in key.items()
            }
        else:
            native["_id"] = _to_object_id(key)
    return native


def _to_record(doc: Mapping[str, Any]) -> dict[str, Any]:
    record = dict(doc)
    if "_id" in record:
        record["_id"] = str(record["_id"])
    return record


class MongoCollection(CollectionStore):
    """Native-key operations over one pymongo collection."""

    def __init__(self, name: str, collection: Collection) -> None:
        self.name = name
        self.collection = collection

    def new_key(self) -> str:
        return str(ObjectId())

    def fetch(self, filter: Filter, sort: SortSpec | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        if limit == 0:
            return []
        try:
            cursor = self.collection.find(_native_filter(filter))
            if sort:
                cursor = cursor.sort(sort)
            if limit is not None:
                cursor = cursor.limit(limit)
            return [_to_record(doc) for doc in cursor]
        except _NoMatch:
            return []
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"find on {self.name} failed: {exc}") from exc

    def find_one(self, filter: Filter) -> dict[str, Any] | None:
        try:
            doc = self.collection.find_one(_native_filter(filter))
        except _NoMatch:
            return None
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"find_one on {self.name} failed: {exc}") from exc
        return _to_record(doc) if doc is not None else None

    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        native = dict(doc)
        try:
            native["_id"] = _to_object_id(native.get("_id"))
        except _NoMatch:
            raise StorageError(f"Invalid native key for {self.name}") from None
        try:
            self.collection.insert_one(native)
        except DuplicateKeyError as exc:
            raise ConflictError(f"Duplicate unique value in {self.name}") from exc
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"insert into {self.name} failed: {exc}") from exc
        return _to_record(native)

    def replace(self, key: str, doc: dict[str, Any]) -> int:
        body = {k: v for k, v in doc.items() if k != "_id"}
        try:
            result = self.collection.replace_one({"_id": _to_object_id(key)}, body)
        except _NoMatch:
            return 0
        except DuplicateKeyError as exc:
            raise ConflictError(f"Duplicate unique value in {self.name}") from exc
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"replace in {self.name} failed: {exc}") from exc
        return int(result.matched_count)

    def remove(self, key: str) -> int:
        try:
            result = self.collection.delete_one({"_id": _to_object_id(key)})
        except _NoMatch:
            return 0
        except PyMongoError as exc:
            raise StorageError(f"delete from {self.name} failed: {exc}") from exc
        return int(result.deleted_count)

    def count(self, filter: Filter) -> int:
        try:
            return int(self.collection.count_documents(_native_filter(filter)))
        except _NoMatch:
            return 0
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"count on {self.name} failed: {exc}") from exc

    def set_field(self, key: str, field: str, value: Any) -> None:
        try:
            self.collection.update_one({"_id": _to_object_id(key)}, {"$set": {field: value}})
        except _NoMatch:
            return
        except (PyMongoError, BSONError) as exc:
            raise StorageError(f"update in {self.name} failed: {exc}") from exc


class MongoBackend(StorageBackend):
    """Networked backend. Public ids are recomputed on every read, never stored."""

    name = "mongodb"
    persists_numeric_id = False

    def __init__(self, client: MongoClient, database: str | None = None) -> None:
        self.client = client
        if database:
            self.db = client[database]
        else:
            self.db = client.get_default_database(default=DEFAULT_DATABASE)
        self._collections = {
            logical: MongoCollection(logical, self.db[native_name])
            for logical, (_, native_name) in COLLECTIONS.items()
        }

    def collection(self, name: str) -> MongoCollection:
        try:
            return self._collections[name]
        except KeyError:
            raise StorageError(f"Unknown collection: {name}") from None

    def ping(self) -> None:
        try:
            self.client.admin.command("ping")
        except PyMongoError as exc:
            raise StorageError(f"MongoDB ping failed: {exc}") from exc

    def ensure_indexes(self) -> None:
        """Create unique indexes. Idempotent - safe to call on every startup."""
        for logical, field in UNIQUE_FIELDS:
            try:
                self._collections[logical].collection.create_index([(field, ASCENDING)], unique=True)
            except OperationFailure as exc:
                logger.warning("[Store] Could not create unique index %s.%s: %s", logical, field, exc)

    def close(self) -> None:
        self.client.close()


def create_mongo_backend(uri: str, database: str | None = None, timeout_ms: int = 5000) -> MongoBackend:
    """Connect to MongoDB and verify the server answers within `timeout_ms`.

    Args:
        uri: Connection string (credentials are redacted in logs)
        database: Database name; defaults to the URI's database, then "easel"
        timeout_ms: Server selection timeout

    Returns:
        Connected MongoBackend

    Raises:
        StorageError: If the server cannot be reached in time
    """
    try:
        client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        backend = MongoBackend(client, database)
    except PyMongoError as exc:
        raise StorageError(f"Invalid MongoDB configuration: {exc}") from exc
    try:
        backend.ping()
    except StorageError:
        client.close()
        raise
    logger.info("[Store] Connected to MongoDB at %s", redact_uri(uri))
    return backend
