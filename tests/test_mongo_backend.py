"""
Tests for the MongoDB backend using mocked pymongo objects (no server needed).
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError, ServerSelectionTimeoutError

from easel.helpers.exceptions import ConflictError, StorageError
from easel.helpers.numeric_id import numeric_id
from easel.persistence import mongo_client
from easel.persistence.database.collection_ops import CollectionOperations
from easel.persistence.mongo_client import MongoBackend, MongoCollection, create_mongo_backend

pytestmark = pytest.mark.unit

OID = ObjectId("65a1f0c2e4b0a1b2c3d4e5f6")


def _backend() -> MongoBackend:
    """Backend whose collections are distinct mocks."""
    client = MagicMock()
    collections: dict = {}
    client.__getitem__.return_value.__getitem__.side_effect = lambda name: collections.setdefault(name, MagicMock())
    return MongoBackend(client, "easel")


@pytest.fixture
def raw_collection():
    return MagicMock()


@pytest.fixture
def store(raw_collection):
    return MongoCollection("artworks", raw_collection)


class TestMongoCollection:
    def test_new_key_is_object_id_hex(self, store):
        key = store.new_key()
        assert ObjectId.is_valid(key)
        assert len(key) == 24

    def test_find_one_converts_object_id_to_str(self, store, raw_collection):
        raw_collection.find_one.return_value = {"_id": OID, "slug": "sunrise"}
        doc = store.find_one({"slug": "sunrise"})
        assert doc == {"_id": str(OID), "slug": "sunrise"}

    def test_id_filters_are_converted_to_object_id(self, store, raw_collection):
        raw_collection.find_one.return_value = None
        store.find_one({"_id": str(OID)})
        raw_collection.find_one.assert_called_once_with({"_id": OID})

    def test_invalid_id_never_matches(self, store, raw_collection):
        assert store.find_one({"_id": "not-an-object-id"}) is None
        assert store.remove("not-an-object-id") == 0
        assert store.count({"_id": "nope"}) == 0
        raw_collection.find_one.assert_not_called()
        raw_collection.delete_one.assert_not_called()

    def test_fetch_applies_sort_and_limit(self, store, raw_collection):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.__iter__.return_value = iter([{"_id": OID, "title": "A"}])
        raw_collection.find.return_value = cursor

        docs = store.fetch({"featured": True}, sort=[("createdAt", -1)], limit=3)

        raw_collection.find.assert_called_once_with({"featured": True})
        cursor.sort.assert_called_once_with([("createdAt", -1)])
        cursor.limit.assert_called_once_with(3)
        assert docs == [{"_id": str(OID), "title": "A"}]

    def test_insert_stores_object_id(self, store, raw_collection):
        doc = store.insert({"_id": str(OID), "slug": "sunrise"})
        inserted = raw_collection.insert_one.call_args[0][0]
        assert inserted["_id"] == OID
        assert doc["_id"] == str(OID)

    def test_duplicate_key_becomes_conflict(self, store, raw_collection):
        raw_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(ConflictError):
            store.insert({"_id": str(OID), "slug": "sunrise"})

    def test_driver_errors_become_storage_errors(self, store, raw_collection):
        raw_collection.find_one.side_effect = PyMongoError("connection reset")
        with pytest.raises(StorageError):
            store.find_one({"slug": "x"})

    def test_replace_sends_full_document_without_id(self, store, raw_collection):
        raw_collection.replace_one.return_value.matched_count = 1
        assert store.replace(str(OID), {"_id": str(OID), "title": "B"}) == 1
        raw_collection.replace_one.assert_called_once_with({"_id": OID}, {"title": "B"})


class TestMongoBackend:
    def test_maps_logical_names_to_native_collections(self):
        client = MagicMock()
        MongoBackend(client, "easel")
        client.__getitem__.assert_called_once_with("easel")
        db = client.__getitem__.return_value
        db.__getitem__.assert_any_call("artistinfos")
        db.__getitem__.assert_any_call("sitesettings")

    def test_does_not_persist_public_ids(self):
        assert MongoBackend(MagicMock(), "easel").persists_numeric_id is False

    def test_ensure_indexes_creates_unique_indexes(self):
        backend = _backend()
        backend.ensure_indexes()
        backend.collection("artworks").collection.create_index.assert_called_once_with([("slug", 1)], unique=True)
        backend.collection("users").collection.create_index.assert_called_once_with([("email", 1)], unique=True)

    def test_public_ids_are_recomputed_not_written(self):
        backend = _backend()
        ops = CollectionOperations(backend, "artworks")
        raw = backend.collection("artworks").collection
        raw.find_one.return_value = {"_id": OID, "slug": "sunrise"}

        doc = ops.find_one({"slug": "sunrise"})

        assert doc["id"] == numeric_id(str(OID))
        raw.update_one.assert_not_called()

    def test_resolve_by_scanning(self):
        backend = _backend()
        ops = CollectionOperations(backend, "artworks")
        other = ObjectId("65a1f0c2e4b0a1b2c3d4e5f7")
        cursor = MagicMock()
        cursor.__iter__.return_value = iter([{"_id": other}, {"_id": OID}])
        backend.collection("artworks").collection.find.return_value = cursor

        assert ops.resolve_native_key(numeric_id(str(OID))) == str(OID)


class TestCreateMongoBackend:
    def test_unreachable_server_raises_storage_error(self, monkeypatch):
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        monkeypatch.setattr(mongo_client, "MongoClient", MagicMock(return_value=client))

        with pytest.raises(StorageError):
            create_mongo_backend("mongodb://user:secret@db:27017/easel", timeout_ms=10)
        client.close.assert_called_once()

    def test_passes_timeout_to_client(self, monkeypatch):
        factory = MagicMock()
        monkeypatch.setattr(mongo_client, "MongoClient", factory)

        backend = create_mongo_backend("mongodb://db:27017/easel", "gallery", timeout_ms=1234)

        factory.assert_called_once_with("mongodb://db:27017/easel", serverSelectionTimeoutMS=1234)
        assert backend.name == "mongodb"
