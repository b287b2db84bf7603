"""
Tests for backend selection, sample data seeding and admin provisioning.
"""

from unittest.mock import MagicMock

import pytest

from easel.components.platform import store_bootstrap_comp
from easel.components.platform.store_bootstrap_comp import (
    DEFAULT_SETTINGS,
    connect_store,
    ensure_admin_user,
    seed_sample_data,
)
from easel.helpers.exceptions import StorageError
from easel.persistence.embedded_store import EmbeddedBackend
from easel.services.infrastructure.config_svc import SEED_DIR

pytestmark = pytest.mark.unit


def _fake_hash(password: str) -> str:
    return f"hashed:{password}"


class TestConnectStore:
    def test_embedded_when_networked_disabled(self, data_dir, monkeypatch):
        factory = MagicMock()
        monkeypatch.setattr(store_bootstrap_comp, "create_mongo_backend", factory)

        backend = connect_store(False, "mongodb://db:27017/easel", str(data_dir))

        assert isinstance(backend, EmbeddedBackend)
        factory.assert_not_called()

    def test_falls_back_to_embedded_when_unreachable(self, data_dir, monkeypatch):
        factory = MagicMock(side_effect=StorageError("no servers"))
        monkeypatch.setattr(store_bootstrap_comp, "create_mongo_backend", factory)

        backend = connect_store(True, "mongodb://user:secret@db:27017/easel", str(data_dir), timeout_ms=10)

        assert isinstance(backend, EmbeddedBackend)
        assert backend.persists_numeric_id is True

    def test_fallback_warning_redacts_credentials(self, data_dir, monkeypatch, caplog):
        monkeypatch.setattr(store_bootstrap_comp, "create_mongo_backend", MagicMock(side_effect=StorageError("down")))

        with caplog.at_level("WARNING"):
            connect_store(True, "mongodb://user:secret@db:27017/easel", str(data_dir))

        assert "falling back" in caplog.text
        assert "secret" not in caplog.text

    def test_uses_networked_backend_when_reachable(self, data_dir, monkeypatch):
        backend = MagicMock()
        monkeypatch.setattr(store_bootstrap_comp, "create_mongo_backend", MagicMock(return_value=backend))

        assert connect_store(True, "mongodb://db:27017/easel", str(data_dir)) is backend
        backend.ensure_indexes.assert_called_once()

    def test_missing_uri_uses_embedded(self, data_dir):
        assert isinstance(connect_store(True, None, str(data_dir)), EmbeddedBackend)


class TestSeedSampleData:
    def test_seeds_empty_store(self, test_db):
        assert seed_sample_data(test_db, SEED_DIR) is True

        assert test_db.artworks.count() == 4
        assert test_db.artist.count() == 1
        assert test_db.faqs.count() == 4
        settings = test_db.settings.find_one()
        for key, value in DEFAULT_SETTINGS.items():
            assert settings[key] == value

    def test_seed_artworks_have_public_ids(self, test_db):
        seed_sample_data(test_db, SEED_DIR)
        sunrise = test_db.artworks.find_one({"slug": "sunrise-over-the-marsh"})
        assert isinstance(sunrise["id"], int)
        assert sunrise["category"] == "original"

    def test_second_run_is_noop(self, test_db):
        seed_sample_data(test_db, SEED_DIR)
        assert seed_sample_data(test_db, SEED_DIR) is False
        assert test_db.artworks.count() == 4
        assert test_db.settings.count() == 1

    def test_missing_seed_files_still_create_settings(self, test_db, tmp_path):
        assert seed_sample_data(test_db, str(tmp_path)) is True
        assert test_db.artworks.count() == 0
        assert test_db.settings.count() == 1

    def test_malformed_seed_file_raises(self, test_db, tmp_path):
        (tmp_path / "artworks.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            seed_sample_data(test_db, str(tmp_path))


class TestEnsureAdminUser:
    def test_creates_admin_with_config_password(self, test_db):
        generated = ensure_admin_user(test_db, "Admin@Example.com", _fake_hash, "from-config")

        assert generated == ""
        user = test_db.users.find_one({"email": "admin@example.com"})
        assert user["role"] == "admin"
        assert user["password"] == "hashed:from-config"

    def test_generates_password_when_not_configured(self, test_db):
        generated = ensure_admin_user(test_db, "admin@example.com", _fake_hash)

        assert len(generated) >= 16
        user = test_db.users.find_one({"email": "admin@example.com"})
        assert user["password"] == f"hashed:{generated}"

    def test_existing_user_is_promoted_not_rehashed(self, test_db):
        test_db.users.create({"email": "admin@example.com", "password": "hashed:old", "role": "user"})

        assert ensure_admin_user(test_db, "admin@example.com", _fake_hash, "new") == ""

        user = test_db.users.find_one({"email": "admin@example.com"})
        assert user["role"] == "admin"
        assert user["password"] == "hashed:old"
        assert test_db.users.count() == 1

    def test_idempotent(self, test_db):
        ensure_admin_user(test_db, "admin@example.com", _fake_hash, "pw")
        ensure_admin_user(test_db, "admin@example.com", _fake_hash, "pw")
        assert test_db.users.count() == 1
