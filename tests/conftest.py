"""
Pytest fixtures and configuration for the test suite.

Strategy:
- Use the real embedded store in a tmp_path directory for persistence tests
- Mock pymongo with MagicMock (no MongoDB server needed)
- Build a fresh Application per API test and swap it in for the module singleton
"""

import sys
from pathlib import Path

import pytest

# Add project root to path so tests can import the easel package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# === STORAGE FIXTURES ===


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Directory for embedded store files."""
    path = tmp_path / "nedb"
    path.mkdir()
    return path


@pytest.fixture
def embedded_backend(data_dir):
    """Real embedded backend over a temporary directory."""
    from easel.persistence.embedded_store import EmbeddedBackend

    backend = EmbeddedBackend(str(data_dir))
    yield backend
    backend.close()


@pytest.fixture
def test_db(embedded_backend):
    """Database over the embedded backend."""
    from easel.persistence.db import Database

    return Database(embedded_backend)


# === SERVICE FIXTURES ===


@pytest.fixture
def keys_service():
    from easel.services.infrastructure.keys_svc import KeyManagementService

    return KeyManagementService(session_timeout_s=3600)


@pytest.fixture
def user_service(test_db, keys_service):
    from easel.services.domain.user_svc import UserService

    return UserService(test_db, keys_service)


# === APPLICATION FIXTURES ===


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def app_overrides(tmp_path) -> dict:
    """Config overrides for a self-contained Application under tmp_path."""
    return {
        "use_mongodb": False,
        "data_dir": str(tmp_path / "nedb"),
        "seed_sample_data": False,
        "admin_email": ADMIN_EMAIL,
        "admin_password": ADMIN_PASSWORD,
        "serve_site": False,
        "assets_dir": str(tmp_path / "attached_assets"),
        "rebuild": {
            "enabled": True,
            "root_dir": str(tmp_path),
            "output_root": str(tmp_path / "dist"),
            "commands": [],
            "cooldown_s": 10,
            "cleanup_delay_s": 0,
        },
    }


@pytest.fixture
def application(app_overrides, monkeypatch):
    """Started Application installed as easel.app.application."""
    import easel.app as app_module
    from easel.app import Application

    instance = Application(config_overrides=app_overrides)
    instance.start()
    monkeypatch.setattr(app_module, "application", instance)
    yield instance
    instance.stop()
