"""
Application composition root and dependency injection container.

This module defines the Application class, which serves as the DI container
and lifecycle manager for Easel. The storage backend, all services and the
rebuild orchestrator are owned and initialized by the Application instance.

Architecture:
- Application owns: config, db, services, rebuild orchestrator, upload directory
- All configuration values are instance attributes (no module-level config globals)
- Services are registered via register_service() during start()
- Access services via: application.get_service("name") or application.services["name"]
- Do NOT construct services directly outside of this class

The singleton instance is available as `application` at module level.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from easel.components.platform.store_bootstrap_comp import connect_store, ensure_admin_user, seed_sample_data
from easel.persistence.db import Database
from easel.services.domain.artist_svc import ArtistService
from easel.services.domain.artwork_svc import ArtworkService
from easel.services.domain.faq_svc import FaqService
from easel.services.domain.settings_svc import SettingsService
from easel.services.domain.user_svc import UserService
from easel.services.infrastructure.config_svc import ConfigService, is_truthy
from easel.services.infrastructure.image_upload_svc import ImageUploadService
from easel.services.infrastructure.keys_svc import KeyManagementService
from easel.services.infrastructure.rebuild_svc import RebuildOrchestrator

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
#  Application Class - Composition Root & DI Container
# ----------------------------------------------------------------------
class Application:
    """
    Application composition root and dependency injection container.

    Configuration Access:
    - Raw config is PRIVATE (_config) and used only internally in Application
    - To access config elsewhere, use: application.get_service("config").get_config()
    - Prefer the specific instance attributes (api_host, data_dir, etc.)
    """

    def __init__(self, config_overrides: dict[str, Any] | None = None):
        """
        Initialize application with configuration only.

        The storage backend is selected and services are created in start(),
        so importing this module never touches the network or the filesystem.
        """
        config_service = ConfigService(overrides=config_overrides)
        self._config = config_service.get_config()
        self._config_service = config_service

        # Storage
        self.use_mongodb: bool = config_service.use_mongodb()
        self.mongodb_uri: str | None = self._config.get("mongodb_uri")
        self.mongodb_database: str | None = self._config.get("mongodb_database")
        self.mongodb_timeout_ms: int = int(self._config.get("mongodb_timeout_ms", 5000))
        self.data_dir: str = os.path.abspath(str(self._config["data_dir"]))

        # First-run content and admin bootstrap
        self.seed_sample_data: bool = is_truthy(self._config.get("seed_sample_data"))
        self.seed_dir: str = str(self._config["seed_dir"])
        self.admin_email: str = str(self._config["admin_email"])
        self.admin_password_config: str | None = self._config.get("admin_password")
        self.session_timeout_s: int = int(self._config["session_timeout_s"])

        # HTTP server
        self.api_host: str = str(self._config["host"])
        self.api_port: int = int(self._config["port"])
        self.serve_site: bool = is_truthy(self._config.get("serve_site"))

        # Uploaded images
        self.assets_dir: str = os.path.abspath(str(self._config["assets_dir"]))
        self.upload_max_bytes: int = int(self._config["upload_max_bytes"])

        # Core dependencies (created in start())
        self.db: Database | None = None
        self.rebuild: RebuildOrchestrator | None = None

        # Services container (DI registry)
        self.services: dict[str, Any] = {}

        # Auth
        self.admin_password: str | None = None

        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def live_dir(self) -> str | None:
        """Directory the static site is served from (None before start())."""
        return self.rebuild.paths.live if self.rebuild is not None else None

    def register_service(self, name: str, service: Any) -> None:
        """
        Register a service in the DI container.

        Args:
            name: Service name for lookup
            service: Service instance
        """
        self.services[name] = service

    def get_service(self, name: str) -> Any:
        """
        Get a service from the DI container.

        Raises:
            KeyError: If service not found
        """
        if name not in self.services:
            raise KeyError(f"Service '{name}' not found. Available services: {list(self.services.keys())}")
        return self.services[name]

    def start(self) -> None:
        """
        Start the application.

        This method:
        1. Selects the storage backend (networked first if configured, else embedded)
        2. Seeds sample content into an empty store
        3. Ensures the admin account exists
        4. Registers all services in self.services (DI container)
        5. Creates the rebuild orchestrator
        """
        if self._running:
            logger.warning("[Application] Already running, ignoring start() call")
            return

        logger.info("[Application] Starting...")
        self.register_service("config", self._config_service)

        backend = connect_store(
            self.use_mongodb,
            self.mongodb_uri,
            self.data_dir,
            mongodb_database=self.mongodb_database,
            timeout_ms=self.mongodb_timeout_ms,
        )
        self.db = Database(backend)

        if self.seed_sample_data:
            seed_sample_data(self.db, self.seed_dir)

        keys_service = KeyManagementService(session_timeout_s=self.session_timeout_s)
        self.register_service("keys", keys_service)
        generated = ensure_admin_user(
            self.db,
            self.admin_email,
            keys_service.hash_password,
            config_password=self.admin_password_config,
        )
        self.admin_password = generated or None

        self.register_service("artworks", ArtworkService(self.db))
        self.register_service("artist", ArtistService(self.db))
        self.register_service("faqs", FaqService(self.db))
        self.register_service("settings", SettingsService(self.db))
        self.register_service("users", UserService(self.db, keys_service))
        self.register_service("images", ImageUploadService(self.assets_dir, max_bytes=self.upload_max_bytes))

        self.rebuild = RebuildOrchestrator(self._config_service.make_rebuild_settings())
        self.register_service("rebuild", self.rebuild)

        self._running = True
        logger.info(f"[Application] Started with {self.db.backend_name} storage")

    def stop(self) -> None:
        """Stop the application and release the storage backend."""
        if not self._running:
            return
        logger.info("[Application] Stopping...")
        if self.db is not None:
            self.db.close()
        self.services.clear()
        self._running = False
        logger.info("[Application] Stopped")


# ----------------------------------------------------------------------
#  Singleton instance
# ----------------------------------------------------------------------
application = Application()
