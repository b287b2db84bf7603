"""Storage bootstrap component.

Startup-only operations, run once by Application.start():
  - Select the storage backend (networked first when configured, embedded on failure)
  - Seed sample content into an empty store
  - Make sure the configured admin account exists

CRITICAL INVARIANTS:
  1. Backend selection happens exactly once per process; the result never changes
  2. A failed networked connection never aborts startup, it degrades to embedded
  3. Seeding only runs when the artworks collection is empty
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from collections.abc import Callable
from typing import Any

from easel.helpers.exceptions import StorageError
from easel.helpers.logging_helper import redact_uri
from easel.persistence.backend import StorageBackend
from easel.persistence.db import Database
from easel.persistence.embedded_store import EmbeddedBackend
from easel.persistence.mongo_client import create_mongo_backend

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {"accentHue": 186, "accentSaturation": 68, "accentLightness": 45}


def connect_store(
    use_mongodb: bool,
    mongodb_uri: str | None,
    data_dir: str,
    mongodb_database: str | None = None,
    timeout_ms: int = 5000,
) -> StorageBackend:
    """Select and open the storage backend for this process.

    Args:
        use_mongodb: Try the networked backend first
        mongodb_uri: Connection string for the networked backend
        data_dir: Directory for the embedded backend's files
        mongodb_database: Database name override
        timeout_ms: How long to wait for the networked backend

    Returns:
        The selected backend

    Raises:
        StorageError: Only if the embedded backend cannot be opened either
    """
    if use_mongodb and mongodb_uri:
        try:
            backend = create_mongo_backend(mongodb_uri, mongodb_database, timeout_ms)
        except StorageError as e:
            logger.warning(f"[Store] MongoDB at {redact_uri(mongodb_uri)} unavailable ({e}); falling back to embedded store")
        else:
            backend.ensure_indexes()
            return backend
    elif use_mongodb:
        logger.warning("[Store] use_mongodb is set but no mongodb_uri configured; using embedded store")

    logger.info(f"[Store] Using embedded store at {data_dir}")
    return EmbeddedBackend(data_dir)


def _read_seed(seed_dir: str, filename: str) -> Any:
    path = os.path.join(seed_dir, filename)
    if not os.path.exists(path):
        logger.warning(f"[Store] Seed file missing: {path}")
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read seed file {path}: {e}") from e


def seed_sample_data(db: Database, seed_dir: str) -> bool:
    """Load sample artworks, artist info, FAQs and default settings into an empty store.

    Returns:
        True if data was seeded, False if the store already had content
    """
    if db.artworks.count() > 0:
        logger.info("[Store] Existing content found, skipping sample data")
        return False

    logger.info("[Store] Loading initial sample data...")
    artworks = _read_seed(seed_dir, "artworks.json") or []
    for artwork in artworks:
        db.artworks.create(artwork)
    logger.info(f"[Store] Loaded {len(artworks)} artworks")

    artist = _read_seed(seed_dir, "artist.json")
    if artist and db.artist.count() == 0:
        db.artist.create(artist)
        logger.info("[Store] Loaded artist info")

    faqs = _read_seed(seed_dir, "faqs.json") or []
    for faq in faqs:
        db.faqs.create(faq)
    logger.info(f"[Store] Loaded {len(faqs)} FAQs")

    if db.settings.count() == 0:
        db.settings.create(DEFAULT_SETTINGS)
        logger.info("[Store] Created default site settings")
    return True


def ensure_admin_user(
    db: Database,
    admin_email: str,
    hash_password: Callable[[str], str],
    config_password: str | None = None,
) -> str:
    """Make sure the configured admin account exists with the admin role.

    On first run:
    - If config_password is provided, hash and store it
    - If not provided, generate a random password and log it once

    An existing account with the configured email is promoted to admin if
    needed; its password is left alone.

    Returns:
        Plaintext password if auto-generated (for logging), empty string otherwise
    """
    email = admin_email.strip().lower()
    existing = db.users.find_one({"email": email})
    if existing is not None:
        if existing.get("role") != "admin":
            db.users.update_one({"_id": existing["_id"]}, {"role": "admin"})
            logger.warning(f"[Auth] Promoted {email} to admin")
        return ""

    if config_password:
        db.users.create({"email": email, "password": hash_password(config_password), "role": "admin"})
        logger.info(f"[Auth] Admin user {email} created with password from config.")
        return ""

    random_password = secrets.token_urlsafe(16)
    db.users.create({"email": email, "password": hash_password(random_password), "role": "admin"})
    logger.warning("[Auth] ========================================")
    logger.warning(f"[Auth] AUTO-GENERATED PASSWORD FOR {email}:")
    logger.warning(f"[Auth]   {random_password}")
    logger.warning("[Auth] ========================================")
    logger.warning("[Auth] Save this password - it won't be shown again!")
    return random_password


__all__ = [
    "DEFAULT_SETTINGS",
    "connect_store",
    "ensure_admin_user",
    "seed_sample_data",
]
