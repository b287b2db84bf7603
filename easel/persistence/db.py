"""
Application database.

Handles all content persistence over whichever StorageBackend was selected at
startup. Single source of truth for storage access across all services: no
component holds a file handle or connection outside this object.
"""

from __future__ import annotations

import logging

from easel.persistence.backend import StorageBackend
from easel.persistence.database.collection_ops import CollectionOperations

__all__ = ["Database"]

logger = logging.getLogger(__name__)


class Database:
    """
    The five fixed collections over one backend.

    Attributes match the logical collection names:
    artworks, artist, faqs, users, settings.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

        # One operations object per collection (exact logical names)
        self.artworks = CollectionOperations(backend, "artworks")
        self.artist = CollectionOperations(backend, "artist")
        self.faqs = CollectionOperations(backend, "faqs")
        self.users = CollectionOperations(backend, "users")
        self.settings = CollectionOperations(backend, "settings")

    @property
    def backend_name(self) -> str:
        """Backend identifier for logs only. Never returned to clients."""
        return self.backend.name

    def ping(self) -> None:
        """Trivial storage check used by the health endpoint."""
        self.backend.ping()
        self.artworks.find().limit(1).all()

    def close(self):
        """Close the backend (compacts embedded files, closes the Mongo pool)."""
        self.backend.close()
