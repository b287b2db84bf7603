"""
Site settings service - the singleton accent-color record.

Reading settings creates the default record when none exists, so there is
always exactly one after the first read or write.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from easel.components.platform.store_bootstrap_comp import DEFAULT_SETTINGS
from easel.helpers.exceptions import ContentValidationError

if TYPE_CHECKING:
    from easel.persistence.db import Database

logger = logging.getLogger(__name__)

# field -> (min, max), inclusive
SETTING_BOUNDS = {
    "accentHue": (0, 360),
    "accentSaturation": (0, 100),
    "accentLightness": (0, 100),
}


def validate_settings(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Check accent values against their ranges.

    Unknown keys pass through untouched.

    Raises:
        ContentValidationError: First out-of-range or non-numeric value
    """
    clean = dict(patch)
    for field, (low, high) in SETTING_BOUNDS.items():
        if field not in clean:
            continue
        value = clean[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ContentValidationError(f"{field} must be a number")
        if not low <= value <= high:
            raise ContentValidationError(f"{field} must be between {low} and {high}")
    return clean


class SettingsService:
    """Service for the site settings singleton."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self) -> dict[str, Any]:
        with self._db.settings.lock:
            settings = self._db.settings.find_one()
            if settings is None:
                logger.info("[Settings] No settings found, creating defaults")
                settings = self._db.settings.create(DEFAULT_SETTINGS)
        return settings

    def update(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Upsert the settings record.

        Raises:
            ContentValidationError: If a value is out of range
        """
        changes = validate_settings(patch)
        with self._db.settings.lock:
            existing = self._db.settings.find_one()
            if existing is None:
                return self._db.settings.create({**DEFAULT_SETTINGS, **changes})
            self._db.settings.update_one({"_id": existing["_id"]}, changes)
            updated = self._db.settings.find_one({"_id": existing["_id"]})
        return updated if updated is not None else existing
