"""
User service - accounts for the admin area.

Password hashes never leave this module: every record returned to callers
goes through public_user(), which drops the `password` field.

Invariants enforced here:
- emails are unique (compared lowercased)
- a user can never delete their own account
- the last remaining admin can never be deleted
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from easel.helpers.exceptions import ConflictError, ContentValidationError
from easel.helpers.numeric_id import numeric_id

if TYPE_CHECKING:
    from easel.persistence.db import Database
    from easel.services.infrastructure.keys_svc import KeyManagementService

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")
MIN_PASSWORD_LENGTH = 8


def public_user(user: Mapping[str, Any]) -> dict[str, Any]:
    """Strip the password hash from a user record."""
    return {k: v for k, v in user.items() if k != "password"}


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service for user accounts, login checks and password changes."""

    def __init__(self, db: Database, keys: KeyManagementService) -> None:
        self._db = db
        self._keys = keys

    def list_users(self) -> list[dict[str, Any]]:
        return [public_user(u) for u in self._db.users.find().sort([("email", 1)]).all()]

    def get_user(self, user_key: str) -> dict[str, Any] | None:
        """Look up a user by native key (as held in a session)."""
        user = self._db.users.find_one({"_id": user_key})
        return public_user(user) if user is not None else None

    def create_user(self, email: str, password: str, role: str = "user") -> dict[str, Any]:
        """
        Create an account.

        Raises:
            ContentValidationError: Bad role or short password
            ConflictError: Email already registered
        """
        if role not in ROLES:
            raise ContentValidationError(f"Role must be one of: {', '.join(ROLES)}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ContentValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        email = normalize_email(email)
        hashed = self._keys.hash_password(password)
        with self._db.users.lock:
            if self._db.users.find_one({"email": email}) is not None:
                raise ConflictError("User with this email already exists")
            user = self._db.users.create({"email": email, "password": hashed, "role": role})
        logger.info(f"[Auth] Created {role} account {email}")
        return public_user(user)

    def delete_user(self, public_id: int, acting_user_key: str) -> bool:
        """
        Delete a user by public id on behalf of the logged-in `acting_user_key`.

        Returns:
            True if deleted, False if no user has this id

        Raises:
            ContentValidationError: Self-delete, or deleting the last admin
        """
        if numeric_id(acting_user_key) == public_id:
            raise ContentValidationError("Cannot delete your own account")
        key = self._db.users.resolve_native_key(public_id)
        if key is None:
            return False
        if key == acting_user_key:
            raise ContentValidationError("Cannot delete your own account")
        with self._db.users.lock:
            target = self._db.users.find_one({"_id": key})
            if target is None:
                return False
            if target.get("role") == "admin" and self._db.users.count({"role": "admin"}) <= 1:
                raise ContentValidationError("Cannot delete the last admin account")
            deleted = self._db.users.delete_one({"_id": key})
        if deleted:
            self._keys.invalidate_user_sessions(key)
            logger.info(f"[Auth] Deleted account {target.get('email')}")
        return deleted > 0

    def authenticate(self, email: str, password: str) -> dict[str, Any] | None:
        """Check credentials.

        Returns:
            The user record including `_id` (for the session), or None
        """
        user = self._db.users.find_one({"email": normalize_email(email)})
        if user is None or not self._keys.verify_password(password, str(user.get("password", ""))):
            return None
        return public_user(user)

    def change_password(self, user_key: str, current_password: str, new_password: str) -> bool:
        """
        Returns:
            True on success, False if the user no longer exists

        Raises:
            ContentValidationError: Wrong current password or short new password
        """
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ContentValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        user = self._db.users.find_one({"_id": user_key})
        if user is None:
            return False
        if not self._keys.verify_password(current_password, str(user.get("password", ""))):
            raise ContentValidationError("Current password is incorrect")
        self._db.users.update_one({"_id": user_key}, {"password": self._keys.hash_password(new_password)})
        logger.info(f"[Auth] Password changed for {user.get('email')}")
        return True
