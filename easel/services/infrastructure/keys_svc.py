"""Key Management Service.

Centralized service for managing authentication credentials:
- User passwords (bcrypt hashes stored on user records)
- Session tokens (bearer tokens for the admin UI and API)

Architecture Notes:
- Services are instantiated once during app wiring (see Application.start() in app.py).
- Sessions live only in memory: a restart logs everyone out. The store has
  exactly five collections, none of them for sessions.
- Session cache is module-level for performance but accessed only through instance methods.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

import bcrypt

from easel.helpers.time_helper import now_s

logger = logging.getLogger(__name__)

SESSION_TIMEOUT_SECONDS = 7 * 24 * 60 * 60


@dataclass
class Session:
    """One logged-in user. Identified by native user key, never by public id."""

    user_key: str
    expiry: float


_session_cache: dict[str, Session] = {}


class KeyManagementService:
    """Service for hashing passwords and managing sessions.

    Use the singleton instance from Application.services["keys"].
    """

    def __init__(self, session_timeout_s: int = SESSION_TIMEOUT_SECONDS) -> None:
        self.session_timeout_s = session_timeout_s

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt (secure password hashing).

        Args:
            password: Plaintext password

        Returns:
            Bcrypt password hash

        """
        pwd_bytes = password.encode("utf-8")
        salt = bcrypt.gensalt(rounds=12)
        pwd_hash = bcrypt.hashpw(pwd_bytes, salt)
        return str(pwd_hash.decode("utf-8"))

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Verify a password against a stored bcrypt hash.

        Args:
            password: Plaintext password to verify
            password_hash: Stored bcrypt hash

        Returns:
            True if password matches, False otherwise

        """
        try:
            pwd_bytes = password.encode("utf-8")
            hash_bytes = password_hash.encode("utf-8")
            return bool(bcrypt.checkpw(pwd_bytes, hash_bytes))
        except (ValueError, AttributeError):
            return False

    def create_session(self, user_key: str) -> str:
        """Create a new session token for a user.

        Expired sessions are swept first.

        Returns:
            Session token string

        """
        self.cleanup_expired_sessions()
        session_token = secrets.token_urlsafe(32)
        _session_cache[session_token] = Session(user_key=user_key, expiry=now_s() + self.session_timeout_s)
        logger.info(f"[Auth] Created new session (expires in {self.session_timeout_s}s)")
        return session_token

    def get_session_user(self, session_token: str) -> str | None:
        """Return the native user key for a valid session.

        Returns:
            User key, or None when the token is unknown or expired
        """
        session = _session_cache.get(session_token)
        if session is None:
            return None
        if now_s() > session.expiry:
            _session_cache.pop(session_token, None)
            return None
        return session.user_key

    def invalidate_session(self, session_token: str) -> None:
        """Invalidate a session (logout)."""
        _session_cache.pop(session_token, None)
        logger.info("[Auth] Session invalidated (logout)")

    def invalidate_user_sessions(self, user_key: str) -> int:
        """Drop every session belonging to a user (used when the user is deleted).

        Returns:
            Number of sessions removed
        """
        tokens = [token for token, session in _session_cache.items() if session.user_key == user_key]
        for token in tokens:
            _session_cache.pop(token, None)
        return len(tokens)

    def cleanup_expired_sessions(self) -> int:
        """Remove all expired sessions from the memory cache.

        Returns:
            Number of sessions cleaned up

        """
        now = now_s()
        expired = [token for token, session in _session_cache.items() if session.expiry < now]
        for token in expired:
            _session_cache.pop(token, None)
        if expired:
            logger.info(f"[Auth] Cleaned up {len(expired)} expired session(s)")
        return len(expired)
