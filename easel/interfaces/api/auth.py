"""
Authentication dependencies for the FastAPI application.
Thin wrapper around KeyManagementService and UserService for dependency injection.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from easel.services.domain.user_svc import UserService
from easel.services.infrastructure.keys_svc import KeyManagementService

auth_scheme = HTTPBearer(auto_error=False)


def get_key_service() -> KeyManagementService:
    """Get the KeyManagementService singleton instance."""
    from easel.app import application

    if "keys" not in application.services:
        raise RuntimeError("KeyManagementService not initialized")
    service = application.services["keys"]
    if not isinstance(service, KeyManagementService):
        raise RuntimeError("Invalid KeyManagementService instance")
    return service


def get_user_service() -> UserService:
    """Get the UserService singleton instance."""
    from easel.app import application

    if "users" not in application.services:
        raise RuntimeError("UserService not initialized")
    return application.services["users"]  # type: ignore[no-any-return]


def get_session_token(creds: HTTPAuthorizationCredentials | None = Depends(auth_scheme)) -> str:
    """Extract the bearer token (401 when absent)."""
    if creds is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return creds.credentials.strip()


def verify_session(token: str = Depends(get_session_token)) -> dict[str, Any]:
    """Resolve the session to its user record (401 when invalid or expired).

    Returns:
        User record without password, including the native `_id`
    """
    user_key = get_key_service().get_session_user(token)
    if user_key is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    user = get_user_service().get_user(user_key)
    if user is None:
        # Account was deleted while the session was live
        get_key_service().invalidate_session(token)
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user


def require_admin(user: dict[str, Any] = Depends(verify_session)) -> dict[str, Any]:
    """Allow only sessions whose user has the admin role (403 otherwise)."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Forbidden - Admin access required")
    return user
