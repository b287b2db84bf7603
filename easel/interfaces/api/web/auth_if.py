"""Authentication endpoints: login, logout, current user, password change."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from easel.interfaces.api.auth import get_key_service, get_session_token, verify_session
from easel.interfaces.api.types.auth_types import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordChangeRequest,
    UserResponse,
)
from easel.interfaces.api.web.dependencies import get_user_service
from easel.services.domain.user_svc import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, users: UserService = Depends(get_user_service)) -> LoginResponse:
    """
    Authenticate with email and password and receive a session token.
    The token is sent as `Authorization: Bearer <token>` on later requests.
    """
    user = users.authenticate(request.email, request.password)
    if user is None:
        logger.warning("[Web API] Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    keys = get_key_service()
    session_token = keys.create_session(user["_id"])
    logger.info(f"[Web API] {user['email']} logged in")
    return LoginResponse(
        session_token=session_token,
        expires_in=keys.session_timeout_s,
        user=UserResponse.from_record(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(token: str = Depends(get_session_token)) -> MessageResponse:
    """Invalidate the current session token. Unknown tokens are ignored."""
    get_key_service().invalidate_session(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/auth/user", response_model=UserResponse)
def current_user(user: dict[str, Any] = Depends(verify_session)) -> UserResponse:
    return UserResponse.from_record(user)


@router.patch("/auth/password", response_model=MessageResponse)
def change_password(
    request: PasswordChangeRequest,
    user: dict[str, Any] = Depends(verify_session),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Change the logged-in user's own password (any role)."""
    if not users.change_password(user["_id"], request.currentPassword, request.newPassword):
        raise HTTPException(status_code=404, detail="User not found")
    return MessageResponse(message="Password updated successfully")
