"""User administration endpoints (admin only)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from easel.interfaces.api.auth import require_admin
from easel.interfaces.api.id_helpers import to_public_id
from easel.interfaces.api.types.auth_types import SuccessResponse, UserCreateRequest, UserResponse
from easel.interfaces.api.web.dependencies import get_user_service
from easel.services.domain.user_svc import UserService

router = APIRouter(prefix="/admin/users", tags=["Users"])


@router.get("", dependencies=[Depends(require_admin)])
def list_users(users: UserService = Depends(get_user_service)) -> list[UserResponse]:
    return [UserResponse.from_record(u) for u in users.list_users()]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_user(request: UserCreateRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    return UserResponse.from_record(users.create_user(request.email, request.password, request.role))


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    admin: dict[str, Any] = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> SuccessResponse:
    """Delete a user. Admins can never delete their own account."""
    if not users.delete_user(to_public_id(user_id, "user ID"), admin["_id"]):
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()
