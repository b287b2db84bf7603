"""Auth and account API types - login, password change, user admin, contact form."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """A user as clients see it: no password, no native key."""

    id: int
    email: str
    role: Literal["user", "admin"]

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> UserResponse:
        return cls(id=record["id"], email=record["email"], role=record.get("role", "user"))


class LoginResponse(BaseModel):
    session_token: str
    expires_in: int  # seconds
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class PasswordChangeRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=8)


class UserCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Literal["user", "admin"] = "user"


class ContactRequest(BaseModel):
    """Contact form submission. Logged and acknowledged, not stored."""

    name: str = Field(..., min_length=2)
    email: EmailStr
    subject: str = Field(..., min_length=5)
    inquiryType: Literal["commission", "purchase", "exhibition", "press", "other"]
    message: str = Field(..., min_length=10)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None
