"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    """Login with email + password."""

    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class RegisterRequest(LoginRequest):
    """Self-service signup. New accounts always get the ``user`` role."""


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""

    id: int
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class AdminUserResponse(UserResponse):
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    """Token response returned after successful auth."""

    token: str
    user: UserResponse
