"""Request/response schemas for admin endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from vertex.auth.schemas import AdminUserResponse


class RoleUpdateRequest(BaseModel):
    role: str | None = None


class UserListResponse(BaseModel):
    success: bool = True
    users: list[AdminUserResponse]


class UserMutationResponse(BaseModel):
    success: bool = True
    message: str
    user: AdminUserResponse
