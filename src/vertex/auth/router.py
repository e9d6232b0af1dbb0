"""Authentication router: /api/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vertex.auth.dependencies import require_authenticated
from vertex.auth.jwt import TokenClaims
from vertex.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from vertex.auth.service import AuthService
from vertex.dependencies import get_auth_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange email + password for a 24h bearer token."""
    token, user = await auth.authenticate(body.email, body.password)
    return TokenResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Create a regular account and return a token for it."""
    token, user = await auth.register(body.email, body.password)
    return TokenResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(claims: TokenClaims = Depends(require_authenticated)) -> UserResponse:
    """Identity carried by the caller's token."""
    return UserResponse(id=claims.user_id, email=claims.email, role=claims.role)
