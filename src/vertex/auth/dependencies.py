"""FastAPI authentication dependencies.

``require_admin`` builds on ``require_authenticated``, so a caller without a
valid token always gets 401 before any role check can answer 403.
"""

from __future__ import annotations

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vertex.auth.jwt import TokenClaims, verify_token
from vertex.config import Settings, get_settings
from vertex.errors import AuthError, ForbiddenError

_bearer = HTTPBearer(auto_error=False)


async def require_authenticated(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    Extract and verify the bearer token; return its claims.

    Stateless: the store is not consulted.
    """
    if credentials is None or not credentials.credentials:
        msg = "Access denied. No token provided."
        raise AuthError(msg)
    return verify_token(credentials.credentials, settings)


async def require_admin(
    claims: TokenClaims = Depends(require_authenticated),
) -> TokenClaims:
    """Same as require_authenticated but additionally requires role=admin."""
    if not claims.is_admin:
        raise ForbiddenError
    return claims
