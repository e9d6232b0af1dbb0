"""
HS256 JWT access tokens.

Tokens are self-contained: there is no server-side session or revocation
list, so a token stays valid for its whole lifetime even after the client
"logs out" by discarding it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from pydantic import BaseModel

from vertex.config import Settings, get_settings
from vertex.errors import InvalidToken


class TokenClaims(BaseModel):
    """Verified identity carried by an access token."""

    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    settings: Settings | None = None,
) -> str:
    """
    Create an access token valid for ``jwt_access_token_expire_hours`` (24h).

    Args:
        user_id: The user's database ID.
        email: The user's email.
        role: "user" or "admin".

    Returns:
        Encoded JWT string.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "userId": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_access_token_expire_hours),
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings | None = None) -> TokenClaims:
    """
    Verify and decode an access token.

    Raises:
        InvalidToken: If the token is malformed, tampered with, expired,
            or issued by someone else.
    """
    settings = settings or get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise InvalidToken(msg) from None
    except jwt.InvalidTokenError as e:
        raise InvalidToken(f"Invalid token: {e}") from None

    try:
        return TokenClaims(user_id=int(payload["userId"]), email=payload["email"], role=payload["role"])
    except (KeyError, TypeError, ValueError):
        msg = "Invalid token: missing claims"
        raise InvalidToken(msg) from None
