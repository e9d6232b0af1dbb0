"""
Authentication business logic.

Handles credential checks, signup and token issuance. Tokens are stateless,
so nothing here writes sessions to the store.
"""

from __future__ import annotations

import structlog

from vertex.auth.jwt import create_access_token
from vertex.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_and_update,
)
from vertex.config import Settings, get_settings
from vertex.errors import InvalidCredentials, ValidationError
from vertex.store import TipStore
from vertex.store.records import UserRecord

logger = structlog.get_logger()


class AuthService:
    """Verifies credentials and issues bearer tokens."""

    def __init__(self, store: TipStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    def issue_token(self, user: UserRecord) -> str:
        return create_access_token(user.id, user.email, user.role, self.settings)

    async def authenticate(self, email: str, password: str) -> tuple[str, UserRecord]:
        """
        Check email + password and issue a token.

        Raises:
            InvalidCredentials: If the email is unknown or the password is wrong.
        """
        user = await self.store.get_user_by_email(email.lower().strip())
        if user is None:
            logger.info("login_failed", email=email, reason="unknown_email")
            raise InvalidCredentials

        matched, new_hash = verify_and_update(password, user.password_hash)
        if not matched:
            logger.info("login_failed", email=email, reason="bad_password")
            raise InvalidCredentials
        if new_hash is not None:
            await self.store.update_password_hash(user.id, new_hash)
            logger.info("password_rehashed", user_id=user.id)

        logger.info("login_succeeded", user_id=user.id, role=user.role)
        return self.issue_token(user), user

    async def register(self, email: str, password: str) -> tuple[str, UserRecord]:
        """
        Create a ``user``-role account and sign it in.

        Raises:
            ValidationError: If the password is too weak or the email is taken.
        """
        try:
            validate_password_strength(password, self.settings.password_min_length)
        except PasswordStrengthError as e:
            raise ValidationError(str(e)) from e

        email = email.lower().strip()
        if "@" not in email:
            msg = "Email must be a valid address"
            raise ValidationError(msg)

        user = await self.store.create_user(email, hash_password(password), role="user")
        if user is None:
            msg = "Email already registered"
            raise ValidationError(msg)

        logger.info("user_created", user_id=user.id, email=email)
        return self.issue_token(user), user


async def seed_admin(store: TipStore, settings: Settings) -> UserRecord | None:
    """Create the configured admin account if it does not exist yet (idempotent)."""
    if not settings.seed_admin or not settings.admin_email or not settings.admin_password:
        return None

    email = settings.admin_email.lower().strip()
    existing = await store.get_user_by_email(email)
    if existing is not None:
        return existing

    user = await store.create_user(email, hash_password(settings.admin_password), role="admin")
    if user is not None:
        logger.info("admin_seeded", user_id=user.id, email=email)
    return user
