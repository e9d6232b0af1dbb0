"""User management for administrators."""

from __future__ import annotations

import structlog

from vertex.errors import NotFoundError, ValidationError
from vertex.store import TipStore
from vertex.store.records import ROLES, UserRecord

logger = structlog.get_logger()


class AdminService:
    def __init__(self, store: TipStore) -> None:
        self.store = store

    async def list_users(self) -> list[UserRecord]:
        """All accounts, newest first."""
        return await self.store.list_users()

    async def set_role(self, user_id: int, role: str | None) -> UserRecord:
        """
        Change a user's role.

        Raises:
            ValidationError: Role is not "user" or "admin".
            NotFoundError: No such user.
        """
        if role not in ROLES:
            msg = 'Role must be either "user" or "admin"'
            raise ValidationError(msg)

        user = await self.store.update_user_role(user_id, role)
        if user is None:
            msg = "User not found"
            raise NotFoundError(msg)

        logger.info("user_role_changed", user_id=user_id, role=role)
        return user
