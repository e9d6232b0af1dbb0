"""Storage interface shared by the SQL and Supabase backends.

Services only ever talk to a ``TipStore``; which implementation sits behind it
is decided once at startup by ``vertex.store.build_store``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from vertex.store.records import (
    FollowedPrediction,
    NotificationRecord,
    PredictionRecord,
    PredictionView,
    UserRecord,
)


class TipStore(ABC):
    """Abstract persistence for users, predictions, follows and notifications."""

    name: str = "abstract"

    # --- Lifecycle ---

    @abstractmethod
    async def init(self) -> None:
        """Prepare the backend (create tables, open connections)."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise ``StoreError`` if the backend is unreachable."""

    # --- Users ---

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> UserRecord | None: ...

    @abstractmethod
    async def create_user(self, email: str, password_hash: str, role: str = "user") -> UserRecord | None:
        """Insert a user. Returns None if the email is already taken."""

    @abstractmethod
    async def list_users(self) -> list[UserRecord]:
        """All users, newest first."""

    @abstractmethod
    async def update_user_role(self, user_id: int, role: str) -> UserRecord | None:
        """Returns the updated user, or None if no such user exists."""

    @abstractmethod
    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Replace a user's stored hash (used when upgrading hash parameters)."""

    # --- Predictions ---

    @abstractmethod
    async def create_prediction(
        self,
        *,
        match_name: str,
        sport: str,
        odds: float,
        event_date: datetime,
        tipster_name: str,
        created_by: int | None,
    ) -> PredictionRecord: ...

    @abstractmethod
    async def get_prediction(self, prediction_id: int) -> PredictionRecord | None: ...

    @abstractmethod
    async def list_upcoming(self, user_id: int | None, now: datetime) -> list[PredictionView]:
        """Predictions with ``event_date > now``, soonest first, with the user's follow flag."""

    @abstractmethod
    async def list_with_follow_state(self, user_id: int) -> list[PredictionView]:
        """Every prediction, soonest first, with the user's follow flag."""

    @abstractmethod
    async def list_recent(self, limit: int | None = None) -> list[PredictionRecord]:
        """Predictions by creation time, newest first."""

    @abstractmethod
    async def resolve_prediction(self, prediction_id: int, status: str) -> PredictionRecord | None:
        """Set ``status`` only while the prediction is still pending.

        Returns the updated record, or None when nothing was updated (unknown
        id, or the prediction already reached a terminal status).
        """

    # --- Follows ---

    @abstractmethod
    async def add_follow(self, user_id: int, prediction_id: int) -> datetime | None:
        """Insert a follow. Returns its saved_at, or None if the pair already exists."""

    @abstractmethod
    async def is_following(self, user_id: int, prediction_id: int) -> bool: ...

    @abstractmethod
    async def list_followed(self, user_id: int, status: str | None = None) -> list[FollowedPrediction]:
        """The user's followed predictions, most recently followed first."""

    @abstractmethod
    async def list_follower_ids(self, prediction_id: int) -> list[int]: ...

    # --- Notifications ---

    @abstractmethod
    async def create_notification(self, user_id: int, message: str, type_: str) -> NotificationRecord: ...

    @abstractmethod
    async def list_notifications(self, user_id: int) -> list[NotificationRecord]:
        """The user's notifications, newest first."""

    @abstractmethod
    async def mark_notification_read(self, notification_id: int, user_id: int) -> bool:
        """Returns True if a notification owned by ``user_id`` was found."""

    @abstractmethod
    async def mark_all_notifications_read(self, user_id: int) -> int: ...

    @abstractmethod
    async def count_unread(self, user_id: int) -> int: ...
