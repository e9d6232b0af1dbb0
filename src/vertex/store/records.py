"""Backend-neutral records returned by every ``TipStore`` implementation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]
PredictionStatus = Literal["pending", "won", "lost"]

ROLES: frozenset[str] = frozenset({"user", "admin"})
STATUSES: frozenset[str] = frozenset({"pending", "won", "lost"})
TERMINAL_STATUSES: frozenset[str] = frozenset({"won", "lost"})

# Largest id a BIGINT / SQLite INTEGER column can hold.
MAX_ROW_ID = 2**63 - 1


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
OptionalUtcDatetime = Annotated[datetime | None, AfterValidator(as_utc)]


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserRecord(_Record):
    id: int
    email: str
    password_hash: str = Field(repr=False)
    role: Role = "user"
    created_at: OptionalUtcDatetime = None


class PredictionRecord(_Record):
    id: int
    match_name: str
    sport: str
    odds: float
    event_date: UtcDatetime
    tipster_name: str
    status: PredictionStatus = "pending"
    created_by: int | None = None
    created_at: OptionalUtcDatetime = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class PredictionView(PredictionRecord):
    """A prediction together with whether the viewing user follows it."""

    is_followed: bool = False


class FollowedPrediction(PredictionRecord):
    saved_at: OptionalUtcDatetime = None


class NotificationRecord(_Record):
    id: int
    user_id: int
    message: str
    type: str
    read: bool = False
    created_at: OptionalUtcDatetime = None
