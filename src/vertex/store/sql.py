"""SQL backend (SQLite by default, any SQLAlchemy async URL works)."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import and_, func, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from vertex.database import create_engine, create_session_factory
from vertex.errors import StoreError
from vertex.store.base import TipStore
from vertex.store.models import Base, Notification, Prediction, User, UserPrediction
from vertex.store.records import (
    FollowedPrediction,
    NotificationRecord,
    PredictionRecord,
    PredictionView,
    UserRecord,
)

logger = structlog.get_logger()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _columns(row: Base) -> dict:
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


class SqlStore(TipStore):
    """``TipStore`` over an async SQLAlchemy engine. One session per operation."""

    name = "sql"

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self._engine = create_engine(url, echo=echo)
        self._session_factory = create_session_factory(self._engine)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("store_initialized", backend=self.name)

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(func.lower(User.email) == email.lower()))
            user = result.scalar_one_or_none()
        return UserRecord.model_validate(user) if user else None

    async def get_user_by_id(self, user_id: int) -> UserRecord | None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
        return UserRecord.model_validate(user) if user else None

    async def create_user(self, email: str, password_hash: str, role: str = "user") -> UserRecord | None:
        async with self._session_factory() as session:
            user = User(email=email, password_hash=password_hash, role=role, created_at=_now())
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return None
            return UserRecord.model_validate(user)

    async def list_users(self) -> list[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
            return [UserRecord.model_validate(u) for u in result.scalars().all()]

    async def update_user_role(self, user_id: int, role: str) -> UserRecord | None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            user.role = role
            await session.commit()
            return UserRecord.model_validate(user)

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        async with self._session_factory() as session:
            await session.execute(update(User).where(User.id == user_id).values(password_hash=password_hash))
            await session.commit()

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def create_prediction(
        self,
        *,
        match_name: str,
        sport: str,
        odds: float,
        event_date: datetime,
        tipster_name: str,
        created_by: int | None,
    ) -> PredictionRecord:
        async with self._session_factory() as session:
            prediction = Prediction(
                match_name=match_name,
                sport=sport,
                odds=odds,
                event_date=event_date,
                tipster_name=tipster_name,
                status="pending",
                created_by=created_by,
                created_at=_now(),
            )
            session.add(prediction)
            await session.commit()
            return PredictionRecord.model_validate(prediction)

    async def get_prediction(self, prediction_id: int) -> PredictionRecord | None:
        async with self._session_factory() as session:
            prediction = await session.get(Prediction, prediction_id)
        return PredictionRecord.model_validate(prediction) if prediction else None

    def _with_follow_flag(self, user_id: int | None):
        """SELECT prediction + whether ``user_id`` follows it (LEFT JOIN)."""
        return select(Prediction, UserPrediction.id.is_not(None).label("is_followed")).outerjoin(
            UserPrediction,
            and_(UserPrediction.prediction_id == Prediction.id, UserPrediction.user_id == user_id),
        )

    @staticmethod
    def _views(rows) -> list[PredictionView]:
        return [
            PredictionView.model_validate({**_columns(prediction), "is_followed": bool(is_followed)})
            for prediction, is_followed in rows
        ]

    async def list_upcoming(self, user_id: int | None, now: datetime) -> list[PredictionView]:
        stmt = (
            self._with_follow_flag(user_id)
            .where(Prediction.event_date > now)
            .order_by(Prediction.event_date.asc(), Prediction.id.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return self._views(result.all())

    async def list_with_follow_state(self, user_id: int) -> list[PredictionView]:
        stmt = self._with_follow_flag(user_id).order_by(Prediction.event_date.asc(), Prediction.id.asc())
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return self._views(result.all())

    async def list_recent(self, limit: int | None = None) -> list[PredictionRecord]:
        stmt = select(Prediction).order_by(Prediction.created_at.desc(), Prediction.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [PredictionRecord.model_validate(p) for p in result.scalars().all()]

    async def resolve_prediction(self, prediction_id: int, status: str) -> PredictionRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                update(Prediction)
                .where(Prediction.id == prediction_id, Prediction.status == "pending")
                .values(status=status)
            )
            await session.commit()
            if result.rowcount == 0:
                return None
            prediction = await session.get(Prediction, prediction_id, populate_existing=True)
            return PredictionRecord.model_validate(prediction)

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    async def add_follow(self, user_id: int, prediction_id: int) -> datetime | None:
        saved_at = _now()
        async with self._session_factory() as session:
            session.add(UserPrediction(user_id=user_id, prediction_id=prediction_id, saved_at=saved_at))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return None
        return saved_at

    async def is_following(self, user_id: int, prediction_id: int) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserPrediction.id).where(
                    UserPrediction.user_id == user_id,
                    UserPrediction.prediction_id == prediction_id,
                )
            )
            return result.first() is not None

    async def list_followed(self, user_id: int, status: str | None = None) -> list[FollowedPrediction]:
        stmt = (
            select(Prediction, UserPrediction.saved_at)
            .join(UserPrediction, UserPrediction.prediction_id == Prediction.id)
            .where(UserPrediction.user_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(Prediction.status == status)
        stmt = stmt.order_by(UserPrediction.saved_at.desc(), UserPrediction.id.desc())

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [
                FollowedPrediction.model_validate({**_columns(prediction), "saved_at": saved_at})
                for prediction, saved_at in result.all()
            ]

    async def list_follower_ids(self, prediction_id: int) -> list[int]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserPrediction.user_id)
                .where(UserPrediction.prediction_id == prediction_id)
                .order_by(UserPrediction.id.asc())
            )
            return [row[0] for row in result]

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def create_notification(self, user_id: int, message: str, type_: str) -> NotificationRecord:
        async with self._session_factory() as session:
            notification = Notification(
                user_id=user_id,
                message=message,
                type=type_,
                read=False,
                created_at=_now(),
            )
            session.add(notification)
            await session.commit()
            return NotificationRecord.model_validate(notification)

    async def list_notifications(self, user_id: int) -> list[NotificationRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
            )
            return [NotificationRecord.model_validate(n) for n in result.scalars().all()]

    async def mark_notification_read(self, notification_id: int, user_id: int) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                update(Notification)
                .where(Notification.id == notification_id, Notification.user_id == user_id)
                .values(read=True)
            )
            await session.commit()
            return result.rowcount > 0

    async def mark_all_notifications_read(self, user_id: int) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read.is_(False))
                .values(read=True)
            )
            await session.commit()
            return result.rowcount

    async def count_unread(self, user_id: int) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count())
                .select_from(Notification)
                .where(Notification.user_id == user_id, Notification.read.is_(False))
            )
            return result.scalar_one()
