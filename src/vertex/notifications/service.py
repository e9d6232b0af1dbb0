"""Notification creation and delivery.

Two kinds are produced:
- ``new_tip``: confirmation sent to a user who just followed a prediction
- ``result``: sent to every follower once a prediction is won or lost

Both are best-effort. They run after the triggering write has committed and a
failed insert is logged, never raised, so a missed notification cannot fail
or roll back the follow or the status change.
"""

from __future__ import annotations

import structlog

from vertex.errors import NotFoundError
from vertex.store import TipStore
from vertex.store.records import NotificationRecord, PredictionRecord

logger = structlog.get_logger()

TYPE_NEW_TIP = "new_tip"
TYPE_RESULT = "result"

# The product ships in Italian.
_RESULT_LABELS = {"won": "Vinto", "lost": "Perso"}


def follow_message(prediction: PredictionRecord) -> str:
    return f"Hai seguito {prediction.match_name}"


def result_message(prediction: PredictionRecord) -> str:
    return f"Esito: {prediction.match_name} è stato {_RESULT_LABELS[prediction.status]}"


class NotificationService:
    def __init__(self, store: TipStore) -> None:
        self.store = store

    async def _deliver(self, user_id: int, message: str, type_: str) -> NotificationRecord | None:
        try:
            return await self.store.create_notification(user_id, message, type_)
        except Exception:
            logger.warning("notification_failed", user_id=user_id, type=type_, exc_info=True)
            return None

    async def notify_followed(self, user_id: int, prediction: PredictionRecord) -> NotificationRecord | None:
        """Confirm a follow to the user who made it."""
        return await self._deliver(user_id, follow_message(prediction), TYPE_NEW_TIP)

    async def notify_result(self, prediction: PredictionRecord) -> int:
        """Tell every follower how a resolved prediction ended. Returns how many were delivered."""
        if not prediction.is_terminal:
            return 0
        try:
            follower_ids = await self.store.list_follower_ids(prediction.id)
        except Exception:
            logger.warning("notification_fanout_failed", prediction_id=prediction.id, exc_info=True)
            return 0

        message = result_message(prediction)
        delivered = 0
        for user_id in follower_ids:
            if await self._deliver(user_id, message, TYPE_RESULT) is not None:
                delivered += 1
        logger.info(
            "result_notifications_sent",
            prediction_id=prediction.id,
            followers=len(follower_ids),
            delivered=delivered,
        )
        return delivered

    async def list_for_user(self, user_id: int) -> list[NotificationRecord]:
        """Newest first."""
        return await self.store.list_notifications(user_id)

    async def mark_read(self, user_id: int, notification_id: int) -> None:
        """Raises NotFoundError unless the notification exists and belongs to the user."""
        if not await self.store.mark_notification_read(notification_id, user_id):
            msg = "Notification not found or not owned by user"
            raise NotFoundError(msg)

    async def mark_all_read(self, user_id: int) -> int:
        return await self.store.mark_all_notifications_read(user_id)

    async def unread_count(self, user_id: int) -> int:
        return await self.store.count_unread(user_id)
