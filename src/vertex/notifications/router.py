"""Notification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vertex.auth.dependencies import require_authenticated
from vertex.auth.jwt import TokenClaims
from vertex.dependencies import RowId, get_notification_service
from vertex.notifications.schemas import MessageResponse, NotificationResponse, UnreadCountResponse
from vertex.notifications.service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    claims: TokenClaims = Depends(require_authenticated),
    notifications: NotificationService = Depends(get_notification_service),
):
    """The caller's notifications, newest first."""
    return await notifications.list_for_user(claims.user_id)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    claims: TokenClaims = Depends(require_authenticated),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Get unread notification count."""
    return UnreadCountResponse(unread_count=await notifications.unread_count(claims.user_id))


@router.post("/read-all", response_model=MessageResponse)
async def mark_all_read(
    claims: TokenClaims = Depends(require_authenticated),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Mark all notifications as read."""
    count = await notifications.mark_all_read(claims.user_id)
    return MessageResponse(message=f"Marked {count} notifications as read")


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: RowId,
    claims: TokenClaims = Depends(require_authenticated),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Mark one of the caller's notifications as read."""
    await notifications.mark_read(claims.user_id, notification_id)
    return MessageResponse(message="Notification marked as read")
