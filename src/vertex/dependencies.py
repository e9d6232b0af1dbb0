"""Shared FastAPI dependencies.

The store is built once in the app lifespan and hung on ``app.state``;
services are constructed per request around it.
"""

from typing import Annotated

from fastapi import Depends, Path, Request

from vertex.admin.service import AdminService
from vertex.auth.service import AuthService
from vertex.config import Settings, get_settings
from vertex.notifications.service import NotificationService
from vertex.predictions.service import PredictionService
from vertex.store import TipStore
from vertex.store.records import MAX_ROW_ID

# Path ids outside the storable integer range are rejected with a 400.
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def get_store(request: Request) -> TipStore:
    """The storage backend selected at startup."""
    store: TipStore | None = getattr(request.app.state, "store", None)
    if store is None:
        msg = "Store not initialized. The app lifespan has not run."
        raise RuntimeError(msg)
    return store


def get_auth_service(
    store: TipStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(store, settings)


def get_prediction_service(store: TipStore = Depends(get_store)) -> PredictionService:
    return PredictionService(store)


def get_notification_service(store: TipStore = Depends(get_store)) -> NotificationService:
    return NotificationService(store)


def get_admin_service(store: TipStore = Depends(get_store)) -> AdminService:
    return AdminService(store)
