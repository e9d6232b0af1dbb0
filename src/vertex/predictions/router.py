"""Prediction endpoints: /api/predictions/*."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from vertex.auth.dependencies import require_admin, require_authenticated
from vertex.auth.jwt import TokenClaims
from vertex.dependencies import RowId, get_notification_service, get_prediction_service
from vertex.notifications.service import NotificationService
from vertex.predictions.schemas import (
    CreatePredictionRequest,
    FollowedListResponse,
    FollowedPredictionResponse,
    FollowRequest,
    FollowResponse,
    FollowStateListResponse,
    FollowStatePredictionResponse,
    PredictionMutationResponse,
    PredictionResponse,
    StatusUpdateRequest,
    UpcomingPredictionResponse,
)
from vertex.predictions.service import PredictionService
from vertex.store.records import MAX_ROW_ID

router = APIRouter(prefix="/api/predictions", tags=["Predictions"])


@router.get("", response_model=list[UpcomingPredictionResponse])
async def list_upcoming(
    user_id: int | None = Query(None, alias="userId", ge=1, le=MAX_ROW_ID),
    predictions: PredictionService = Depends(get_prediction_service),
):
    """Public listing of future events, soonest first."""
    return await predictions.list_upcoming(user_id)


@router.post("/create", response_model=PredictionMutationResponse, status_code=201)
async def create_prediction(
    body: CreatePredictionRequest,
    claims: TokenClaims = Depends(require_admin),
    predictions: PredictionService = Depends(get_prediction_service),
):
    """Create a pending prediction (admin only)."""
    prediction = await predictions.create(
        match=body.match,
        sport=body.sport,
        odds=body.odds,
        date=body.date,
        tipster=body.tipster,
        created_by=claims.user_id,
    )
    return PredictionMutationResponse(
        message="Prediction created successfully",
        prediction=PredictionResponse.model_validate(prediction),
    )


@router.post("/follow", response_model=FollowResponse)
async def follow_prediction(
    body: FollowRequest,
    background_tasks: BackgroundTasks,
    claims: TokenClaims = Depends(require_authenticated),
    predictions: PredictionService = Depends(get_prediction_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Follow a prediction; the confirmation notification is sent after the response."""
    prediction = await predictions.follow(claims.user_id, body.prediction_id)
    background_tasks.add_task(notifications.notify_followed, claims.user_id, prediction)
    return FollowResponse()


@router.get("/followed", response_model=FollowedListResponse)
async def list_followed(
    status: str | None = Query(None),
    claims: TokenClaims = Depends(require_authenticated),
    predictions: PredictionService = Depends(get_prediction_service),
):
    """The caller's followed predictions, most recently followed first."""
    followed = await predictions.list_followed(claims.user_id, status)
    return FollowedListResponse(predictions=[FollowedPredictionResponse.model_validate(f) for f in followed])


@router.get("/all", response_model=FollowStateListResponse)
async def list_all(
    claims: TokenClaims = Depends(require_authenticated),
    predictions: PredictionService = Depends(get_prediction_service),
):
    """Every prediction, soonest first, each flagged with ``isFollowed``."""
    views = await predictions.list_all(claims.user_id)
    return FollowStateListResponse(predictions=[FollowStatePredictionResponse.model_validate(v) for v in views])


@router.get("/latest", response_model=list[PredictionResponse])
async def list_latest(
    _claims: TokenClaims = Depends(require_admin),
    predictions: PredictionService = Depends(get_prediction_service),
):
    """The ten most recently created predictions (admin panel)."""
    return await predictions.list_recent()


@router.patch("/{prediction_id}/status", response_model=PredictionMutationResponse)
async def update_status(
    prediction_id: RowId,
    body: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    _claims: TokenClaims = Depends(require_admin),
    predictions: PredictionService = Depends(get_prediction_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Resolve a prediction; followers are notified after the response."""
    prediction = await predictions.set_status(prediction_id, body.status)
    if prediction.is_terminal:
        background_tasks.add_task(notifications.notify_result, prediction)
    return PredictionMutationResponse(
        message="Prediction status updated successfully",
        prediction=PredictionResponse.model_validate(prediction),
    )
