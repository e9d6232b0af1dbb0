"""Request/response schemas for prediction endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from vertex.store.records import MAX_ROW_ID


class CreatePredictionRequest(BaseModel):
    """New tip. Fields are checked by the service so errors read the same everywhere.

    The older admin form posted ``match_name``/``event_date``/``tipster_name``;
    both spellings are accepted.
    """

    match: str | None = Field(None, validation_alias=AliasChoices("match", "match_name"))
    sport: str | None = None
    # Raw JSON value; parse_odds rejects booleans and non-decimal strings.
    odds: Any = None
    date: str | None = Field(None, validation_alias=AliasChoices("date", "event_date"))
    tipster: str | None = Field(None, validation_alias=AliasChoices("tipster", "tipster_name"))


class FollowRequest(BaseModel):
    prediction_id: int | None = Field(
        None,
        validation_alias=AliasChoices("predictionId", "prediction_id"),
        ge=1,
        le=MAX_ROW_ID,
    )


class StatusUpdateRequest(BaseModel):
    status: str | None = None


class PredictionResponse(BaseModel):
    id: int
    match_name: str
    sport: str
    odds: float
    event_date: datetime
    tipster_name: str
    status: str
    created_by: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UpcomingPredictionResponse(PredictionResponse):
    """Public listing row; ``is_followed`` is always false for anonymous callers."""

    is_followed: bool = False


class FollowStatePredictionResponse(PredictionResponse):
    """Row of the authenticated catalogue, camel-cased flag as the frontend expects."""

    is_followed: bool = Field(
        False,
        validation_alias=AliasChoices("isFollowed", "is_followed"),
        serialization_alias="isFollowed",
    )


class FollowedPredictionResponse(PredictionResponse):
    saved_at: datetime | None = None


class PredictionListResponse(BaseModel):
    success: bool = True
    predictions: list[PredictionResponse]


class FollowStateListResponse(BaseModel):
    success: bool = True
    predictions: list[FollowStatePredictionResponse]


class FollowedListResponse(BaseModel):
    success: bool = True
    predictions: list[FollowedPredictionResponse]


class PredictionMutationResponse(BaseModel):
    success: bool = True
    message: str
    prediction: PredictionResponse


class FollowResponse(BaseModel):
    success: bool = True
    message: str = "Prediction followed successfully"


class RoiSummary(BaseModel):
    """Outcome counts and flat-stake return over a user's followed tips."""

    total_followed: int = 0
    total_won: int = 0
    total_lost: int = 0
    total_pending: int = 0
    roi: float = 0.0
    roi_percentage: float = 0.0
