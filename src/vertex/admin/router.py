"""Admin endpoints: /api/admin/*. Every route requires role=admin."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vertex.admin.schemas import RoleUpdateRequest, UserListResponse, UserMutationResponse
from vertex.admin.service import AdminService
from vertex.auth.dependencies import require_admin
from vertex.auth.schemas import AdminUserResponse
from vertex.dependencies import RowId, get_admin_service, get_prediction_service
from vertex.predictions.schemas import PredictionListResponse, PredictionResponse
from vertex.predictions.service import PredictionService

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/users", response_model=UserListResponse)
async def list_users(admin: AdminService = Depends(get_admin_service)):
    """All users with their roles, newest first."""
    users = await admin.list_users()
    return UserListResponse(users=[AdminUserResponse.model_validate(u) for u in users])


@router.patch("/users/{user_id}", response_model=UserMutationResponse)
async def update_user_role(
    user_id: RowId,
    body: RoleUpdateRequest,
    admin: AdminService = Depends(get_admin_service),
):
    """Promote or demote a user."""
    user = await admin.set_role(user_id, body.role)
    return UserMutationResponse(
        message="User role updated successfully",
        user=AdminUserResponse.model_validate(user),
    )


@router.get("/predictions", response_model=PredictionListResponse)
async def list_predictions(predictions: PredictionService = Depends(get_prediction_service)):
    """Every prediction for the management table, newest first."""
    recent = await predictions.list_recent(limit=None)
    return PredictionListResponse(predictions=[PredictionResponse.model_validate(p) for p in recent])
