"""Per-user summaries: /api/user/*."""

from fastapi import APIRouter, Depends

from vertex.auth.dependencies import require_authenticated
from vertex.auth.jwt import TokenClaims
from vertex.dependencies import get_prediction_service
from vertex.predictions.schemas import RoiSummary
from vertex.predictions.service import PredictionService

router = APIRouter(prefix="/api/user", tags=["Users"])


@router.get("/roi", response_model=RoiSummary)
async def get_roi(
    claims: TokenClaims = Depends(require_authenticated),
    predictions: PredictionService = Depends(get_prediction_service),
) -> RoiSummary:
    """Won/lost/pending counts and flat-stake ROI over the caller's follows."""
    return await predictions.compute_roi(claims.user_id)
