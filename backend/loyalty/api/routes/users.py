"""User Routes — balance lookup."""

from uuid import UUID

from fastapi import APIRouter, Depends

from loyalty.api.dependencies import get_queries
from loyalty.core.domain_types import UserId
from loyalty.schemas.user import UserPointsResponse
from loyalty.services.loyalty_queries import LoyaltyQueries

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/{user_id}/points", response_model=UserPointsResponse)
async def get_user_points(
    user_id: UUID,
    queries: LoyaltyQueries = Depends(get_queries),
):
    points = await queries.get_user_points(UserId(user_id))
    return UserPointsResponse(user_id=user_id, total_points=points)
