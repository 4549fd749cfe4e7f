"""User Schemas."""

from uuid import UUID

from pydantic import BaseModel


class UserPointsResponse(BaseModel):
    user_id: UUID
    total_points: int
