"""Coupon Schemas — catalog reads and the two redemption paths."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    manager_id: UUID | None
    type: str | None
    start_at: datetime
    end_at: datetime
    description: str | None
    is_active: bool
    cost_point: int
    mall_id: UUID | None
    created_at: datetime


class RedeemCouponRequest(BaseModel):
    user_id: UUID
    coupon_id: UUID


class RedeemBySerialRequest(BaseModel):
    serial_number: str = Field("", max_length=40)


class RedeemCouponResponse(BaseModel):
    message: str
    serial_number: str


class UserCouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    serial_number: str
    user_id: UUID
    coupon_id: UUID
    is_redeemed: bool
    created_at: datetime
    redeemed_at: datetime | None = None
