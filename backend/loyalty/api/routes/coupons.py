"""Coupon Routes — catalog reads plus grant (redeem) and consume (redeem-by-serial).

Invariants:
    - Static paths (/redeem, /redeem-by-serial, /user/{id}) are registered before
      /{coupon_id} so they are never parsed as a coupon UUID
    - Catalog writes are not exposed here
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from loyalty.api.dependencies import get_coupon_redeemer, get_queries
from loyalty.core.domain_types import CouponId, MallId, UserId
from loyalty.schemas.coupon import (
    CouponResponse, RedeemBySerialRequest, RedeemCouponRequest,
    RedeemCouponResponse, UserCouponResponse,
)
from loyalty.services.coupon_redeemer import CouponRedeemer
from loyalty.services.loyalty_queries import LoyaltyQueries

router = APIRouter(prefix="/api/v1/coupons", tags=["coupons"])


@router.get("", response_model=list[CouponResponse])
async def list_coupons(
    is_active: bool | None = Query(None),
    mall_id: UUID | None = Query(None),
    queries: LoyaltyQueries = Depends(get_queries),
):
    return await queries.list_coupons(
        is_active=is_active,
        mall_id=MallId(mall_id) if mall_id else None,
    )


@router.post("/redeem", response_model=RedeemCouponResponse)
async def redeem_coupon(
    body: RedeemCouponRequest,
    redeemer: CouponRedeemer = Depends(get_coupon_redeemer),
):
    """Spend points on a coupon; returns the serial to present later."""
    user_coupon = await redeemer.redeem_by_coupon(
        UserId(body.user_id), CouponId(body.coupon_id),
    )
    return RedeemCouponResponse(
        message="Coupon redeemed successfully",
        serial_number=user_coupon.serial_number,
    )


@router.post("/redeem-by-serial", response_model=UserCouponResponse)
async def redeem_by_serial(
    body: RedeemBySerialRequest,
    redeemer: CouponRedeemer = Depends(get_coupon_redeemer),
):
    """Consume a granted coupon at the till."""
    return await redeemer.redeem_by_serial(body.serial_number)


@router.get("/user/{user_id}", response_model=list[UserCouponResponse])
async def list_user_coupons(
    user_id: UUID,
    queries: LoyaltyQueries = Depends(get_queries),
):
    return await queries.list_user_coupons(UserId(user_id))


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: UUID,
    queries: LoyaltyQueries = Depends(get_queries),
):
    return await queries.get_coupon(CouponId(coupon_id))
