"""Loyalty Queries — read-only lookups behind the user, coupon and transaction routes.

Invariants:
    - No writes, no commits: safe to call from any request
    - Missing entities raise the matching *NotFoundError, never return None
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loyalty.core.domain_types import CouponId, MallId, UserId
from loyalty.core.errors import (
    CouponNotFoundError, TransactionNotFoundError, UserNotFoundError,
)
from loyalty.models.coupon import Coupon
from loyalty.models.transaction import Transaction
from loyalty.models.user_coupon import UserCoupon
from loyalty.models.user_profile import UserProfile


class LoyaltyQueries:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_points(self, user_id: UserId) -> int:
        points = await self.db.scalar(
            select(UserProfile.total_points).where(UserProfile.id == user_id),
        )
        if points is None:
            raise UserNotFoundError(str(user_id))
        return points

    async def get_transaction(self, transaction_id: int) -> Transaction:
        transaction = await self.db.get(Transaction, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(str(transaction_id))
        return transaction

    async def get_coupon(self, coupon_id: CouponId) -> Coupon:
        coupon = await self.db.get(Coupon, coupon_id)
        if coupon is None:
            raise CouponNotFoundError(str(coupon_id))
        return coupon

    async def list_coupons(
        self,
        is_active: bool | None = None,
        mall_id: MallId | None = None,
    ) -> list[Coupon]:
        """Coupons newest first, optionally filtered by active flag and mall."""
        query = select(Coupon).order_by(Coupon.created_at.desc())
        if is_active is not None:
            query = query.where(Coupon.is_active.is_(is_active))
        if mall_id is not None:
            query = query.where(Coupon.mall_id == mall_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_user_coupons(self, user_id: UserId) -> list[UserCoupon]:
        result = await self.db.execute(
            select(UserCoupon)
            .where(UserCoupon.user_id == user_id)
            .order_by(UserCoupon.created_at.desc(), UserCoupon.id.desc()),
        )
        return list(result.scalars().all())
