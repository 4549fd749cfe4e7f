"""Coupon Redeemer — grants coupons for points and consumes them by serial number.

Invariants:
    - A coupon is granted once (redeem_by_coupon) and consumed once (redeem_by_serial)
    - Grant: point deduction and UserCoupon insert commit together or not at all
    - Grant: serial is checked against live rows and regenerated on collision;
      a collision surfacing only at commit rolls back and retries the whole grant.
      Both kinds of collision share one budget of max_attempts draws
    - Consume: is_redeemed flips false -> true in ONE conditional UPDATE, so of N
      concurrent presenters of the same serial exactly one sees rowcount == 1
    - Consume: the losing path re-reads with populate_existing so a stale identity
      map never reports an already-redeemed serial as fresh

Design Decisions:
    - Conditional UPDATE over read-check-write: single-winner semantics without a
      version column or row lock on user_coupons, identical on PostgreSQL and SQLite
    - Clock and serial factory injected: window edges and collisions are testable
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from loyalty.core.coupon_window import is_coupon_grantable
from loyalty.core.domain_types import CouponId, UserId
from loyalty.core.errors import (
    AlreadyRedeemedError, ConcurrencyError, CouponNotActiveError,
    CouponNotFoundError, ErrorContext, InsufficientPointsError,
    SerialGenerationError, SerialNotFoundError, UserNotFoundError,
    ValidationError,
)
from loyalty.core.points_ledger import deduct_points
from loyalty.core.repository_protocols import Clock, utc_now
from loyalty.core.serial_codes import (
    SERIAL_LENGTH, SerialFactory, clean_serial, generate_serial,
)
from loyalty.infrastructure.database import unique_violation_on
from loyalty.models.coupon import Coupon
from loyalty.models.user_coupon import UserCoupon
from loyalty.models.user_profile import UserProfile

DEFAULT_MAX_ATTEMPTS = 5


class CouponRedeemer:
    """Two entry points sharing the grant-once / consume-once invariant."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        serial_factory: SerialFactory = generate_serial,
        serial_length: int = SERIAL_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.db = db
        self.clock = clock
        self.serial_factory = serial_factory
        self.serial_length = serial_length
        self.max_attempts = max_attempts

    async def redeem_by_coupon(
        self, user_id: UserId, coupon_id: CouponId,
    ) -> UserCoupon:
        """Spend points on a coupon and issue a fresh, unredeemed serial."""
        context = ErrorContext(user_id=str(user_id), coupon_id=str(coupon_id))
        coupon = await self.db.get(Coupon, coupon_id)
        if coupon is None:
            raise CouponNotFoundError(str(coupon_id), context)

        now = self.clock()
        if not is_coupon_grantable(
            coupon.is_active, coupon.start_at, coupon.end_at, now,
        ):
            raise CouponNotActiveError(context)

        # rollback expires the coupon; later attempts must not lazy-load it
        cost_point = coupon.cost_point
        for _ in range(self.max_attempts):
            user_coupon = await self._grant(
                user_id, coupon_id, cost_point, now, context,
            )
            if user_coupon is not None:
                return user_coupon
        raise SerialGenerationError(self.max_attempts, context)

    async def _grant(
        self,
        user_id: UserId,
        coupon_id: CouponId,
        cost_point: int,
        now: datetime,
        context: ErrorContext,
    ) -> UserCoupon | None:
        """One grant attempt. None when the drawn serial turned out to be taken."""
        user = await self.db.get(
            UserProfile, user_id,
            with_for_update=True, populate_existing=True,
        )
        if user is None:
            raise UserNotFoundError(str(user_id), context)

        serial = self.serial_factory(self.serial_length)
        if await self._serial_taken(serial):
            return None

        if cost_point > user.total_points:
            raise InsufficientPointsError(user.total_points, cost_point, context)
        deduct_points(user, cost_point)

        user_coupon = UserCoupon(
            serial_number=serial,
            user_id=user.id,
            coupon_id=coupon_id,
            is_redeemed=False,
            created_at=now,
            redeemed_at=None,
        )
        self.db.add(user_coupon)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if unique_violation_on(e, "serial_number"):
                return None
            raise
        except StaleDataError as e:
            await self.db.rollback()
            raise ConcurrencyError(
                "User balance was modified by a concurrent request", context,
            ) from e

        return user_coupon

    async def redeem_by_serial(self, serial_number: str | None) -> UserCoupon:
        """Consume a previously granted coupon presented by its serial."""
        serial = clean_serial(serial_number)
        if not serial:
            raise ValidationError("Serial number is required", "serial_number")

        result = await self.db.execute(
            update(UserCoupon)
            .where(
                UserCoupon.serial_number == serial,
                UserCoupon.is_redeemed.is_(False),
            )
            .values(is_redeemed=True, redeemed_at=self.clock())
            .execution_options(synchronize_session=False),
        )

        if result.rowcount == 0:
            existing = await self._load_by_serial(serial)
            if existing is None:
                raise SerialNotFoundError(serial, ErrorContext(serial_number=serial))
            raise AlreadyRedeemedError(serial)

        await self.db.commit()
        return await self._load_by_serial(serial)

    async def _load_by_serial(self, serial: str) -> UserCoupon | None:
        result = await self.db.execute(
            select(UserCoupon)
            .where(UserCoupon.serial_number == serial)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _serial_taken(self, serial: str) -> bool:
        taken = await self.db.scalar(
            select(UserCoupon.id).where(UserCoupon.serial_number == serial),
        )
        return taken is not None
