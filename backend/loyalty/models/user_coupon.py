"""UserCoupon ORM — one granted coupon, identified at the till by its serial number.

Invariants:
    - serial_number is 8 chars and globally unique (UNIQUE constraint)
    - is_redeemed flips false -> true at most once (conditional UPDATE in CouponRedeemer)
    - redeemed_at is set in the same statement that flips is_redeemed
    - Cascades on deletion of either the user or the coupon

Design Decisions:
    - Surrogate integer id: the serial is the business key, not the row key
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from loyalty.db.base import Base


class UserCoupon(Base):
    __tablename__ = "user_coupons"
    __table_args__ = (UniqueConstraint("serial_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    serial_number: Mapped[str] = mapped_column(String(8), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    coupon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("coupons.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    is_redeemed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    redeemed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    user: Mapped["UserProfile"] = relationship(
        "UserProfile", back_populates="coupons",
    )
    coupon: Mapped["Coupon"] = relationship(
        "Coupon", back_populates="user_coupons",
    )
