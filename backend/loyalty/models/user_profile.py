"""UserProfile ORM — a loyalty member of one mall, holding the point balance.

Invariants:
    - (phone_number, mall_id) is unique; phone_number is always canonical
    - A phone appears at most once among members with no mall (partial unique
      index: a plain UNIQUE treats NULL mall_ids as distinct)
    - total_points >= 0 (CHECK constraint backs up the ledger's sufficiency check)
    - version bumps on every UPDATE; a stale write raises StaleDataError

Design Decisions:
    - Balance is a plain column, never recomputed from transaction history
    - version_id_col gives optimistic concurrency on SQLite too, where
      SELECT ... FOR UPDATE is a no-op
    - transactions FK is RESTRICT (receipts outlive nothing); user_coupons cascade
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Integer, DateTime, CheckConstraint, UniqueConstraint, Index, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from loyalty.db.base import Base


class UserProfile(Base):
    """Loyalty member scoped to a mall."""
    __tablename__ = "user_profiles"
    __table_args__ = (
        UniqueConstraint("phone_number", "mall_id"),
        CheckConstraint("total_points >= 0", name="total_points_non_negative"),
        Index(
            "uq_user_profiles_phone_number_null_mall",
            "phone_number",
            unique=True,
            postgresql_where=text("mall_id IS NULL"),
            sqlite_where=text("mall_id IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user",
    )
    total_points: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    mall_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True,
    )
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    coupons: Mapped[list["UserCoupon"]] = relationship(
        "UserCoupon", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __mapper_args__ = {"version_id_col": version}
