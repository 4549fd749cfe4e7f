"""Transaction ORM — a purchase receipt credited to a user.

Invariants:
    - receipt_id is globally unique (not per user)
    - points == trunc(price * 100), computed once at insert
    - Immutable: no update or delete path
    - user/store FKs are RESTRICT: a user with receipts cannot be deleted

Design Decisions:
    - Numeric(12, 2) for price: money never goes through float
    - Integer surrogate id (autoincrement on both PostgreSQL and SQLite)
"""

from datetime import datetime, timezone
from decimal import Decimal
import uuid

from sqlalchemy import (
    String, Text, Integer, Numeric, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from loyalty.db.base import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("receipt_id"),
        CheckConstraint("price >= 0", name="price_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    store_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stores.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    receipt_id: Mapped[str] = mapped_column(String(100), nullable=False)
    receipt_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
