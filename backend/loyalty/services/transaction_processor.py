"""Transaction Processor — records a purchase receipt and credits its points.

Invariants:
    - Field validation (phone, receipt id, price) runs before any lookup
    - Exactly one transaction per receipt id, globally: pre-checked, and a
      commit-time unique violation is reported as the same DuplicateReceiptError
    - Transaction insert and balance credit commit together or not at all
    - points = trunc(price * 100), computed once here and stored on the row

Design Decisions:
    - User row loaded with SELECT ... FOR UPDATE (PostgreSQL) and guarded by the
      version column everywhere, so two receipts for one user never lose a credit
    - Tenant scoping comes from the caller: mall_id narrows the phone lookup; a
      phone registered in several malls without mall_id is rejected as ambiguous
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from loyalty.core.domain_types import (
    MallId, StoreId, TransactionResult, UserId,
)
from loyalty.core.errors import (
    ConcurrencyError, DuplicateReceiptError, ErrorContext,
    StoreNotFoundError, UserNotFoundError, ValidationError,
)
from loyalty.core.normalize_phone import normalize_phone
from loyalty.core.points_ledger import add_points, points_for_price, to_price
from loyalty.core.repository_protocols import Clock, utc_now
from loyalty.infrastructure.database import unique_violation_on
from loyalty.models.store import Store
from loyalty.models.transaction import Transaction
from loyalty.models.user_profile import UserProfile


class TransactionProcessor:
    """Receipt intake: validate, de-duplicate, insert and credit atomically."""

    def __init__(self, db: AsyncSession, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    async def process_transaction(
        self,
        phone_number: str | None,
        store_id: StoreId,
        receipt_id: str | None,
        description: str | None,
        price: Decimal | int | float | str,
        occurred_at: datetime | None = None,
        *,
        mall_id: MallId | None = None,
    ) -> TransactionResult:
        if phone_number is None or not phone_number.strip():
            raise ValidationError("Phone number is required", "phone_number")
        if receipt_id is None or not receipt_id.strip():
            raise ValidationError("Receipt ID is required", "receipt_id")
        amount = to_price(price)

        phone = normalize_phone(phone_number)
        receipt_id = receipt_id.strip()

        user = await self._lock_user(phone, mall_id, receipt_id)
        store = await self.db.get(Store, store_id)
        if store is None:
            raise StoreNotFoundError(str(store_id), ErrorContext(receipt_id=receipt_id))

        if await self._receipt_exists(receipt_id):
            raise DuplicateReceiptError(receipt_id)

        points = points_for_price(amount)
        transaction = Transaction(
            user_id=user.id,
            store_id=store.id,
            receipt_id=receipt_id,
            receipt_description=description,
            price=amount,
            points=points,
            created_at=occurred_at or self.clock(),
        )
        self.db.add(transaction)
        new_total = add_points(user, points)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if unique_violation_on(e, "receipt_id"):
                raise DuplicateReceiptError(receipt_id) from e
            raise
        except StaleDataError as e:
            await self.db.rollback()
            raise ConcurrencyError(
                "User balance was modified by a concurrent request",
            ) from e

        return TransactionResult(
            transaction_id=transaction.id,
            user_id=UserId(user.id),
            store_id=StoreId(store.id),
            receipt_id=receipt_id,
            price=amount,
            points=points,
            new_total_points=new_total,
        )

    async def _lock_user(
        self, phone: str, mall_id: UUID | None, receipt_id: str,
    ) -> UserProfile:
        query = (
            select(UserProfile)
            .where(UserProfile.phone_number == phone)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if mall_id is not None:
            query = query.where(UserProfile.mall_id == mall_id)
        users = (await self.db.execute(query)).scalars().all()

        if not users:
            raise UserNotFoundError(phone, ErrorContext(receipt_id=receipt_id))
        if len(users) > 1:
            raise ValidationError(
                "Phone number is registered in more than one mall; mall_id is required",
                "mall_id",
            )
        return users[0]

    async def _receipt_exists(self, receipt_id: str) -> bool:
        found = await self.db.scalar(
            select(Transaction.id).where(Transaction.receipt_id == receipt_id),
        )
        return found is not None
