"""Service Dependencies — FastAPI providers that wire services to the request session.

Invariants:
    - One AsyncSession per request (get_db); every service in that request shares it
    - Collaborators (hasher, clock) come from dedicated providers so tests can
      override them through app.dependency_overrides

Design Decisions:
    - Providers instead of module-level singletons: no import-time side effects
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loyalty.config import get_settings
from loyalty.core.repository_protocols import Clock, PasswordHasher, utc_now
from loyalty.infrastructure.database import get_db
from loyalty.infrastructure.password_hasher import WerkzeugPasswordHasher
from loyalty.services.auth_upsert import AuthUpsertService
from loyalty.services.coupon_redeemer import CouponRedeemer
from loyalty.services.loyalty_queries import LoyaltyQueries
from loyalty.services.store_registry import StoreRegistry
from loyalty.services.transaction_processor import TransactionProcessor


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return WerkzeugPasswordHasher(get_settings().password_hash_method)


def get_clock() -> Clock:
    return utc_now


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthUpsertService:
    return AuthUpsertService(db, hasher)


def get_transaction_processor(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> TransactionProcessor:
    return TransactionProcessor(db, clock)


def get_coupon_redeemer(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CouponRedeemer:
    settings = get_settings()
    return CouponRedeemer(
        db, clock,
        serial_length=settings.serial_code_length,
        max_attempts=settings.serial_max_attempts,
    )


def get_store_registry(db: AsyncSession = Depends(get_db)) -> StoreRegistry:
    return StoreRegistry(db)


def get_queries(db: AsyncSession = Depends(get_db)) -> LoyaltyQueries:
    return LoyaltyQueries(db)
