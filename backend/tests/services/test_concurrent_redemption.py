"""Concurrent Redemption — two callers presenting one serial at the same time.

Invariants:
    - Exactly one concurrent consume succeeds; the other gets AlreadyRedeemedError
    - The row ends redeemed exactly once

Design Decisions:
    - File-backed SQLite with one connection per session: the in-memory
      StaticPool fixture shares a single connection, which would let one
      session's rollback undo the other's pending UPDATE
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from loyalty.core.errors import AlreadyRedeemedError
from loyalty.db.base import Base
from loyalty.models.coupon import Coupon
from loyalty.models.user_coupon import UserCoupon
from loyalty.models.user_profile import UserProfile
from loyalty.services.coupon_redeemer import CouponRedeemer


@pytest.fixture
async def file_session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'loyalty.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def granted_serial(file_session_factory):
    now = datetime.now(timezone.utc)
    async with file_session_factory() as session:
        user = UserProfile(phone_number="+962791234567", mall_id=uuid.uuid4())
        coupon = Coupon(
            start_at=now - timedelta(days=1), end_at=now + timedelta(days=1),
            cost_point=0,
        )
        session.add_all([user, coupon])
        await session.flush()
        session.add(UserCoupon(
            serial_number="A1B2C3D4", user_id=user.id, coupon_id=coupon.id,
        ))
        await session.commit()
    return "A1B2C3D4"


async def _present(session_factory, serial: str) -> str:
    async with session_factory() as session:
        try:
            await CouponRedeemer(session).redeem_by_serial(serial)
        except AlreadyRedeemedError:
            return "already"
        return "ok"


async def test_only_one_concurrent_consume_wins(file_session_factory, granted_serial):
    outcomes = await asyncio.gather(
        _present(file_session_factory, granted_serial),
        _present(file_session_factory, granted_serial),
    )
    assert sorted(outcomes) == ["already", "ok"]

    async with file_session_factory() as session:
        row = await session.scalar(
            select(UserCoupon).where(UserCoupon.serial_number == granted_serial),
        )
        assert row.is_redeemed is True
        assert row.redeemed_at is not None
