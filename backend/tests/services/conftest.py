"""Service test fixtures — async DB, seed factories, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - get_db dependency overridden to use the test session factory
    - Password hashing uses a cheap pbkdf2 method so tests stay fast

Design Decisions:
    - StaticPool: every session in a test shares the single in-memory database
    - PRAGMA foreign_keys=ON: cascade/restrict rules are exercised, not just declared
    - Seed fixtures are factories (make_user, make_coupon, ...) so tests state the
      values they depend on
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

import loyalty.models  # noqa: F401
from loyalty.api.dependencies import get_password_hasher
from loyalty.db.base import Base
from loyalty.infrastructure.database import get_db
from loyalty.infrastructure.password_hasher import WerkzeugPasswordHasher
from loyalty.main import app
from loyalty.models.coupon import Coupon
from loyalty.models.store import Store
from loyalty.models.transaction import Transaction
from loyalty.models.user_coupon import UserCoupon
from loyalty.models.user_profile import UserProfile

FAST_HASH_METHOD = "pbkdf2:sha256:1000"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    return WerkzeugPasswordHasher(FAST_HASH_METHOD)


@pytest.fixture
def fixed_clock():
    """Clock frozen at NOW."""
    return lambda: NOW


@pytest.fixture
async def client(test_session_factory, hasher):
    """FastAPI test client with DB and hasher dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def mall_id():
    return uuid.uuid4()


@pytest.fixture
def make_user(test_db, hasher, mall_id):
    """Insert a user; returns the committed UserProfile."""
    async def _make(
        phone_number: str = "+962791234567",
        total_points: int = 0,
        password: str = "pass",
        name: str = "Member",
        mall: uuid.UUID | None = None,
    ) -> UserProfile:
        user = UserProfile(
            phone_number=phone_number,
            name=name,
            role="user",
            total_points=total_points,
            mall_id=mall or mall_id,
            password_hash=hasher.hash(password),
        )
        test_db.add(user)
        await test_db.commit()
        return user
    return _make


@pytest.fixture
def make_store(test_db, mall_id):
    async def _make(name: str = "Store 1") -> Store:
        store = Store(name=name, mall_id=mall_id)
        test_db.add(store)
        await test_db.commit()
        return store
    return _make


@pytest.fixture
def make_coupon(test_db, mall_id):
    async def _make(
        cost_point: int = 100,
        is_active: bool = True,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
    ) -> Coupon:
        now = datetime.now(timezone.utc)
        coupon = Coupon(
            manager_id=uuid.uuid4(),
            type="discount",
            start_at=start_at or now - timedelta(days=1),
            end_at=end_at or now + timedelta(days=7),
            description="test",
            is_active=is_active,
            cost_point=cost_point,
            mall_id=mall_id,
            created_at=now,
        )
        test_db.add(coupon)
        await test_db.commit()
        return coupon
    return _make


@pytest.fixture
def make_user_coupon(test_db):
    async def _make(
        user: UserProfile,
        coupon: Coupon,
        serial_number: str = "12345678",
        is_redeemed: bool = False,
    ) -> UserCoupon:
        user_coupon = UserCoupon(
            serial_number=serial_number,
            user_id=user.id,
            coupon_id=coupon.id,
            is_redeemed=is_redeemed,
        )
        test_db.add(user_coupon)
        await test_db.commit()
        return user_coupon
    return _make


@pytest.fixture
def make_transaction(test_db):
    async def _make(
        user: UserProfile,
        store: Store,
        receipt_id: str = "R-1",
        price: Decimal = Decimal("1.00"),
    ) -> Transaction:
        transaction = Transaction(
            user_id=user.id,
            store_id=store.id,
            receipt_id=receipt_id,
            receipt_description="",
            price=price,
            points=int(price * 100),
        )
        test_db.add(transaction)
        await test_db.commit()
        return transaction
    return _make
