"""Schema Constraints — verifies the database backs up the service-level rules.

Invariants:
    - (phone_number, mall_id) and receipt_id and serial_number are unique
    - total_points cannot go negative even if a writer bypasses the ledger
    - Deleting a coupon or user cascades to user_coupons
    - Deleting a user or store with transactions is refused
    - A write through a stale UserProfile raises StaleDataError (version column)
"""

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from loyalty.models.coupon import Coupon
from loyalty.models.store import Store
from loyalty.models.transaction import Transaction
from loyalty.models.user_coupon import UserCoupon
from loyalty.models.user_profile import UserProfile
from loyalty.services.transaction_processor import TransactionProcessor


async def test_phone_unique_per_mall(test_db, make_user):
    await make_user(phone_number="+962791234567")
    with pytest.raises(IntegrityError):
        await make_user(phone_number="+962791234567")
    await test_db.rollback()


async def test_receipt_id_unique(test_db, make_user, make_store, make_transaction):
    user = await make_user()
    store = await make_store()
    await make_transaction(user, store, receipt_id="R-1")
    with pytest.raises(IntegrityError):
        await make_transaction(user, store, receipt_id="R-1")
    await test_db.rollback()


async def test_serial_number_unique(test_db, make_user, make_coupon, make_user_coupon):
    user = await make_user()
    coupon = await make_coupon()
    await make_user_coupon(user, coupon, serial_number="12345678")
    with pytest.raises(IntegrityError):
        await make_user_coupon(user, coupon, serial_number="12345678")
    await test_db.rollback()


async def test_total_points_cannot_go_negative(test_db, make_user):
    user = await make_user(total_points=5)
    user.total_points = -1
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()


async def test_deleting_coupon_cascades_to_user_coupons(
    test_db, make_user, make_coupon, make_user_coupon,
):
    user = await make_user()
    coupon = await make_coupon()
    await make_user_coupon(user, coupon)

    await test_db.execute(delete(Coupon).where(Coupon.id == coupon.id))
    await test_db.commit()

    count = await test_db.scalar(select(func.count()).select_from(UserCoupon))
    assert count == 0


async def test_deleting_user_cascades_to_user_coupons(
    test_db, make_user, make_coupon, make_user_coupon,
):
    user = await make_user()
    coupon = await make_coupon()
    await make_user_coupon(user, coupon)

    await test_db.execute(delete(UserProfile).where(UserProfile.id == user.id))
    await test_db.commit()

    count = await test_db.scalar(select(func.count()).select_from(UserCoupon))
    assert count == 0


async def test_deleting_user_with_transactions_is_refused(
    test_db, make_user, make_store, make_transaction,
):
    user = await make_user()
    store = await make_store()
    await make_transaction(user, store)

    with pytest.raises(IntegrityError):
        await test_db.execute(delete(UserProfile).where(UserProfile.id == user.id))
    await test_db.rollback()


async def test_deleting_store_with_transactions_is_refused(
    test_db, make_user, make_store, make_transaction,
):
    user = await make_user()
    store = await make_store()
    await make_transaction(user, store)

    with pytest.raises(IntegrityError):
        await test_db.execute(delete(Store).where(Store.id == store.id))
    await test_db.rollback()


async def test_stale_user_write_is_detected(
    test_session_factory, make_user, make_store,
):
    """A balance write based on an outdated read must not silently overwrite."""
    await make_user(total_points=0)
    store = await make_store()

    async with test_session_factory() as stale, test_session_factory() as fresh:
        cached = (await stale.execute(
            select(UserProfile).where(UserProfile.phone_number == "+962791234567"),
        )).scalar_one()

        await TransactionProcessor(fresh).process_transaction(
            "0791234567", store.id, "R-1", None, 1,
        )

        cached.total_points += 50
        with pytest.raises(StaleDataError):
            await stale.commit()
        await stale.rollback()

    async with test_session_factory() as session:
        points = await session.scalar(select(UserProfile.total_points))
        assert points == 100


async def test_transactions_reference_their_user(
    test_db, make_user, make_store, make_transaction,
):
    user = await make_user()
    store = await make_store()
    transaction = await make_transaction(user, store)

    row = await test_db.scalar(
        select(Transaction).where(Transaction.user_id == user.id),
    )
    assert row.id == transaction.id


async def test_phone_unique_among_members_without_mall(test_db, hasher):
    test_db.add(UserProfile(
        phone_number="+962791234567", mall_id=None, password_hash=hasher.hash("a"),
    ))
    await test_db.commit()

    test_db.add(UserProfile(
        phone_number="+962791234567", mall_id=None, password_hash=hasher.hash("b"),
    ))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()

    count = await test_db.scalar(
        select(func.count()).select_from(UserProfile)
        .where(UserProfile.phone_number == "+962791234567"),
    )
    assert count == 1


async def test_same_phone_with_and_without_mall_is_allowed(test_db, make_user, hasher):
    await make_user(phone_number="+962791234567")
    test_db.add(UserProfile(
        phone_number="+962791234567", mall_id=None, password_hash=hasher.hash("a"),
    ))
    await test_db.commit()
