"""Auth Upsert — verifies login-or-register against a real (SQLite) session.

Invariants:
    - First call for a (phone, mall) registers with 0 points; later calls log in
    - Every phone spelling resolves to the same member
    - The stored name wins on login
    - A lost registration race raises PhoneAlreadyRegisteredError, not IntegrityError
"""

import uuid

import pytest
from sqlalchemy import func, select

from loyalty.core.domain_types import AuthStatus
from loyalty.core.errors import (
    InvalidCredentialsError, InvalidPhoneFormatError,
    PhoneAlreadyRegisteredError, ValidationError,
)
from loyalty.models.user_profile import UserProfile
from loyalty.services.auth_upsert import AuthUpsertService


@pytest.fixture
def service(test_db, hasher):
    return AuthUpsertService(test_db, hasher)


async def _count_users(db) -> int:
    return await db.scalar(select(func.count()).select_from(UserProfile))


async def test_first_call_registers_member(service, test_db, mall_id):
    result = await service.login_or_register("0791234567", "secret", "Lina", mall_id)

    assert result.status == AuthStatus.REGISTERED
    assert result.phone_number == "+962791234567"
    assert result.name == "Lina"

    user = await test_db.get(UserProfile, result.user_id)
    assert user.total_points == 0
    assert user.role == "user"
    assert user.mall_id == mall_id
    assert user.password_hash != "secret"


async def test_second_call_logs_in(service, mall_id):
    first = await service.login_or_register("0791234567", "secret", "Lina", mall_id)
    second = await service.login_or_register("0791234567", "secret", None, mall_id)

    assert second.status == AuthStatus.LOGGED_IN
    assert second.user_id == first.user_id


async def test_any_spelling_reaches_same_member(service, test_db, mall_id):
    first = await service.login_or_register("+962 79 123 4567", "pw", None, mall_id)
    second = await service.login_or_register("0791234567", "pw", None, mall_id)

    assert second.status == AuthStatus.LOGGED_IN
    assert second.user_id == first.user_id
    assert await _count_users(test_db) == 1


async def test_login_keeps_stored_name(service, mall_id):
    await service.login_or_register("0791234567", "pw", "Original", mall_id)
    result = await service.login_or_register("0791234567", "pw", "Changed", mall_id)
    assert result.name == "Original"


async def test_wrong_password_rejected(service, mall_id):
    await service.login_or_register("0791234567", "right", None, mall_id)
    with pytest.raises(InvalidCredentialsError):
        await service.login_or_register("0791234567", "wrong", None, mall_id)


async def test_same_phone_in_another_mall_is_a_new_member(service, test_db, mall_id):
    await service.login_or_register("0791234567", "pw", None, mall_id)
    result = await service.login_or_register("0791234567", "pw", None, uuid.uuid4())

    assert result.status == AuthStatus.REGISTERED
    assert await _count_users(test_db) == 2


@pytest.mark.parametrize("phone,password,field", [
    ("", "pw", "phone_number"),
    ("   ", "pw", "phone_number"),
    ("0791234567", "", "password"),
    (None, None, "phone_number"),
])
async def test_blank_credentials_rejected(service, test_db, mall_id, phone, password, field):
    with pytest.raises(ValidationError) as exc_info:
        await service.login_or_register(phone, password, None, mall_id)
    assert exc_info.value.message == "PhoneNumber and Password are required"
    assert exc_info.value.field == field
    assert await _count_users(test_db) == 0


async def test_invalid_phone_rejected_before_lookup(service, test_db, mall_id):
    with pytest.raises(InvalidPhoneFormatError):
        await service.login_or_register("12345", "pw", None, mall_id)
    assert await _count_users(test_db) == 0


async def test_lost_registration_race_raises_conflict(
    service, make_user, test_db, mall_id, monkeypatch,
):
    """Another request registered the phone between our lookup and our insert."""
    await make_user(phone_number="+962791234567")

    async def miss(phone, mall):
        return None

    monkeypatch.setattr(service, "find_user", miss)

    with pytest.raises(PhoneAlreadyRegisteredError):
        await service.login_or_register("0791234567", "pw", None, mall_id)
    assert await _count_users(test_db) == 1


async def test_lost_race_without_mall_raises_conflict(
    service, test_db, hasher, monkeypatch,
):
    """Members with no mall are unique per phone too."""
    test_db.add(UserProfile(
        phone_number="+962791234567", mall_id=None, password_hash=hasher.hash("pw"),
    ))
    await test_db.commit()

    async def miss(phone, mall):
        return None

    monkeypatch.setattr(service, "find_user", miss)

    with pytest.raises(PhoneAlreadyRegisteredError):
        await service.login_or_register("0791234567", "pw", None, None)
    assert await _count_users(test_db) == 1


async def test_member_without_mall_logs_in(service):
    first = await service.login_or_register("0791234567", "pw", "Lina", None)
    second = await service.login_or_register("0791234567", "pw", None, None)
    assert first.status == AuthStatus.REGISTERED
    assert second.status == AuthStatus.LOGGED_IN
    assert second.user_id == first.user_id
