"""Auth Upsert — login-or-register keyed by (canonical phone, mall).

Invariants:
    - Blank phone/password rejected before normalization or any lookup
    - Phone normalized before the lookup, so every spelling hits the same row
    - New users start with 0 points and role "user"; only a hash of the password is stored
    - On login the stored name wins: the name argument is ignored (first write wins)
    - A lost registration race surfaces as PhoneAlreadyRegisteredError, never a second row

Design Decisions:
    - No password complexity policy here: that is a boundary concern
    - Hasher injected (PasswordHasher protocol): tests use a cheap werkzeug method
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from loyalty.core.domain_types import (
    AuthResult, AuthStatus, CanonicalPhone, MallId, UserId, UserRole,
)
from loyalty.core.errors import (
    InvalidCredentialsError, PhoneAlreadyRegisteredError, ValidationError,
)
from loyalty.core.normalize_phone import normalize_phone
from loyalty.core.repository_protocols import PasswordHasher
from loyalty.infrastructure.database import unique_violation_on
from loyalty.models.user_profile import UserProfile


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AuthUpsertService:
    """Login an existing member or register a new one in a single call."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def login_or_register(
        self,
        phone_number: str | None,
        password: str | None,
        name: str | None,
        mall_id: MallId | None,
    ) -> AuthResult:
        if _is_blank(phone_number) or _is_blank(password):
            field = "phone_number" if _is_blank(phone_number) else "password"
            raise ValidationError("PhoneNumber and Password are required", field)

        phone = normalize_phone(phone_number)
        user = await self.find_user(phone, mall_id)

        if user is None:
            user = await self._register(phone, password, name, mall_id)
            return AuthResult(
                status=AuthStatus.REGISTERED,
                user_id=UserId(user.id),
                phone_number=phone,
                name=user.name,
            )

        if not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()

        return AuthResult(
            status=AuthStatus.LOGGED_IN,
            user_id=UserId(user.id),
            phone_number=phone,
            name=user.name,
        )

    async def find_user(
        self, phone: CanonicalPhone, mall_id: MallId | None,
    ) -> UserProfile | None:
        """Look up a member by canonical phone within one mall."""
        query = select(UserProfile).where(UserProfile.phone_number == phone)
        if mall_id is None:
            query = query.where(UserProfile.mall_id.is_(None))
        else:
            query = query.where(UserProfile.mall_id == mall_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _register(
        self,
        phone: CanonicalPhone,
        password: str,
        name: str | None,
        mall_id: MallId | None,
    ) -> UserProfile:
        user = UserProfile(
            phone_number=phone,
            name=name.strip() if name and name.strip() else None,
            role=UserRole.USER.value,
            total_points=0,
            mall_id=mall_id,
            password_hash=self.hasher.hash(password),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if unique_violation_on(e, "phone_number"):
                raise PhoneAlreadyRegisteredError() from e
            raise
        return user
