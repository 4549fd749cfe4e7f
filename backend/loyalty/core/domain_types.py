"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, StoreId, CouponId, MallId wrap UUIDs — never use bare UUID in domain logic
    - CanonicalPhone is always "+962" followed by 9 digits starting with 7
    - Operation results are frozen dataclasses: services return them, routes serialize them

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
StoreId = NewType("StoreId", UUID)
CouponId = NewType("CouponId", UUID)
MallId = NewType("MallId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

CanonicalPhone = NewType("CanonicalPhone", str)    # +9627XXXXXXXX
SerialNumber = NewType("SerialNumber", str)        # 8 chars, [A-Z0-9]


# ─── Enums ───────────────────────────────────────────────────────

class AuthStatus(str, Enum):
    """Outcome of login-or-register."""
    REGISTERED = "Registered"
    LOGGED_IN = "LoggedIn"


class UserRole(str, Enum):
    """Role tag stored on user_profiles.role."""
    USER = "user"
    MANAGER = "manager"


# ─── Operation Results ───────────────────────────────────────────

@dataclass(frozen=True)
class AuthResult:
    status: AuthStatus
    user_id: UserId
    phone_number: CanonicalPhone
    name: str | None


@dataclass(frozen=True)
class TransactionResult:
    """Recorded receipt plus the balance after crediting it."""
    transaction_id: int
    user_id: UserId
    store_id: StoreId
    receipt_id: str
    price: Decimal
    points: int
    new_total_points: int
