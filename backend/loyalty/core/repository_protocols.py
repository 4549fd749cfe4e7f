"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Credential hashing and time are accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Persistence is the SQLAlchemy AsyncSession itself (unit of work, identity map,
      unique-violation signalling); no extra repository layer is wrapped around it
"""

from datetime import datetime, timezone
from typing import Protocol


class PasswordHasher(Protocol):
    """One-way credential hash — implemented by infrastructure/password_hasher.py."""
    def hash(self, plaintext: str) -> str: ...
    def verify(self, plaintext: str, hashed: str) -> bool: ...


class Clock(Protocol):
    """Current UTC time — injectable for deterministic coupon-window tests."""
    def __call__(self) -> datetime: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
