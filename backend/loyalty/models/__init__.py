"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every table is tenant-scoped through mall_id, except join rows that inherit it

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from loyalty.models.user_profile import UserProfile  # noqa: F401
from loyalty.models.store import Store  # noqa: F401
from loyalty.models.coupon import Coupon  # noqa: F401
from loyalty.models.user_coupon import UserCoupon  # noqa: F401
from loyalty.models.transaction import Transaction  # noqa: F401
