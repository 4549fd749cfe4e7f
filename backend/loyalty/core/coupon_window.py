"""Coupon Window — decides whether a coupon can be granted at a given instant.

Invariants:
    - A coupon is grantable iff is_active and start_at <= now <= end_at (inclusive)
    - Naive datetimes are interpreted as UTC (SQLite drops tzinfo on read)
"""

from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_within_window(start_at: datetime, end_at: datetime, now: datetime) -> bool:
    return as_utc(start_at) <= as_utc(now) <= as_utc(end_at)


def is_coupon_grantable(
    is_active: bool, start_at: datetime, end_at: datetime, now: datetime,
) -> bool:
    """True when the coupon is switched on and now falls inside its window."""
    return bool(is_active) and is_within_window(start_at, end_at, now)
