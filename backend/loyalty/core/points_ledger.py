"""Points Ledger — balance mutation rules for a user record.

Invariants:
    - total_points never goes below zero: every deduction checks sufficiency first
    - A failed deduction leaves the balance untouched
    - points_for_price is deterministic: trunc(price * 100), applied once per receipt
    - Accepted prices have at most 2 decimal places and fit the stored columns,
      so the persisted price and points always agree
    - Functions mutate the passed-in record only; the caller persists it in the
      same unit of work as the correlated insert

Design Decisions:
    - Operates on any object with a total_points attribute (PointHolder), so the
      rules are tested without an ORM session
    - Decimal arithmetic for price: float rounding would credit 2.29 as 228 points
"""

from decimal import Decimal, InvalidOperation
from typing import Protocol

from loyalty.core.errors import InsufficientPointsError, ValidationError

POINTS_PER_UNIT = 100
PRICE_QUANTUM = Decimal("0.01")
# points column is a 32-bit INTEGER
MAX_PRICE = Decimal("21474836.47")


class PointHolder(Protocol):
    total_points: int


def add_points(user: PointHolder, amount: int) -> int:
    """Credit amount to the user. Returns the new balance."""
    if amount < 0:
        raise ValidationError("Points amount must be non-negative", "amount")
    user.total_points += amount
    return user.total_points


def deduct_points(user: PointHolder, amount: int) -> int:
    """Debit amount from the user. Returns the new balance."""
    if amount < 0:
        raise ValidationError("Points amount must be non-negative", "amount")
    if amount > user.total_points:
        raise InsufficientPointsError(user.total_points, amount)
    user.total_points -= amount
    return user.total_points


def to_price(value: Decimal | int | float | str) -> Decimal:
    """Coerce a price to a 2-place Decimal.

    Rejects NaN/Infinity, negatives, values above MAX_PRICE and sub-cent precision.
    """
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Price must be a number", "price")
    if not price.is_finite():
        raise ValidationError("Price must be a finite number", "price")
    if price < 0:
        raise ValidationError("Price must be non-negative", "price")
    if price > MAX_PRICE:
        raise ValidationError(f"Price must not exceed {MAX_PRICE}", "price")
    if price != price.quantize(PRICE_QUANTUM):
        raise ValidationError("Price must have at most 2 decimal places", "price")
    return price.quantize(PRICE_QUANTUM)


def points_for_price(price: Decimal | int | float | str) -> int:
    """Points earned for a purchase: price * 100 truncated toward zero."""
    return int(to_price(price) * POINTS_PER_UNIT)
