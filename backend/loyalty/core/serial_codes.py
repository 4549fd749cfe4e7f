"""Serial Codes — random redemption codes presented at the till.

Invariants:
    - Codes are exactly SERIAL_LENGTH characters from [A-Z0-9]
    - Generation is collision-checked by the caller against live rows

Design Decisions:
    - secrets over random: serials are bearer tokens for a prepaid coupon
    - 36^8 ≈ 2.8e12 code space: collisions are rare enough that a small retry
      budget (settings.serial_max_attempts) is sufficient
"""

import secrets
import string
from typing import Callable

SERIAL_LENGTH = 8
SERIAL_ALPHABET = string.ascii_uppercase + string.digits

SerialFactory = Callable[[int], str]


def generate_serial(length: int = SERIAL_LENGTH) -> str:
    """Return a fresh random serial of the given length."""
    return "".join(secrets.choice(SERIAL_ALPHABET) for _ in range(length))


def clean_serial(raw: str | None) -> str:
    """Strip surrounding whitespace from a presented serial."""
    return (raw or "").strip()
