"""Phone Normalization — maps every accepted spelling of a Jordanian mobile number to one form.

Invariants:
    - Output is always "+962" + 9 digits beginning with 7
    - normalize_phone(normalize_phone(x)) == normalize_phone(x)
    - Must run before every phone-keyed lookup or write

Design Decisions:
    - Separators (whitespace, hyphen, parentheses) are stripped before classification;
      any other non-digit character left over is a format error
    - Pure function, no I/O: the uniqueness constraint on (phone, mall) only works
      if every writer agrees on one spelling
"""

import re

from loyalty.core.domain_types import CanonicalPhone
from loyalty.core.errors import InvalidPhoneFormatError

COUNTRY_CODE = "962"

_SEPARATORS = re.compile(r"[\s\-()]")
_NATIONAL = re.compile(r"^07\d{8}$")
_INTERNATIONAL = re.compile(r"^\+?962(7\d{8})$")


def normalize_phone(raw: str | None, field: str = "phone_number") -> CanonicalPhone:
    """Return the canonical +9627XXXXXXXX form or raise InvalidPhoneFormatError."""
    if raw is None or not raw.strip():
        raise InvalidPhoneFormatError(field)

    compact = _SEPARATORS.sub("", raw)

    if _NATIONAL.match(compact):
        return CanonicalPhone(f"+{COUNTRY_CODE}{compact[1:]}")

    match = _INTERNATIONAL.match(compact)
    if match:
        return CanonicalPhone(f"+{COUNTRY_CODE}{match.group(1)}")

    raise InvalidPhoneFormatError(field)
