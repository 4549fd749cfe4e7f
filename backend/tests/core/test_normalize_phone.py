"""Phone Normalization — verifies every accepted spelling maps to one canonical form.

Tests:
    - National (07...), international (+962 / 962) and separated forms normalize
    - Normalization is idempotent
    - Blank, short, long and non-mobile numbers are rejected with field context
"""

import pytest

from loyalty.core.errors import InvalidPhoneFormatError, ValidationError
from loyalty.core.normalize_phone import normalize_phone


@pytest.mark.parametrize("raw", [
    "0791234567",
    "+962791234567",
    "962791234567",
    "+962 79 123 4567",
    "079-123-4567",
    "(079) 123 4567",
    "  0791234567  ",
])
def test_accepted_spellings_normalize_to_canonical(raw):
    assert normalize_phone(raw) == "+962791234567"


def test_normalize_is_idempotent():
    once = normalize_phone("0771234567")
    assert normalize_phone(once) == once == "+962771234567"


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    None,
    "079123456",        # too short
    "07912345678",      # too long
    "0691234567",       # not a mobile prefix
    "+963791234567",    # other country
    "+9627912345ab",
    "79123456789",
])
def test_invalid_numbers_are_rejected(raw):
    with pytest.raises(InvalidPhoneFormatError) as exc_info:
        normalize_phone(raw)
    assert exc_info.value.code == "INVALID_PHONE_NUMBER"
    assert exc_info.value.field == "phone_number"


def test_invalid_format_is_a_validation_error():
    with pytest.raises(ValidationError):
        normalize_phone("12345")


def test_field_name_is_carried_on_error():
    with pytest.raises(InvalidPhoneFormatError) as exc_info:
        normalize_phone("nope", field="customer_phone")
    assert exc_info.value.field == "customer_phone"
