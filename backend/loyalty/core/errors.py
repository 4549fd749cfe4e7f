"""Error Hierarchy — typed, categorized exceptions for all loyalty failure modes.

Invariants:
    - Every error has a stable code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Codes never change once published: callers branch on them, not on message text
    - Core errors carry no transport status; api/error_handlers.py owns the HTTP mapping
    - to_response() produces the REST envelope; no internal details in user-facing messages

Design Decisions:
    - Single hierarchy with LoyaltyError base: FastAPI global handler catches all
    - InvalidPhoneFormatError subclasses ValidationError: callers that only care about
      "bad input" catch one type, callers that care about the phone case get its own code
    - Lost-race uniqueness violations raise the same class as the pre-check would have
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    coupon_id: str | None = None
    receipt_id: str | None = None
    serial_number: str | None = None
    debug_info: dict[str, Any] | None = None


class LoyaltyError(Exception):
    """Base exception for all loyalty errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        field_name = getattr(self, "field", None)
        if field_name:
            body["field"] = field_name
        return {"error": body}


# ─── Validation ─────────────────────────────────────────────────

class ValidationError(LoyaltyError):
    """A required field is missing or malformed."""
    def __init__(
        self,
        message: str,
        field: str,
        code: str = "VALIDATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.field = field


class InvalidPhoneFormatError(ValidationError):
    """Phone number is not a recognizable mobile number."""
    def __init__(self, field: str = "phone_number", context: ErrorContext | None = None):
        super().__init__(
            "Invalid phone number format", field,
            code="INVALID_PHONE_NUMBER", context=context,
        )


# ─── Authentication ─────────────────────────────────────────────

class InvalidCredentialsError(LoyaltyError):
    """Password does not match the stored hash."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid phone number or password",
            "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context,
        )


# ─── Not Found ──────────────────────────────────────────────────

class ResourceNotFoundError(LoyaltyError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        code: str = "RESOURCE_NOT_FOUND",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_ref: str, context: ErrorContext | None = None):
        super().__init__("User", user_ref, "USER_NOT_FOUND", context)


class CouponNotFoundError(ResourceNotFoundError):
    def __init__(self, coupon_id: str, context: ErrorContext | None = None):
        super().__init__("Coupon", coupon_id, "COUPON_NOT_FOUND", context)


class StoreNotFoundError(ResourceNotFoundError):
    def __init__(self, store_id: str, context: ErrorContext | None = None):
        super().__init__("Store", store_id, "STORE_NOT_FOUND", context)


class TransactionNotFoundError(ResourceNotFoundError):
    def __init__(self, transaction_id: str, context: ErrorContext | None = None):
        super().__init__("Transaction", transaction_id, "TRANSACTION_NOT_FOUND", context)


class SerialNotFoundError(ResourceNotFoundError):
    def __init__(self, serial_number: str, context: ErrorContext | None = None):
        super().__init__("Serial number", serial_number, "SERIAL_NOT_FOUND", context)


# ─── Business Rules ─────────────────────────────────────────────

class CouponNotActiveError(LoyaltyError):
    """Coupon is switched off or outside its validity window."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Coupon is not active",
            "COUPON_NOT_ACTIVE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )


class InsufficientPointsError(LoyaltyError):
    """Deduction would take the balance below zero."""
    def __init__(self, balance: int, requested: int, context: ErrorContext | None = None):
        super().__init__(
            f"Insufficient points: balance {balance}, requested {requested}",
            "INSUFFICIENT_POINTS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )
        self.balance = balance
        self.requested = requested


# ─── Conflicts ──────────────────────────────────────────────────

class DuplicateReceiptError(LoyaltyError):
    """A transaction with this receipt id is already recorded."""
    def __init__(self, receipt_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.receipt_id = receipt_id
        super().__init__(
            "Receipt ID already exists",
            "DUPLICATE_RECEIPT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )


class AlreadyRedeemedError(LoyaltyError):
    """The serial has already been consumed."""
    def __init__(self, serial_number: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.serial_number = serial_number
        super().__init__(
            "Coupon already redeemed",
            "ALREADY_REDEEMED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )


class PhoneAlreadyRegisteredError(LoyaltyError):
    """A concurrent registration for the same (phone, mall) committed first."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Phone number is already registered for this mall",
            "PHONE_ALREADY_REGISTERED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )


class ConcurrencyError(LoyaltyError):
    """Concurrent modification detected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )


# ─── Infrastructure / Internal ──────────────────────────────────

class SerialGenerationError(LoyaltyError):
    """Could not find a free serial number within the retry budget."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Could not generate a unique serial number after {attempts} attempts",
            "SERIAL_GENERATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context,
        )
        self.attempts = attempts


class DatabaseError(LoyaltyError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
