"""Error Handlers — global exception handlers and the domain-code -> HTTP status table.

Invariants:
    - LoyaltyError → structured JSON with error code, message, severity; status from
      _STATUS_BY_CODE, else from the error category
    - RequestValidationError → field-level error details (400)
    - Exception (catch-all) → never leaks internal details (500)

Design Decisions:
    - Status mapping lives here, not on the exceptions: the core vocabulary is
      transport-agnostic and only the boundary knows about HTTP
    - Business-rule refusals (inactive coupon, duplicate receipt, already redeemed)
      are 400s; races the client can retry (phone registration, stale balance) are 409s
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from loyalty.core.errors import ErrorCategory, ErrorSeverity, LoyaltyError

logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorCategory.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.DATABASE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCategory.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_STATUS_BY_CODE = {
    "DUPLICATE_RECEIPT": status.HTTP_400_BAD_REQUEST,
    "ALREADY_REDEEMED": status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: LoyaltyError) -> int:
    """HTTP status for a domain error."""
    if exc.code in _STATUS_BY_CODE:
        return _STATUS_BY_CODE[exc.code]
    return _STATUS_BY_CATEGORY.get(
        exc.category, status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_loyalty_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_loyalty_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(LoyaltyError)
    async def loyalty_error_handler(request: Request, exc: LoyaltyError):
        """Handle all loyalty domain/infrastructure errors."""
        http_status = status_for(exc)
        log = logger.error if http_status >= 500 else logger.warning
        log(
            f"LoyaltyError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id,
                "coupon_id": exc.context.coupon_id,
                "receipt_id": exc.context.receipt_id,
                "serial_number": exc.context.serial_number,
            },
        )
        return JSONResponse(status_code=http_status, content=exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
