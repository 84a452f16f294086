"""
Custom exception classes and FastAPI exception handlers.

The service and repository layers raise domain-specific errors without
importing HTTP concepts. The handlers registered here translate them into
HTTP responses with a stable shape:

    {"detail": "<message>", "error_type": "<stable machine-readable kind>"}

Exception hierarchy:
    CodeShareError (base)
    ├── ValidationError              — malformed/out-of-range input (400)
    │   ├── InvalidIdentityError
    │   ├── InvalidAmountError
    │   ├── InvalidResourceError
    │   ├── InvalidPageError
    │   └── InvalidProfileError
    ├── NotFoundError                — entity absent (404)
    │   ├── UserNotFoundError
    │   ├── AccountNotFoundError
    │   └── ResourceNotFoundError
    ├── ConflictError                — uniqueness violation (409)
    │   ├── DuplicateUserError
    │   └── DuplicateAccountError
    ├── InsufficientFundsError       — deduct larger than balance (422)
    ├── InvalidCredentialsError      — bad login (401)
    ├── InvalidVerificationCodeError — bad/expired email code (401)
    └── StorageError                 — infrastructure failure (500, opaque)
"""

import logging
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class CodeShareError(Exception):
    """Base exception for all CodeShare domain errors."""

    status_code = 400
    error_type = "error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Validation errors (caller's fault, never retried)
# ---------------------------------------------------------------------------

class ValidationError(CodeShareError):
    """Raised when input is malformed or out of range."""

    status_code = 400
    error_type = "validation_error"


class InvalidIdentityError(ValidationError):
    """Raised when a user identity is missing or blank."""

    error_type = "invalid_identity"

    def __init__(self, detail: str = "User identity must not be empty"):
        super().__init__(detail)


class InvalidAmountError(ValidationError):
    """Raised when an amount is non-positive or not representable in cents."""

    error_type = "invalid_amount"

    def __init__(self, amount, reason: str = "must be greater than 0"):
        self.amount = amount
        super().__init__(f"Invalid amount {amount}: {reason}")


class InvalidResourceError(ValidationError):
    """Raised when resource input (title, id, comment body) is invalid."""

    error_type = "invalid_resource"


class InvalidPageError(ValidationError):
    """Raised when pagination parameters are out of range."""

    error_type = "invalid_page"


class InvalidProfileError(ValidationError):
    """Raised when a profile change or signup field is malformed."""

    error_type = "invalid_profile"


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class NotFoundError(CodeShareError):
    """Raised when a requested entity does not exist."""

    status_code = 404
    error_type = "not_found"


class UserNotFoundError(NotFoundError):
    """Raised when an identity or user id does not resolve to a user."""

    error_type = "user_not_found"

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"User {identifier} not found")


class AccountNotFoundError(NotFoundError):
    """Raised when a user has no account row."""

    error_type = "account_not_found"

    def __init__(self, user_uuid: str):
        self.user_uuid = user_uuid
        super().__init__(f"Account for user {user_uuid} not found")


class ResourceNotFoundError(NotFoundError):
    """Raised when a resource id does not exist."""

    error_type = "resource_not_found"

    def __init__(self, resource_id: int):
        self.resource_id = resource_id
        super().__init__(f"Resource {resource_id} not found")


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------

class ConflictError(CodeShareError):
    """Raised on a uniqueness violation."""

    status_code = 409
    error_type = "conflict"


class DuplicateUserError(ConflictError):
    """Raised when a username, email or phone is already taken."""

    error_type = "duplicate_user"

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field.capitalize()} {value} is already registered")


class DuplicateAccountError(ConflictError):
    """Raised when a user already has an account."""

    error_type = "duplicate_account"

    def __init__(self, user_uuid: str):
        self.user_uuid = user_uuid
        super().__init__(f"User {user_uuid} already has an account")


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------

class InsufficientFundsError(CodeShareError):
    """
    Raised when a deduction is larger than the current balance.

    Attributes:
        user_uuid: The account owner.
        requested: The amount the caller tried to deduct.
        available: The balance at the time of the failed deduction.
    """

    status_code = 422
    error_type = "insufficient_funds"

    def __init__(self, user_uuid: str, requested: Decimal, available: Decimal):
        self.user_uuid = user_uuid
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}"
        )


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class InvalidCredentialsError(CodeShareError):
    """Raised when login credentials are incorrect."""

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid username or password")


class InvalidVerificationCodeError(CodeShareError):
    """Raised when an email verification code is missing, wrong or expired."""

    status_code = 401
    error_type = "invalid_verification_code"

    def __init__(self, detail: str = "Verification code is invalid or expired"):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class StorageError(CodeShareError):
    """
    Raised when the database fails in a way validation did not anticipate.

    The operation and identifier are kept for logs; clients only ever see
    an opaque message.
    """

    status_code = 500
    error_type = "storage_failure"

    def __init__(self, operation: str, identifier=None):
        self.operation = operation
        self.identifier = identifier
        super().__init__(f"Storage failure during {operation} ({identifier})")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every domain error becomes {"detail", "error_type"} with the status code
    declared on its class. Called once during app startup in main.py.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "requested": str(exc.requested),
                "available": str(exc.available),
            },
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        request: Request, exc: StorageError
    ) -> JSONResponse:
        # Internal detail goes to the log only
        logger.error(
            "Storage failure: operation=%s identifier=%s",
            exc.operation,
            exc.identifier,
            exc_info=exc.__cause__,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Internal storage error", "error_type": exc.error_type},
        )

    @app.exception_handler(CodeShareError)
    async def codeshare_error_handler(
        request: Request, exc: CodeShareError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )
