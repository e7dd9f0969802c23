"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers. Every
business failure carries its own `error_code`, which is the failure reason
clients switch on.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


# Validation

class InvalidInputError(AppException):
    """Raised when input is malformed or missing. No side effects happened."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class SelfTransferError(AppException):
    """Raised when sender and recipient resolve to the same account."""

    def __init__(self, account_id: int):
        super().__init__(
            message="Cannot transfer to your own account",
            error_code="ERR_TRANSFER_SELF",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"account_id": account_id}
        )


# Not found

class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None, error_code: str = "ERR_NOT_FOUND_001"):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class SenderNotFoundError(ResourceNotFoundError):
    """Raised when the transfer sender does not exist."""

    def __init__(self, account_id: int):
        super().__init__("Sender account", account_id, error_code="ERR_SENDER_NOT_FOUND")


class PixKeyNotFoundError(AppException):
    """Raised when a PIX key does not resolve to any account."""

    def __init__(self, key: str):
        super().__init__(
            message="PIX key not found",
            error_code="ERR_PIX_KEY_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"key": key}
        )


# Business rules / uniqueness

class InsufficientFundsError(AppException):
    """Raised when the (locked) balance does not cover the requested amount."""

    def __init__(self, account_id: int):
        super().__init__(
            message="Insufficient funds",
            error_code="ERR_INSUFFICIENT_FUNDS",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"account_id": account_id}
        )


class DuplicatePixKeyError(AppException):
    """Raised when a PIX key is already registered to any account."""

    def __init__(self, key: str):
        super().__init__(
            message="PIX key already registered",
            error_code="ERR_PIX_KEY_TAKEN",
            status_code=status.HTTP_409_CONFLICT,
            details={"key": key}
        )


class DuplicateEmailError(AppException):
    """Raised when an email is already registered."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already registered",
            error_code="ERR_EMAIL_TAKEN",
            status_code=status.HTTP_409_CONFLICT,
            details={"email": email}
        )


# Infrastructure

class TransferFailedError(AppException):
    """
    Raised when a transfer could not be committed.

    The transaction has been rolled back. The underlying exception is kept as
    `__cause__` (and on `.cause`) for diagnostics and is never sent to clients.
    """

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(
            message="Transfer failed",
            error_code="ERR_TRANSFER_FAILED",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class LedgerWriteError(AppException):
    """Raised when a direct ledger entry could not be committed."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(
            message="Ledger entry could not be recorded",
            error_code="ERR_LEDGER_WRITE_FAILED",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class AgentProfileUnavailableError(AppException):
    """Raised when the agent profile document could not be written to Redis."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(
            message="Agent profile store is unavailable",
            error_code="ERR_AGENT_PROFILE_UNAVAILABLE",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# Auth

class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances (e.g. ValueError from validators)
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
