"""
Custom exceptions and error handlers for consistent error responses.

Every failure reaches the client as the same envelope:
``{"success": false, "error": "<message>"}``.
"""

import logging
from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppException):
    """Raised when a required field is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class InsufficientPermissionsError(AppException):
    """Raised when the verified caller acts on behalf of another user."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(AppException):
    """
    Raised when no row matches an id + owner lookup.

    Deliberately does not say whether the row is missing or owned by someone else.
    """

    def __init__(self, resource: str):
        super().__init__(message=f"{resource} not found", status_code=status.HTTP_404_NOT_FOUND)


class TripAlreadyCompletedError(AppException):
    """Raised when a completed trip is stopped again or receives points."""

    def __init__(self, trip_id=None):
        message = "Trip already completed"
        if trip_id:
            message = f"Trip {trip_id} already completed"
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT)


class ConflictError(AppException):
    """Raised when a unique value is already taken."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT)


class ReferentialError(AppException):
    """Raised on a foreign-key violation, e.g. an unknown owning user."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class StorageError(AppException):
    """Raised when the database round trip or transaction fails."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_envelope(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_envelope(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for HTTP errors (unknown route, wrong method) with the standard envelope."""
    return error_envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic request validation errors, surfaced as 400."""
    errors = exc.errors()
    message = "Validation error"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
    return error_envelope(status.HTTP_400_BAD_REQUEST, message)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)
    return error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal server error occurred")
