"""Application exception classes and handlers."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Bad Request (400) ---


class InvalidRequestError(AppException):
    """Request body is missing a required field or has an invalid value."""

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


# --- Server (500) ---


class DocumentStoreError(AppException):
    """Documentation file could not be loaded."""

    def __init__(self, message: str = "Failed to load documentation") -> None:
        super().__init__(
            message=message,
            code="DOCUMENT_STORE_ERROR",
            status_code=500,
        )


# --- Rate Limit (429) ---


class RateLimitError(AppException):
    """Too many requests from one client address."""

    def __init__(self) -> None:
        super().__init__(
            message="Rate limit exceeded",
            code="RATE_LIMIT_EXCEEDED",
            status_code=429,
        )


# --- Exception Handlers ---


def _error_response(exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": exc.status_code,
            "message": exc.message,
            "code": exc.code,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return _error_response(exc)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 with the offending fields."""
    fields: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    message = "Invalid request"
    if fields:
        message = f"Missing or invalid field(s): {', '.join(fields)}"
    return _error_response(InvalidRequestError(message=message))


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors.

    Kept synchronous: SlowAPIMiddleware calls it directly, without awaiting.
    """
    return _error_response(RateLimitError())
