"""
Error Taxonomy
--------------
Exceptions shared by the auth core and the HTTP boundary.

Every error carries an HTTP status code and a machine-readable tag. The
FastAPI handlers registered by `register_exception_handlers` render them as
`{"error": <tag>, "message": <text>}`. Nothing is retried internally.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class AuthServiceError(Exception):
    """Base class for errors that terminate at the HTTP boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "InternalError"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, clear_cookie: Optional[str] = None):
        self.message = message or self.default_message
        # Name of a cookie the response must delete (cookie-mode auth failures)
        self.clear_cookie = clear_cookie
        super().__init__(self.message)


class BadRequestError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "BadRequest"
    default_message = "Bad request"


class ConflictError(AuthServiceError):
    # Existing clients expect 400 for duplicate registrations
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Conflict"
    default_message = "User already exists"


class AuthenticationFailedError(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "AuthenticationFailed"
    default_message = "Invalid credentials"


class UnauthorizedError(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Authentication required"


class InvalidTokenError(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "InvalidToken"
    default_message = "Invalid token"


class InvalidAccessTokenError(InvalidTokenError):
    error = "InvalidAccessToken"
    default_message = "Invalid access token"


class InvalidRefreshTokenError(InvalidTokenError):
    error = "InvalidRefreshToken"
    default_message = "Invalid refresh token"


class InvalidServiceTokenError(InvalidTokenError):
    error = "InvalidServiceToken"
    default_message = "Invalid service token"


class ForbiddenError(AuthServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Insufficient permissions"


class InternalError(AuthServiceError):
    pass


def create_error_response(
    status_code: int,
    error: str,
    message: str,
    clear_cookie: Optional[str] = None,
) -> JSONResponse:
    """Build the standard error body."""
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    response = JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
        headers=headers,
    )
    if clear_cookie:
        response.delete_cookie(clear_cookie)
    return response


async def auth_service_exception_handler(request: Request, exc: AuthServiceError):
    """Render an AuthServiceError."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} - {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.error} - {exc.message}")

    return create_error_response(
        exc.status_code, exc.error, exc.message, clear_cookie=exc.clear_cookie
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request body validation failures as 400 BadRequest."""
    first_error = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
    message = first_error.get("msg", "Validation error")
    if field:
        message = f"{field}: {message}"

    logger.warning(f"Validation error on {request.url.path}: {message}")
    return create_error_response(
        status.HTTP_400_BAD_REQUEST, BadRequestError.error, message
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Render unexpected exceptions without leaking internals."""
    logger.opt(exception=exc).error(
        f"Unexpected error on {request.method} {request.url.path}: {exc}"
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError.error,
        InternalError.default_message,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Add all error handlers to a FastAPI app."""
    app.add_exception_handler(AuthServiceError, auth_service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
