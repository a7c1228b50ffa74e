"""
Authentication Endpoints
------------------------
HTTP surface of the auth service. Every route delegates to AuthController,
installed on `app.state.auth_controller` by the application factory.

Errors are raised as AuthServiceError subclasses and rendered by the
handlers in ats_auth.core.exceptions.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request, status
from loguru import logger

from ats_auth.auth.auth_controller import AuthController
from ats_auth.auth.dependencies import require_service
from ats_auth.models.auth_models import (
    AuthLoginRequest,
    AuthRegisterRequest,
    AuthTokenRefreshRequest,
    AuthTokenResponse,
    ServiceTokenGenerateRequest,
    ServiceTokenResponse,
    ServiceTokenValidateRequest,
    ServiceTokenValidationResponse,
    TokenPair,
    TokenValidationResponse,
)

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_auth_controller(request: Request) -> AuthController:
    return request.app.state.auth_controller


# ============================================================================
# USER CREDENTIAL ENDPOINTS
# ============================================================================


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user and get a token pair",
)
async def register(
    request: AuthRegisterRequest,
    controller: AuthController = Depends(get_auth_controller),
):
    """
    Create a user account.

    Returns 201 with access/refresh tokens and the public user fields.
    Returns 400 if the email is already registered.
    """
    return await controller.register(request.email, request.password, request.role)


@router.post(
    "/login",
    response_model=AuthTokenResponse,
    summary="Authenticate with email and password",
)
async def login(
    request: AuthLoginRequest,
    controller: AuthController = Depends(get_auth_controller),
):
    """
    Authenticate and return a fresh token pair.

    Unknown email and wrong password both return 401 with the same message.
    """
    return await controller.login(request.email, request.password)


# ============================================================================
# TOKEN ENDPOINTS
# ============================================================================


@router.post("/refresh", response_model=TokenPair, summary="Refresh a token pair")
async def refresh_token(
    request: AuthTokenRefreshRequest,
    controller: AuthController = Depends(get_auth_controller),
):
    """Exchange a refresh token for a new access/refresh pair."""
    return await controller.refresh_token(request.refresh_token)


@router.get(
    "/validate",
    response_model=TokenValidationResponse,
    summary="Validate a bearer access token",
)
async def validate_token(
    authorization: Optional[str] = Header(default=None),
    controller: AuthController = Depends(get_auth_controller),
):
    """
    Validate the access token in the Authorization header.

    Called by services that do not hold the signing secret.
    """
    return await controller.validate_token(authorization)


@router.post(
    "/validate-service",
    response_model=ServiceTokenValidationResponse,
    summary="Validate a service token",
)
async def validate_service_token(
    request: ServiceTokenValidateRequest,
    controller: AuthController = Depends(get_auth_controller),
):
    """Validate a service token supplied in the request body."""
    return await controller.validate_service_token(request.token)


@router.post(
    "/generate",
    response_model=ServiceTokenResponse,
    summary="Generate a service token (service callers only)",
)
async def generate_token(
    request: ServiceTokenGenerateRequest,
    caller: Dict[str, Any] = Depends(require_service),
    controller: AuthController = Depends(get_auth_controller),
):
    """
    Mint a new service token for the calling service.

    The caller must present a valid service token as a bearer token.
    """
    logger.debug(f"Service token requested by {caller.get('service')}")
    return await controller.generate_token(
        caller.get("service"), request.user_id, request.role
    )
