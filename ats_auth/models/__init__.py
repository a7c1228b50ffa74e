"""
Models Package
--------------
Pydantic models for the auth HTTP surface, events and stored users.
"""

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
    UserCreatedEvent,
    UserCreatedPayload,
    UserPublic,
)
from ats_auth.models.users_models import UserRecord, UserRole, normalize_email

__all__ = [
    # Requests
    "AuthLoginRequest",
    "AuthRegisterRequest",
    "AuthTokenRefreshRequest",
    "ServiceTokenGenerateRequest",
    "ServiceTokenValidateRequest",
    # Responses
    "AuthTokenResponse",
    "ServiceTokenResponse",
    "ServiceTokenValidationResponse",
    "TokenPair",
    "TokenValidationResponse",
    "UserPublic",
    # Events
    "UserCreatedEvent",
    "UserCreatedPayload",
    # Users
    "UserRecord",
    "UserRole",
    "normalize_email",
]
