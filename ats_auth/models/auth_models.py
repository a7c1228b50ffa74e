"""
Authentication Models
---------------------
Pydantic models for the auth HTTP surface and the events it emits.

Field names are snake_case in Python and camelCase on the wire
(`accessToken`, `refreshToken`, `userId`, ...). Both spellings are accepted
on input.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# REQUESTS
# ============================================================================


class AuthRegisterRequest(CamelModel):
    """Request model for registering a new user."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    role: str = Field(
        default="applicant", description="User role: applicant, recruiter or admin"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "a@b.com",
                "password": "secret123",
                "role": "applicant",
            }
        }
    )


class AuthLoginRequest(CamelModel):
    """Request model for logging in with email and password."""

    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "a@b.com", "password": "secret123"}}
    )


class AuthTokenRefreshRequest(CamelModel):
    """Request model for exchanging a refresh token for a new token pair."""

    refresh_token: str = Field(..., description="Valid refresh token")


class ServiceTokenValidateRequest(CamelModel):
    """Request model for validating a service token."""

    token: Optional[str] = Field(default=None, description="Service token to validate")


class ServiceTokenGenerateRequest(CamelModel):
    """
    Request model for minting a service token.

    The caller must already present a service token; the new token is issued
    to the calling service.
    """

    user_id: Optional[str] = Field(default=None, description="Identity the token acts for")
    role: Optional[str] = Field(default=None, description="Role the token acts with")
    service_name: Optional[str] = Field(
        default=None, description="Name the calling service claims (informational)"
    )


# ============================================================================
# RESPONSES
# ============================================================================


class UserPublic(CamelModel):
    """User fields safe to return to clients."""

    id: str
    email: str
    role: str


class TokenPair(CamelModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str


class AuthTokenResponse(TokenPair):
    """Returned by register and login."""

    user: UserPublic


class TokenValidationResponse(CamelModel):
    valid: bool = True
    user: Dict[str, Any]


class ServiceTokenValidationResponse(CamelModel):
    valid: bool = True
    service: str


class ServiceTokenResponse(CamelModel):
    service_token: str
    message: str = "Service token generated successfully"


# ============================================================================
# EVENTS
# ============================================================================


class UserCreatedPayload(CamelModel):
    user_id: str
    email: str
    role: str


class UserCreatedEvent(BaseModel):
    """Envelope published to the user-events topic."""

    type: Literal["USER_CREATED"] = "USER_CREATED"
    payload: UserCreatedPayload

    def to_message(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
