"""
Authentication Module
---------------------
Cross-service authentication and authorization for the applicant-tracking
services.

Core Components:
- token_codec: sign/verify JWTs with a symmetric secret
- token_service: access/refresh/service token policies
- auth_controller: register, login, refresh, validate, generate operations
- dependencies: AuthGuard request gate (in-process verification)
- remote_auth_client: RemoteAuthClient and RemoteAuthGuard (delegated verification)

Usage:
    from ats_auth.auth import require_admin

    @router.get("/admin-only")
    async def admin_only(user: dict = Depends(require_admin)):
        return {"user_id": user["id"], "role": user["role"]}
"""

from ats_auth.auth.auth_controller import AuthController
from ats_auth.auth.dependencies import (
    AuthGuard,
    AuthGuardConfig,
    BaseAuthGuard,
    TokenSource,
    extract_bearer_token,
    require_admin,
    require_applicant,
    require_recruiter,
    require_service,
    require_user,
)
from ats_auth.auth.remote_auth_client import (
    RemoteAuthClient,
    RemoteAuthGuard,
    TokenValidationFailedError,
)
from ats_auth.auth.token_service import TokenService

__all__ = [
    "AuthController",
    # Guards
    "AuthGuard",
    "AuthGuardConfig",
    "BaseAuthGuard",
    "TokenSource",
    "extract_bearer_token",
    "require_admin",
    "require_applicant",
    "require_recruiter",
    "require_service",
    "require_user",
    # Remote
    "RemoteAuthClient",
    "RemoteAuthGuard",
    "TokenValidationFailedError",
    # Tokens
    "TokenService",
]
