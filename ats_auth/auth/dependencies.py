"""
FastAPI Authorization Dependencies
----------------------------------
The request gate every protected route composes through.

A guard is parameterized by an immutable AuthGuardConfig:
- allowed_roles: roles admitted (empty = any authenticated caller)
- token_source: Authorization header or cookie
- cookie_name: cookie carrying the token in cookie mode; when unset the
  application's `auth_cookie_name` setting applies
- is_service_auth: verify service tokens instead of user access tokens

Algorithm:
1. Extract the raw token; 401 "No token provided" if absent
2. Verify it (user or service rules); 401 "Invalid token" /
   "Invalid service token" on failure, clearing the cookie in cookie mode
3. If allowed_roles is set, compare the decoded role case-insensitively;
   403 "Insufficient permissions" if absent
4. Attach the decoded identity to request.state.user and return it

AuthGuard verifies in-process with the shared secret. RemoteAuthGuard
(remote_auth_client module) delegates verification to the auth service and
shares steps 1, 3 and 4 through BaseAuthGuard.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union

from fastapi import Request
from loguru import logger

from ats_auth.auth.token_service import TokenService
from ats_auth.core.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    UnauthorizedError,
)


class TokenSource(str, Enum):
    HEADER = "header"
    COOKIE = "cookie"


DEFAULT_COOKIE_NAME = "auth_token"


@dataclass(frozen=True)
class AuthGuardConfig:
    """
    Immutable guard parameterization.

    `token_source` accepts a TokenSource or its string value. A bare string
    for `allowed_roles` is a single role, not a collection of characters.

    Raises:
        ValueError: Unknown token source
    """

    allowed_roles: FrozenSet[str] = field(default_factory=frozenset)
    token_source: Union[TokenSource, str] = TokenSource.HEADER
    cookie_name: Optional[str] = None
    is_service_auth: bool = False

    def __post_init__(self):
        roles = self.allowed_roles
        if isinstance(roles, str):
            roles = [roles]
        # Roles are compared lower-cased
        object.__setattr__(
            self, "allowed_roles", frozenset(role.lower() for role in roles)
        )
        object.__setattr__(self, "token_source", TokenSource(self.token_source))

    @classmethod
    def for_roles(cls, roles: Iterable[str], **kwargs) -> "AuthGuardConfig":
        return cls(allowed_roles=frozenset(roles), **kwargs)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_token_from_header(request: Request) -> Optional[str]:
    return extract_bearer_token(request.headers.get("Authorization"))


def get_token_from_cookie(
    request: Request, cookie_name: str = DEFAULT_COOKIE_NAME
) -> Optional[str]:
    return request.cookies.get(cookie_name) or None


def has_allowed_role(payload: Dict[str, Any], allowed_roles: FrozenSet[str]) -> bool:
    """Case-insensitive role check. An empty set admits everyone."""
    if not allowed_roles:
        return True
    role = payload.get("role")
    return isinstance(role, str) and role.lower() in allowed_roles


class BaseAuthGuard:
    """Shared extraction, role check and identity attachment."""

    def __init__(self, config: Optional[AuthGuardConfig] = None):
        self.config = config or AuthGuardConfig()

    def get_cookie_name(self, request: Request) -> str:
        if self.config.cookie_name:
            return self.config.cookie_name
        app_settings = getattr(request.app.state, "settings", None)
        return getattr(app_settings, "auth_cookie_name", None) or DEFAULT_COOKIE_NAME

    def extract_token(self, request: Request) -> Optional[str]:
        if self.config.token_source is TokenSource.COOKIE:
            return get_token_from_cookie(request, self.get_cookie_name(request))
        return get_token_from_header(request)

    async def verify(self, request: Request, token: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _failure(self, request: Request, message: str) -> UnauthorizedError:
        clear_cookie = (
            self.get_cookie_name(request)
            if self.config.token_source is TokenSource.COOKIE
            else None
        )
        return UnauthorizedError(message, clear_cookie=clear_cookie)

    async def __call__(self, request: Request) -> Dict[str, Any]:
        token = self.extract_token(request)
        if not token:
            logger.warning(f"Missing token on {request.url.path}")
            raise UnauthorizedError("No token provided")

        try:
            payload = await self.verify(request, token)
        except (InvalidTokenError, UnauthorizedError) as e:
            logger.warning(f"Token rejected on {request.url.path}: {e.message}")
            if self.config.is_service_auth:
                raise self._failure(request, "Invalid service token") from e
            raise self._failure(request, "Invalid token") from e

        if not has_allowed_role(payload, self.config.allowed_roles):
            logger.warning(
                f"Access denied on {request.url.path} for role {payload.get('role')!r}"
            )
            raise ForbiddenError("Insufficient permissions")

        request.state.user = payload
        return payload


class AuthGuard(BaseAuthGuard):
    """
    Dependency verifying tokens in-process.

    Uses the TokenService given at construction, or the one installed on
    `app.state.token_service` by the application factory.

    Usage:
        require_admin = AuthGuard(AuthGuardConfig.for_roles(["admin"]))
        @router.get("/admin-only")
        async def admin_only(user: dict = Depends(require_admin)): ...
    """

    def __init__(
        self,
        config: Optional[AuthGuardConfig] = None,
        token_service: Optional[TokenService] = None,
    ):
        super().__init__(config)
        self._token_service = token_service

    def get_token_service(self, request: Request) -> TokenService:
        if self._token_service is not None:
            return self._token_service
        token_service = getattr(request.app.state, "token_service", None)
        if token_service is None:
            raise RuntimeError("TokenService not configured on application state")
        return token_service

    async def verify(self, request: Request, token: str) -> Dict[str, Any]:
        token_service = self.get_token_service(request)
        if self.config.is_service_auth:
            return token_service.verify_service_token(token)
        return token_service.verify_access(token)


# Convenience guards for the fixed role set

require_user = AuthGuard()
"""Any authenticated user."""

require_applicant = AuthGuard(AuthGuardConfig.for_roles(["applicant"]))

require_recruiter = AuthGuard(AuthGuardConfig.for_roles(["recruiter", "admin"]))
"""Recruiters; admins are admitted too."""

require_admin = AuthGuard(AuthGuardConfig.for_roles(["admin"]))

require_service = AuthGuard(AuthGuardConfig(is_service_auth=True))
"""Callers presenting a valid service token."""
