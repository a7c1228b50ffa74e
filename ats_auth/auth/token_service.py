"""
Token Service
-------------
Issuance, refresh and verification policies built on the token codec.

Security properties:
- Access and service tokens are signed with the access secret; refresh tokens
  with a distinct refresh secret
- Every token carries an explicit `type` claim (access, refresh, service) and
  every verification path checks it, so one kind is never accepted as another
- All codec failure reasons collapse into one error per token kind, so callers
  cannot distinguish a bad signature from an expired token
- Tokens are stateless; nothing is persisted or revoked server-side
"""

from datetime import timedelta
from typing import Any, Dict, Union

from loguru import logger

from ats_auth.auth import token_codec
from ats_auth.core.config_manager import ApplicationSettings
from ats_auth.core.exceptions import (
    InvalidAccessTokenError,
    InvalidRefreshTokenError,
    InvalidServiceTokenError,
)
from ats_auth.models.auth_models import TokenPair
from ats_auth.models.users_models import UserRecord

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"
TOKEN_TYPE_SERVICE = "service"

# Claims regenerated on every signature
_TIMING_AND_TYPE_CLAIMS = ("iat", "exp", "nbf", "type")


class TokenService:
    """Mints and verifies access, refresh and service tokens."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = token_codec.DEFAULT_ALGORITHM,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
        service_ttl: timedelta = timedelta(hours=24),
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.service_ttl = service_ttl

    @classmethod
    def from_settings(cls, app_settings: ApplicationSettings) -> "TokenService":
        return cls(
            access_secret=app_settings.jwt_secret_key,
            refresh_secret=app_settings.jwt_refresh_secret_key,
            algorithm=app_settings.jwt_algorithm,
            access_ttl=timedelta(minutes=app_settings.jwt_access_token_expire_minutes),
            refresh_ttl=timedelta(days=app_settings.jwt_refresh_token_expire_days),
            service_ttl=timedelta(hours=app_settings.service_token_expire_hours),
        )

    # ========================================================================
    # USER TOKENS
    # ========================================================================

    def _sign_pair(self, identity: Dict[str, Any]) -> TokenPair:
        access_token = token_codec.sign(
            {**identity, "type": TOKEN_TYPE_ACCESS},
            self._access_secret,
            self.access_ttl,
            self.algorithm,
        )
        refresh_token = token_codec.sign(
            {**identity, "type": TOKEN_TYPE_REFRESH},
            self._refresh_secret,
            self.refresh_ttl,
            self.algorithm,
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def issue_token_pair(self, user: Union[UserRecord, Dict[str, Any]]) -> TokenPair:
        """
        Issue an access/refresh pair carrying `{id, email, role}`.

        Args:
            user: UserRecord or mapping with id, email and role
        """
        if isinstance(user, UserRecord):
            identity = {"id": user.id, "email": user.email, "role": user.role}
        else:
            identity = {"id": str(user["id"]), "email": user["email"], "role": user["role"]}

        pair = self._sign_pair(identity)
        logger.debug(f"Token pair issued for user {identity['id']} with role {identity['role']}")
        return pair

    def _verify_typed(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        payload = token_codec.verify(token, secret, self.algorithm)
        if payload.get("type") != expected_type:
            raise token_codec.TokenMalformedError(
                f"Token type mismatch. Expected '{expected_type}', got '{payload.get('type')}'"
            )
        return payload

    def verify_access(self, token: str) -> Dict[str, Any]:
        """
        Verify a user access token.

        Raises:
            InvalidAccessTokenError: On any failure reason
        """
        try:
            return self._verify_typed(token, self._access_secret, TOKEN_TYPE_ACCESS)
        except token_codec.TokenCodecError as e:
            logger.debug(f"Access token rejected: {type(e).__name__}: {e}")
            raise InvalidAccessTokenError() from e

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        """
        Verify a refresh token.

        Raises:
            InvalidRefreshTokenError: On any failure reason
        """
        try:
            return self._verify_typed(token, self._refresh_secret, TOKEN_TYPE_REFRESH)
        except token_codec.TokenCodecError as e:
            logger.debug(f"Refresh token rejected: {type(e).__name__}: {e}")
            raise InvalidRefreshTokenError() from e

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a fresh pair.

        The presented refresh token remains valid until it expires.

        Raises:
            InvalidRefreshTokenError: If the refresh token does not verify
        """
        decoded = self.verify_refresh(refresh_token)
        identity = {
            claim: value
            for claim, value in decoded.items()
            if claim not in _TIMING_AND_TYPE_CLAIMS
        }
        pair = self._sign_pair(identity)
        logger.debug(f"Token pair refreshed for user {identity.get('id')}")
        return pair

    # ========================================================================
    # SERVICE TOKENS
    # ========================================================================

    def generate_service_token(self, service_name: str) -> str:
        """Mint a service token identifying `service_name`."""
        if not service_name:
            raise ValueError("Service name is required")

        token = token_codec.sign(
            {"service": service_name, "type": TOKEN_TYPE_SERVICE},
            self._access_secret,
            self.service_ttl,
            self.algorithm,
        )
        logger.debug(f"Service token generated for {service_name}")
        return token

    def verify_service_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a service token, requiring `type == "service"`.

        Raises:
            InvalidServiceTokenError: On any failure reason
        """
        try:
            payload = self._verify_typed(token, self._access_secret, TOKEN_TYPE_SERVICE)
        except token_codec.TokenCodecError as e:
            logger.debug(f"Service token rejected: {type(e).__name__}: {e}")
            raise InvalidServiceTokenError() from e

        if not payload.get("service"):
            raise InvalidServiceTokenError()
        return payload
