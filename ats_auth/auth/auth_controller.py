"""
Auth Controller
---------------
Register, login, refresh, validate, validate-service and generate-token
operations. Each call is independent; the controller holds no per-request
state.

Collaborators are injected at construction:
- users_store: credential store exposing `find_by_email(email)` and
  `create_user(email, password_hash, role)` (see UsersService)
- token_service: TokenService
- event_publisher: EventPublisher for USER_CREATED notifications
"""

from typing import Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from ats_auth.auth.dependencies import extract_bearer_token
from ats_auth.auth.token_service import TokenService
from ats_auth.core.event_bus import EventPublisher
from ats_auth.core.exceptions import (
    AuthenticationFailedError,
    BadRequestError,
    ConflictError,
    InternalError,
    InvalidRefreshTokenError,
    UnauthorizedError,
)
from ats_auth.models.auth_models import (
    AuthTokenResponse,
    ServiceTokenResponse,
    ServiceTokenValidationResponse,
    TokenPair,
    TokenValidationResponse,
    UserCreatedEvent,
    UserCreatedPayload,
)
from ats_auth.models.users_models import UserRecord, UserRole, normalize_email
from ats_auth.psql_db_services.base_service import CredentialStoreError, StoreErrorKind
from ats_auth.utils.password_hashing import PasswordHasher

USER_CREATED = "USER_CREATED"

# Non-enumerating message shared by unknown-email and wrong-password failures
INVALID_CREDENTIALS = "Invalid credentials"


class AuthController:
    """HTTP-facing auth operations on top of the credential store and tokens."""

    def __init__(
        self,
        users_store,
        token_service: TokenService,
        event_publisher: EventPublisher,
        user_events_topic: str = "user-events",
        password_hasher=PasswordHasher,
    ):
        self.users_store = users_store
        self.token_service = token_service
        self.event_publisher = event_publisher
        self.user_events_topic = user_events_topic
        self.password_hasher = password_hasher

    # ========================================================================
    # USER CREDENTIALS
    # ========================================================================

    async def register(self, email: str, password: str, role: str) -> AuthTokenResponse:
        """
        Create a user, announce it on the event bus and issue a token pair.

        Raises:
            BadRequestError: Missing fields or unknown role
            ConflictError: Email already registered
            InternalError: Credential store unavailable
        """
        if not email or not password:
            raise BadRequestError("Email and password are required")
        role = (role or UserRole.APPLICANT.value).lower()
        if role not in UserRole.values():
            raise BadRequestError(
                f"Invalid role '{role}'. Must be one of: {', '.join(UserRole.values())}"
            )

        email = normalize_email(email)
        logger.info(f"Registration attempt for {email}")

        try:
            if await self.users_store.find_by_email(email) is not None:
                raise ConflictError("User already exists")

            password_hash = await run_in_threadpool(
                self.password_hasher.hash_password, password
            )
            user = await self.users_store.create_user(
                email=email, password_hash=password_hash, role=role
            )
        except CredentialStoreError as e:
            if e.kind is StoreErrorKind.DUPLICATE_KEY:
                raise ConflictError("User already exists") from e
            raise InternalError("User registration failed") from e

        await self._notify_user_created(user)

        tokens = self.token_service.issue_token_pair(user)
        logger.info(f"User {user.id} registered with role {user.role}")
        return AuthTokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            user=user.to_public(),
        )

    async def _notify_user_created(self, user: UserRecord) -> None:
        """Best-effort USER_CREATED publish; failures are logged, never raised."""
        event = UserCreatedEvent(
            payload=UserCreatedPayload(user_id=user.id, email=user.email, role=user.role)
        )
        try:
            await self.event_publisher.publish(
                self.user_events_topic, key=user.id, value=event.to_message()
            )
        except Exception as e:
            logger.critical(
                f"{USER_CREATED} event for user {user.id} was not published: {e}"
            )

    async def login(self, email: str, password: str) -> AuthTokenResponse:
        """
        Authenticate with email and password.

        Raises:
            AuthenticationFailedError: Unknown email or wrong password (same message)
        """
        if not email or not password:
            raise AuthenticationFailedError(INVALID_CREDENTIALS)

        email = normalize_email(email)
        try:
            user: Optional[UserRecord] = await self.users_store.find_by_email(email)
        except CredentialStoreError as e:
            raise InternalError("Login failed") from e

        # Unknown emails still pay for a bcrypt comparison
        password_hash = (
            user.password_hash if user is not None else self.password_hasher.dummy_hash()
        )
        password_ok = await run_in_threadpool(
            self.password_hasher.verify_password, password, password_hash
        )

        if user is None:
            logger.warning("Login failed: unknown email")
            raise AuthenticationFailedError(INVALID_CREDENTIALS)
        if not password_ok:
            logger.warning(f"Login failed: bad password for user {user.id}")
            raise AuthenticationFailedError(INVALID_CREDENTIALS)

        tokens = self.token_service.issue_token_pair(user)
        logger.info(f"User {user.id} authenticated successfully")
        return AuthTokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            user=user.to_public(),
        )

    # ========================================================================
    # TOKENS
    # ========================================================================

    async def refresh_token(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchange a refresh token for a new pair.

        Raises:
            BadRequestError: No refresh token supplied
            InvalidRefreshTokenError: Token does not verify
        """
        if not refresh_token:
            raise BadRequestError("Refresh token is required")

        try:
            return self.token_service.refresh(refresh_token)
        except InvalidRefreshTokenError:
            raise
        except Exception as e:
            raise InvalidRefreshTokenError() from e

    async def validate_token(self, authorization: Optional[str]) -> TokenValidationResponse:
        """
        Validate the bearer token of an Authorization header value.

        Raises:
            UnauthorizedError: No token supplied
            InvalidAccessTokenError: Token does not verify
        """
        token = extract_bearer_token(authorization)
        if not token:
            raise UnauthorizedError("No token provided")

        payload = self.token_service.verify_access(token)
        return TokenValidationResponse(valid=True, user=payload)

    async def validate_service_token(
        self, token: Optional[str]
    ) -> ServiceTokenValidationResponse:
        """
        Validate a service token supplied in a request body.

        Raises:
            BadRequestError: No token supplied
            InvalidServiceTokenError: Token does not verify
        """
        if not token:
            raise BadRequestError("Service token is required")

        payload = self.token_service.verify_service_token(token)
        return ServiceTokenValidationResponse(valid=True, service=payload["service"])

    async def generate_token(
        self,
        requesting_service: Optional[str],
        user_id: Optional[str],
        role: Optional[str],
    ) -> ServiceTokenResponse:
        """
        Mint a new service token for an already authenticated service.

        Args:
            requesting_service: Service name from the caller's verified service token
            user_id: Identity the caller acts for (required)
            role: Role the caller acts with (required)

        Raises:
            UnauthorizedError: Caller is not an authenticated service
            BadRequestError: user_id or role missing
        """
        if not requesting_service:
            raise UnauthorizedError("Invalid service token")
        if not user_id or not role:
            raise BadRequestError("userId and role are required")

        service_token = self.token_service.generate_service_token(requesting_service)
        logger.info(
            f"Service token issued to {requesting_service} acting for {user_id} ({role})"
        )
        return ServiceTokenResponse(service_token=service_token)
