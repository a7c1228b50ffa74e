"""
Auth Controller Tests
---------------------
Register, login, refresh, validate and generate-token operations against an
in-memory credential store and a recording event publisher.
"""

import pytest

from ats_auth.auth.auth_controller import AuthController
from ats_auth.core.exceptions import (
    AuthenticationFailedError,
    BadRequestError,
    ConflictError,
    InternalError,
    InvalidAccessTokenError,
    InvalidRefreshTokenError,
    InvalidServiceTokenError,
    UnauthorizedError,
)
from ats_auth.psql_db_services.base_service import StoreErrorKind
from ats_auth.utils.password_hashing import PasswordHasher


@pytest.fixture
def controller(users_store, token_service, event_publisher):
    return AuthController(
        users_store=users_store,
        token_service=token_service,
        event_publisher=event_publisher,
        user_events_topic="user-events",
    )


class TestRegister:
    """Test user registration."""

    @pytest.mark.asyncio
    async def test_register_success(self, controller, token_service):
        result = await controller.register("a@b.com", "p", "applicant")

        assert result.user.email == "a@b.com"
        assert result.user.role == "applicant"
        assert token_service.verify_access(result.access_token)["id"] == result.user.id
        assert token_service.verify_refresh(result.refresh_token)["id"] == result.user.id

    @pytest.mark.asyncio
    async def test_register_stores_bcrypt_hash(self, controller, users_store):
        await controller.register("a@b.com", "p", "applicant")
        stored = users_store.users["a@b.com"]

        assert stored.password_hash != "p"
        assert stored.password_hash.startswith("$2b$10$")
        assert PasswordHasher.verify_password("p", stored.password_hash)

    @pytest.mark.asyncio
    async def test_register_response_has_no_password(self, controller):
        result = await controller.register("a@b.com", "p", "applicant")
        body = result.model_dump(by_alias=True)

        assert set(body["user"]) == {"id", "email", "role"}
        assert "password" not in str(body).lower()

    @pytest.mark.asyncio
    async def test_register_publishes_user_created(self, controller, event_publisher):
        result = await controller.register("a@b.com", "p", "recruiter")

        assert len(event_publisher.events) == 1
        topic, key, value = event_publisher.events[0]
        assert topic == "user-events"
        assert key == result.user.id
        assert value == {
            "type": "USER_CREATED",
            "payload": {"userId": result.user.id, "email": "a@b.com", "role": "recruiter"},
        }

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, controller, users_store, event_publisher):
        await controller.register("a@b.com", "p", "applicant")

        with pytest.raises(ConflictError) as exc_info:
            await controller.register("a@b.com", "other", "applicant")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "User already exists"
        assert len(users_store.users) == 1
        assert len(event_publisher.events) == 1

    @pytest.mark.asyncio
    async def test_register_duplicate_email_differing_case(self, controller):
        await controller.register("a@b.com", "p", "applicant")

        with pytest.raises(ConflictError):
            await controller.register("  A@B.COM ", "p", "applicant")

    @pytest.mark.asyncio
    async def test_register_defaults_role(self, controller):
        result = await controller.register("a@b.com", "p", None)

        assert result.user.role == "applicant"

    @pytest.mark.asyncio
    async def test_register_invalid_role(self, controller, users_store):
        with pytest.raises(BadRequestError):
            await controller.register("a@b.com", "p", "superuser")

        assert users_store.users == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("", "p"), ("a@b.com", ""), (None, "p")])
    async def test_register_missing_fields(self, controller, email, password):
        with pytest.raises(BadRequestError):
            await controller.register(email, password, "applicant")

    @pytest.mark.asyncio
    async def test_register_survives_publish_failure(
        self, users_store, token_service, failing_event_publisher
    ):
        controller = AuthController(users_store, token_service, failing_event_publisher)
        result = await controller.register("a@b.com", "p", "applicant")

        assert result.user.email == "a@b.com"
        assert "a@b.com" in users_store.users
        assert failing_event_publisher.events == []

    @pytest.mark.asyncio
    async def test_register_duplicate_key_race(self, controller, users_store):
        """A unique-constraint violation from the store maps to a conflict."""
        users_store.fail_with = StoreErrorKind.DUPLICATE_KEY

        with pytest.raises(ConflictError):
            await controller.register("a@b.com", "p", "applicant")

    @pytest.mark.asyncio
    async def test_register_store_unavailable(self, controller, users_store, event_publisher):
        users_store.fail_with = StoreErrorKind.UNAVAILABLE

        with pytest.raises(InternalError):
            await controller.register("a@b.com", "p", "applicant")

        assert event_publisher.events == []


class TestLogin:
    """Test credential authentication."""

    @pytest.mark.asyncio
    async def test_login_success(self, controller, token_service):
        registered = await controller.register("a@b.com", "p", "admin")
        result = await controller.login("a@b.com", "p")

        assert result.user.id == registered.user.id
        assert token_service.verify_access(result.access_token)["role"] == "admin"

    @pytest.mark.asyncio
    async def test_login_normalizes_email(self, controller):
        await controller.register("a@b.com", "p", "applicant")
        result = await controller.login("A@B.com", "p")

        assert result.user.email == "a@b.com"

    @pytest.mark.asyncio
    async def test_login_failures_are_indistinguishable(self, controller):
        await controller.register("a@b.com", "p", "applicant")

        with pytest.raises(AuthenticationFailedError) as wrong_password:
            await controller.login("a@b.com", "wrong")
        with pytest.raises(AuthenticationFailedError) as unknown_email:
            await controller.login("nobody@b.com", "p")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_email_runs_password_check(
        self, users_store, token_service, event_publisher
    ):
        """Unknown emails are checked against the dummy hash, like a wrong password."""
        checked = []

        class RecordingHasher(PasswordHasher):
            @staticmethod
            def verify_password(password, password_hash):
                checked.append(password_hash)
                return PasswordHasher.verify_password(password, password_hash)

        controller = AuthController(
            users_store=users_store,
            token_service=token_service,
            event_publisher=event_publisher,
            password_hasher=RecordingHasher,
        )

        with pytest.raises(AuthenticationFailedError):
            await controller.login("nobody@b.com", "p")

        assert checked == [PasswordHasher.dummy_hash()]

    @pytest.mark.asyncio
    async def test_login_store_unavailable(self, controller, users_store):
        users_store.fail_with = StoreErrorKind.UNAVAILABLE

        with pytest.raises(InternalError):
            await controller.login("a@b.com", "p")


class TestRefreshToken:
    @pytest.mark.asyncio
    async def test_refresh_success(self, controller, token_service):
        registered = await controller.register("a@b.com", "p", "applicant")
        pair = await controller.refresh_token(registered.refresh_token)

        assert token_service.verify_access(pair.access_token)["id"] == registered.user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_refresh_missing_token(self, controller, token):
        with pytest.raises(BadRequestError) as exc_info:
            await controller.refresh_token(token)

        assert exc_info.value.message == "Refresh token is required"

    @pytest.mark.asyncio
    async def test_refresh_with_access_token(self, controller):
        registered = await controller.register("a@b.com", "p", "applicant")

        with pytest.raises(InvalidRefreshTokenError):
            await controller.refresh_token(registered.access_token)


class TestValidateToken:
    @pytest.mark.asyncio
    async def test_validate_success(self, controller):
        registered = await controller.register("a@b.com", "p", "recruiter")
        result = await controller.validate_token(f"Bearer {registered.access_token}")

        assert result.valid is True
        assert result.user["id"] == registered.user.id
        assert result.user["role"] == "recruiter"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "", "Bearer", "Token abc"])
    async def test_validate_no_token(self, controller, header):
        with pytest.raises(UnauthorizedError) as exc_info:
            await controller.validate_token(header)

        assert exc_info.value.message == "No token provided"

    @pytest.mark.asyncio
    async def test_validate_invalid_token(self, controller):
        with pytest.raises(InvalidAccessTokenError):
            await controller.validate_token("Bearer not.a.token")


class TestServiceTokenOperations:
    @pytest.mark.asyncio
    async def test_validate_service_success(self, controller, token_service):
        token = token_service.generate_service_token("admin-service")
        result = await controller.validate_service_token(token)

        assert result.valid is True
        assert result.service == "admin-service"

    @pytest.mark.asyncio
    async def test_validate_service_missing(self, controller):
        with pytest.raises(BadRequestError):
            await controller.validate_service_token(None)

    @pytest.mark.asyncio
    async def test_validate_service_rejects_user_token(self, controller):
        registered = await controller.register("a@b.com", "p", "admin")

        with pytest.raises(InvalidServiceTokenError):
            await controller.validate_service_token(registered.access_token)

    @pytest.mark.asyncio
    async def test_generate_token_for_caller(self, controller, token_service):
        result = await controller.generate_token("admin-service", "admin-service", "service")

        assert result.message == "Service token generated successfully"
        payload = token_service.verify_service_token(result.service_token)
        assert payload["service"] == "admin-service"

    @pytest.mark.asyncio
    async def test_generate_token_requires_service_caller(self, controller):
        with pytest.raises(UnauthorizedError):
            await controller.generate_token(None, "u-1", "admin")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,role", [(None, "admin"), ("u-1", None), ("", "")])
    async def test_generate_token_requires_user_id_and_role(self, controller, user_id, role):
        with pytest.raises(BadRequestError) as exc_info:
            await controller.generate_token("admin-service", user_id, role)

        assert exc_info.value.message == "userId and role are required"
