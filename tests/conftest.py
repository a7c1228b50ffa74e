"""
Pytest configuration for ATS Auth Service tests.
Common fixtures: settings with per-run secrets, token service, in-memory
credential store, recording event publisher and a TestClient for the app.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

# Add the project root to Python path for all tests
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("JWT_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")
os.environ.setdefault("DEBUG", "true")

from ats_auth.app import create_app  # noqa: E402
from ats_auth.auth.token_service import TokenService  # noqa: E402
from ats_auth.core.config_manager import ApplicationSettings  # noqa: E402
from ats_auth.core.event_bus import EventPublisher, EventPublishError  # noqa: E402
from ats_auth.models.users_models import UserRecord, normalize_email  # noqa: E402
from ats_auth.psql_db_services.base_service import (  # noqa: E402
    CredentialStoreError,
    StoreErrorKind,
)

ACCESS_SECRET = "unit-test-access-secret"
REFRESH_SECRET = "unit-test-refresh-secret"


# ============================================================================
# FAKE COLLABORATORS
# ============================================================================


class InMemoryUsersStore:
    """Credential store keeping users in a dict keyed by normalized email."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.fail_with: Optional[StoreErrorKind] = None

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        if self.fail_with is StoreErrorKind.UNAVAILABLE:
            raise CredentialStoreError(self.fail_with, "find_by_email failed")
        return self.users.get(normalize_email(email))

    async def create_user(self, email: str, password_hash: str, role: str) -> UserRecord:
        if self.fail_with is not None:
            raise CredentialStoreError(self.fail_with, "create_user failed")
        email = normalize_email(email)
        if email in self.users:
            raise CredentialStoreError(StoreErrorKind.DUPLICATE_KEY, "create_user failed")
        user = UserRecord(
            id=str(uuid4()), email=email, password_hash=password_hash, role=role
        )
        self.users[email] = user
        return user


class RecordingEventPublisher(EventPublisher):
    """Keeps published events in memory."""

    def __init__(self, fail: bool = False):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []
        self.fail = fail
        self.closed = False

    async def publish(self, topic: str, key: str, value: Dict[str, Any]) -> None:
        if self.fail:
            raise EventPublishError("broker unavailable")
        self.events.append((topic, key, value))

    def close(self) -> None:
        self.closed = True


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def test_settings() -> ApplicationSettings:
    """Settings with secrets distinct from the environment defaults."""
    return ApplicationSettings(
        jwt_secret_key=ACCESS_SECRET,
        jwt_refresh_secret_key=REFRESH_SECRET,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService.from_settings(test_settings)


@pytest.fixture
def users_store() -> InMemoryUsersStore:
    return InMemoryUsersStore()


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def auth_app(test_settings, users_store, event_publisher):
    return create_app(
        test_settings, users_store=users_store, event_publisher=event_publisher
    )


@pytest.fixture
def client(auth_app):
    with TestClient(auth_app) as test_client:
        yield test_client


@pytest.fixture
def sample_user() -> Dict[str, str]:
    return {"id": str(uuid4()), "email": "a@b.com", "role": "applicant"}


@pytest.fixture
def failing_event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher(fail=True)
