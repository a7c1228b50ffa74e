"""
Credential Store
----------------
PostgreSQL persistence for user credentials: email, bcrypt hash and role.

Owned exclusively by the auth service. Uniqueness of `email` is enforced by
the database; a violation surfaces as CredentialStoreError(DUPLICATE_KEY).
Single-row statements only; no multi-statement transactions are required.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ats_auth.core.database_connection import DatabaseManager
from ats_auth.models.users_models import UserRecord, UserRole, normalize_email
from ats_auth.psql_db_services.base_service import BaseDatabaseService


CREATE_USERS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        user_id VARCHAR(36) PRIMARY KEY,
        email VARCHAR(320) NOT NULL UNIQUE,
        password_hash VARCHAR(255) NOT NULL,
        role VARCHAR(32) NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


class UsersService(BaseDatabaseService):
    """
    Credential store backed by the `users` table.

    Supports:
    - Lookup by (normalized) email
    - Creation of user records with database-enforced email uniqueness
    """

    VALID_USER_ROLES = UserRole.values()

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    # ========================================================================
    # SCHEMA
    # ========================================================================

    async def ensure_schema(self) -> None:
        """Create the users table if it does not exist."""
        try:
            async with self.get_session() as session:
                await session.execute(text(CREATE_USERS_TABLE_SQL))
            logger.info("Users table ready")
        except (SQLAlchemyError, ConnectionError, OSError, RuntimeError) as e:
            raise self.wrap_storage_error("ensure_schema", e) from e

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    def validate_user_role(self, user_role: str) -> None:
        """
        Validate user role.

        Raises:
            ValueError: If role is invalid
        """
        if user_role not in self.VALID_USER_ROLES:
            raise ValueError(
                f"Invalid user role '{user_role}'. Must be one of: {', '.join(self.VALID_USER_ROLES)}"
            )

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> UserRecord:
        return UserRecord(
            id=str(row["user_id"]),
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            created_at=row.get("created_at"),
        )

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """
        Fetch a user by email.

        Args:
            email: Email address in any case; normalized before lookup

        Returns:
            UserRecord or None if no user has this email

        Raises:
            CredentialStoreError: On storage failure
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(
                        "SELECT user_id, email, password_hash, role, created_at "
                        "FROM users WHERE email = :email LIMIT 1"
                    ),
                    {"email": normalize_email(email)},
                )
                row = result.mappings().one_or_none()
        except (SQLAlchemyError, ConnectionError, OSError, RuntimeError) as e:
            raise self.wrap_storage_error("find_by_email", e) from e

        return self._to_record(dict(row)) if row else None

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create_user(self, email: str, password_hash: str, role: str) -> UserRecord:
        """
        Create a new user record.

        Args:
            email: User's email address (normalized before insert)
            password_hash: bcrypt hash of the password
            role: applicant, recruiter or admin

        Returns:
            The created UserRecord

        Raises:
            ValueError: If role is invalid
            CredentialStoreError: DUPLICATE_KEY if the email is taken,
                                  UNAVAILABLE/UNKNOWN on other storage failures
        """
        self.validate_user_role(role)

        params = {
            "user_id": str(uuid4()),
            "email": normalize_email(email),
            "password_hash": password_hash,
            "role": role,
            "created_at": datetime.now(timezone.utc),
        }

        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(
                        """
                        INSERT INTO users (user_id, email, password_hash, role, created_at)
                        VALUES (:user_id, :email, :password_hash, :role, :created_at)
                        RETURNING user_id, email, password_hash, role, created_at
                        """
                    ),
                    params,
                )
                created_user = result.mappings().one_or_none()
        except (SQLAlchemyError, ConnectionError, OSError, RuntimeError) as e:
            raise self.wrap_storage_error("create_user", e) from e

        if not created_user:
            raise RuntimeError("Failed to create user record")

        logger.info(f"User created successfully: {params['email']}")
        return self._to_record(dict(created_user))
