"""
Base Database Service
--------------------
Base class for database services: session access, storage error
classification and shared logging.

Storage-library exceptions never leave this layer. They are converted into
`CredentialStoreError` carrying a `StoreErrorKind`, so callers branch on an
explicit enumeration instead of driver-specific error shapes.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncGenerator, Optional

from loguru import logger
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ats_auth.core.database_connection import DatabaseManager


class StoreErrorKind(str, Enum):
    DUPLICATE_KEY = "duplicate_key"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class CredentialStoreError(Exception):
    """Storage failure classified by kind."""

    def __init__(self, kind: StoreErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")


def classify_storage_error(error: Exception) -> StoreErrorKind:
    """Map a SQLAlchemy/driver exception onto a StoreErrorKind."""
    if isinstance(error, IntegrityError):
        return StoreErrorKind.DUPLICATE_KEY
    if isinstance(error, OperationalError):
        return StoreErrorKind.UNAVAILABLE
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return StoreErrorKind.UNAVAILABLE
    if isinstance(error, (ConnectionError, OSError, RuntimeError)):
        return StoreErrorKind.UNAVAILABLE
    return StoreErrorKind.UNKNOWN


class BaseDatabaseService:
    """
    Base class for all database service classes.

    Provides shared functionality for database operations including:
    - SQLAlchemy session management
    - Storage error classification
    - Error logging
    """

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        """
        Initialize the database service with a database manager.

        Args:
            database_manager: Optional DatabaseManager instance. If not provided,
                            uses the singleton instance for connection pooling.
        """
        self.database_manager = database_manager or DatabaseManager()
        self._service_name = self.__class__.__name__

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy session with automatic commit/rollback.

        Yields:
            AsyncSession: SQLAlchemy session
        """
        async with self.database_manager.get_session() as session:
            yield session

    def wrap_storage_error(self, operation: str, error: Exception) -> CredentialStoreError:
        """Log a storage failure and convert it to a CredentialStoreError."""
        kind = classify_storage_error(error)
        if kind is StoreErrorKind.DUPLICATE_KEY:
            logger.warning(f"{self._service_name}: {operation} hit a unique constraint")
        else:
            logger.error(f"{self._service_name}: Error during {operation}: {error}")
        return CredentialStoreError(kind, f"{operation} failed")


