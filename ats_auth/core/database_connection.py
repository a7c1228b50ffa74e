"""
Database Connection Manager
---------------------------
Owns the SQLAlchemy async engine behind the credential store.

One engine per process. The auth service is its only consumer and the
`users` table its only schema; sessions commit on success and roll back on
any exception.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ats_auth.core.config_manager import ApplicationSettings

# Engine options shared by every deployment
POOL_RECYCLE_SECONDS = 3600
POOL_TIMEOUT_SECONDS = 30


class DatabaseManager:
    """
    Process-wide holder of the async engine and its sessionmaker.

    Pooled connections are pre-pinged on checkout and recycled hourly.
    """

    _instance = None
    _engine = None
    _sessionmaker = None

    def __new__(cls, *args, **kwargs):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super(DatabaseManager, cls).__new__(cls)
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @staticmethod
    def config_from_settings(app_settings: ApplicationSettings) -> Dict[str, Any]:
        return {
            "url": app_settings.database_url,
            "host": app_settings.database_host,
            "port": app_settings.database_port,
            "pool_size": app_settings.database_pool_size,
            "max_overflow": app_settings.database_max_overflow,
        }

    async def initialize(
        self,
        app_settings: Optional[ApplicationSettings] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Create the engine and sessionmaker.

        Args:
            app_settings: Settings providing the connection parameters
            config: Explicit connection parameters (url, host, port,
                    pool_size, max_overflow); takes precedence over settings
        """
        if self.is_initialized:
            logger.warning("Credential store engine already initialized")
            return

        if config is None:
            if app_settings is None:
                raise ValueError("Either app_settings or config is required")
            config = self.config_from_settings(app_settings)

        logger.info(
            f"Connecting credential store to {config.get('host')}:{config.get('port')}"
        )

        try:
            engine = create_async_engine(
                config["url"],
                pool_size=config.get("pool_size", 5),
                max_overflow=config.get("max_overflow", 5),
                pool_pre_ping=True,
                pool_recycle=POOL_RECYCLE_SECONDS,
                pool_timeout=POOL_TIMEOUT_SECONDS,
                echo=False,
            )
        except Exception as e:
            logger.error(f"Error creating credential store engine: {e}")
            raise

        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            bind=engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.info("Credential store engine ready")

    async def ping(self) -> None:
        """Round-trip `SELECT 1`; raises if PostgreSQL is unreachable."""
        async with self.get_session() as session:
            await session.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Dispose the engine and drop pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Credential store engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits on success and rolls back on error.

        Raises:
            RuntimeError: If the engine has not been initialized
        """
        if not self._sessionmaker:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(f"Session rolled back: {e}")
            raise
        finally:
            await session.close()


# Global database manager instance
db_manager = DatabaseManager()
