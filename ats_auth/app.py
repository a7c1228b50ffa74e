"""
FastAPI Application Entry Point
-------------------------------
Auth service initialization and configuration.
Registers routers, exception handlers and lifecycle handlers, and installs
the auth collaborators on `app.state`.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ats_auth.api import auth_endpoints, health_endpoints
from ats_auth.auth.auth_controller import AuthController
from ats_auth.auth.token_service import TokenService
from ats_auth.core.config_manager import ApplicationSettings, settings
from ats_auth.core.database_connection import DatabaseManager, db_manager
from ats_auth.core.event_bus import EventPublisher, KafkaEventPublisher
from ats_auth.core.exceptions import register_exception_handlers
from ats_auth.core.logger_setup import configure_logger
from ats_auth.psql_db_services.users_service import UsersService


def create_app(
    app_settings: Optional[ApplicationSettings] = None,
    users_store=None,
    event_publisher: Optional[EventPublisher] = None,
    database_manager: Optional[DatabaseManager] = None,
) -> FastAPI:
    """
    Build the auth service application.

    Args:
        app_settings: Settings; defaults to the environment-loaded settings
        users_store: Credential store; defaults to the PostgreSQL UsersService
                     (the database is initialized in the lifespan only then)
        event_publisher: Event publisher; defaults to KafkaEventPublisher
        database_manager: Database manager for the default users store
    """
    app_settings = app_settings or settings
    manage_database = users_store is None
    database_manager = database_manager or db_manager
    users_store = users_store or UsersService(database_manager)
    event_publisher = event_publisher or KafkaEventPublisher.from_settings(app_settings)
    token_service = TokenService.from_settings(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {app_settings.app_name} v{app_settings.app_version}")
        logger.info(f"Debug mode: {app_settings.debug}")

        if manage_database:
            await database_manager.initialize(app_settings)
            await database_manager.ping()
            await users_store.ensure_schema()
            logger.info("[SUCCESS] PostgreSQL connected and ready")

        logger.info("[SUCCESS] Application startup complete")

        yield

        logger.info("Shutting down application")
        try:
            event_publisher.close()
            if manage_database:
                await database_manager.close()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.error(f"Shutdown error: {e}")

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Authentication and authorization for the applicant-tracking services",
        lifespan=lifespan,
        debug=app_settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = app_settings
    app.state.token_service = token_service
    app.state.auth_controller = AuthController(
        users_store=users_store,
        token_service=token_service,
        event_publisher=event_publisher,
        user_events_topic=app_settings.user_events_topic,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_endpoints.router)
    app.include_router(auth_endpoints.router)

    @app.get("/")
    async def root():
        """Root endpoint with basic information."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "status": "running",
            "docs": "/api/docs",
        }

    return app


def build_default_app() -> FastAPI:
    configure_logger(settings)
    return create_app(settings)
