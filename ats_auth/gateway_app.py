"""
Admin Gateway Application
-------------------------
The admin gateway does not hold the JWT signing secret. Authorization is
delegated to the auth service through RemoteAuthClient, installed on
`app.state.remote_auth_client`.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from ats_auth.api import admin_gateway_endpoints, health_endpoints
from ats_auth.auth.remote_auth_client import RemoteAuthClient
from ats_auth.core.config_manager import ApplicationSettings, settings
from ats_auth.core.exceptions import register_exception_handlers
from ats_auth.core.logger_setup import configure_logger


def create_gateway_app(
    app_settings: Optional[ApplicationSettings] = None,
    remote_auth_client: Optional[RemoteAuthClient] = None,
) -> FastAPI:
    """Build the admin gateway application."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Starting admin gateway; delegating auth to {app_settings.auth_service_url}"
        )
        yield
        logger.info("Admin gateway shut down")

    app = FastAPI(
        title="Admin Panel Service",
        version=app_settings.app_version,
        lifespan=lifespan,
        debug=app_settings.debug,
    )
    app.state.settings = app_settings
    app.state.remote_auth_client = remote_auth_client or RemoteAuthClient.from_settings(
        app_settings
    )

    register_exception_handlers(app)

    app.include_router(health_endpoints.router)
    app.include_router(admin_gateway_endpoints.router)
    return app


def build_default_gateway_app() -> FastAPI:
    configure_logger(settings, service_name="admin-gateway")
    return create_gateway_app(settings)
