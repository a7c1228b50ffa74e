"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.

The JWT secrets defined here are read once by the entry points and handed to
TokenService at construction time. Core modules never import `settings`.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_JWT_ALGORITHMS = ["HS256", "HS384", "HS512"]


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="ATS Auth Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8000, description="Auth service port")
    admin_gateway_port: int = Field(default=6000, description="Admin gateway port")

    # PostgreSQL credential store configuration
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="ats_user", description="PostgreSQL user")
    database_password: str = Field(
        default="ats_password", description="PostgreSQL password"
    )
    database_name: str = Field(default="ats_auth", description="PostgreSQL database name")
    database_pool_size: int = Field(default=10, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )

    # JWT configuration
    jwt_secret_key: str = Field(
        default="your_jwt_secret_key",
        description="Signing secret for access and service tokens",
    )
    jwt_refresh_secret_key: str = Field(
        default="your_jwt_refresh_secret_key",
        description="Signing secret for refresh tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=60, description="Access token lifetime in minutes"
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7, description="Refresh token lifetime in days"
    )
    service_token_expire_hours: int = Field(
        default=24, description="Service token lifetime in hours"
    )
    auth_cookie_name: str = Field(
        default="auth_token", description="Cookie carrying the access token"
    )

    # Kafka event bus configuration
    kafka_bootstrap_servers: str = Field(
        default="localhost:9092", description="Comma separated Kafka brokers"
    )
    kafka_client_id: str = Field(default="auth-service", description="Kafka client id")
    user_events_topic: str = Field(
        default="user-events", description="Topic receiving user lifecycle events"
    )

    # Remote auth (used by services that do not hold the signing secret)
    auth_service_url: str = Field(
        default="http://auth-service:8000", description="Base URL of the auth service"
    )
    auth_service_timeout_seconds: float = Field(
        default=5.0, description="Timeout for calls to the auth service"
    )
    service_name: str = Field(
        default="admin-service", description="Name this service identifies as"
    )
    service_token: Optional[str] = Field(
        default=None, description="Service token this service presents to others"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms are supported."""
        v_upper = v.upper()
        if v_upper not in SUPPORTED_JWT_ALGORITHMS:
            raise ValueError(f"JWT algorithm must be one of {SUPPORTED_JWT_ALGORITHMS}")
        return v_upper

    @field_validator(
        "jwt_access_token_expire_minutes",
        "jwt_refresh_token_expire_days",
        "service_token_expire_hours",
    )
    @classmethod
    def validate_positive_lifetime(cls, v: int) -> int:
        """Token lifetimes must be positive."""
        if v <= 0:
            raise ValueError("Token lifetime must be positive")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "ApplicationSettings":
        """Access and refresh tokens must be signed with different secrets."""
        if self.jwt_secret_key == self.jwt_refresh_secret_key:
            raise ValueError("jwt_secret_key and jwt_refresh_secret_key must differ")
        return self

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )


# Global settings instance
settings = ApplicationSettings()
