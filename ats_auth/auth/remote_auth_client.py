"""
Remote Auth Client
------------------
Client for services that do not hold the signing secret: validation is
delegated to the auth service over HTTP.

Every failure (transport error, timeout, non-2xx response, unexpected body)
is raised as TokenValidationFailedError, a 401 Unauthorized. An unreachable
auth service and an invalid token are indistinguishable to the caller.
There is no retry.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import Request
from loguru import logger

from ats_auth.auth.dependencies import AuthGuardConfig, BaseAuthGuard
from ats_auth.core.config_manager import ApplicationSettings
from ats_auth.core.exceptions import UnauthorizedError

AUTH_API_PREFIX = "/api/auth"


class TokenValidationFailedError(UnauthorizedError):
    default_message = "Token validation failed"


class RemoteAuthClient:
    """Calls the auth service's validate and generate endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        service_token: Optional[str] = None,
        service_name: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.service_token = service_token
        self.service_name = service_name
        self._transport = transport

    @classmethod
    def from_settings(cls, app_settings: ApplicationSettings) -> "RemoteAuthClient":
        return cls(
            base_url=app_settings.auth_service_url,
            timeout_seconds=app_settings.auth_service_timeout_seconds,
            service_token=app_settings.service_token,
            service_name=app_settings.service_name,
        )

    async def _request(
        self,
        method: str,
        path: str,
        failure_message: str,
        **kwargs,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{AUTH_API_PREFIX}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Auth service rejected {path}: {e.response.status_code}")
            raise TokenValidationFailedError(failure_message) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Auth service call {path} failed: {e}")
            raise TokenValidationFailedError(failure_message) from e

        if not isinstance(body, dict):
            raise TokenValidationFailedError(failure_message)
        return body

    async def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate a user access token.

        Returns:
            `{"valid": True, "user": {...}}`

        Raises:
            TokenValidationFailedError: On any failure
        """
        body = await self._request(
            "GET",
            "/validate",
            "Token validation failed",
            headers={"Authorization": f"Bearer {token}"},
        )
        if body.get("valid") is not True or not isinstance(body.get("user"), dict):
            raise TokenValidationFailedError("Token validation failed")
        return body

    async def validate_service_token(self, service_token: str) -> Dict[str, Any]:
        """
        Validate a service token.

        Returns:
            `{"valid": True, "service": "<name>"}`
        """
        body = await self._request(
            "POST",
            "/validate-service",
            "Service token validation failed",
            json={"token": service_token},
        )
        if body.get("valid") is not True or not body.get("service"):
            raise TokenValidationFailedError("Service token validation failed")
        return body

    async def generate_service_token(self) -> str:
        """
        Request a fresh service token, authenticating with this client's
        current service token.

        The auth service issues the new token to the service named in the
        presented token. `service_name` is sent as the acting identity only
        and cannot select a different service.
        """
        if not self.service_token:
            raise TokenValidationFailedError(
                "Service token generation requires an existing service token"
            )
        if not self.service_name:
            raise TokenValidationFailedError(
                "Service token generation requires a service name"
            )

        body = await self._request(
            "POST",
            "/generate",
            "Service token generation failed",
            headers={"Authorization": f"Bearer {self.service_token}"},
            json={
                "serviceName": self.service_name,
                "userId": self.service_name,
                "role": "service",
            },
        )
        service_token = body.get("serviceToken")
        if not service_token:
            raise TokenValidationFailedError("Service token generation failed")
        return service_token


class RemoteAuthGuard(BaseAuthGuard):
    """
    Network-delegating sibling of AuthGuard.

    Uses the RemoteAuthClient given at construction, or the one installed on
    `app.state.remote_auth_client`.
    """

    def __init__(
        self,
        config: Optional[AuthGuardConfig] = None,
        client: Optional[RemoteAuthClient] = None,
    ):
        super().__init__(config)
        self._client = client

    def get_client(self, request: Request) -> RemoteAuthClient:
        if self._client is not None:
            return self._client
        client = getattr(request.app.state, "remote_auth_client", None)
        if client is None:
            raise RuntimeError("RemoteAuthClient not configured on application state")
        return client

    async def verify(self, request: Request, token: str) -> Dict[str, Any]:
        client = self.get_client(request)
        if self.config.is_service_auth:
            result = await client.validate_service_token(token)
            return {"service": result["service"], "type": "service"}
        result = await client.validate_token(token)
        return result["user"]
