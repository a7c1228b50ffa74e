"""
Admin Gateway Endpoints
-----------------------
Entry point of the admin gateway. The gateway holds no signing secret, so
every route is gated by RemoteAuthGuard, which validates the bearer token
against the auth service and requires the `admin` role.

Resource routes for companies, applicants and jobs are proxied elsewhere;
this router only exposes the authenticated identity and the endpoint map.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ats_auth.auth.dependencies import AuthGuardConfig
from ats_auth.auth.remote_auth_client import RemoteAuthGuard

require_remote_admin = RemoteAuthGuard(AuthGuardConfig.for_roles(["admin"]))

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
)


@router.get("/me")
async def whoami(user: Dict[str, Any] = Depends(require_remote_admin)):
    """Return the identity the auth service resolved for the caller."""
    return {"user": user}


@router.get("/", dependencies=[Depends(require_remote_admin)])
async def endpoint_map():
    """List the admin resource endpoints."""
    return {
        "message": "Admin Panel Service",
        "endpoints": {
            "companies": "/api/admin/companies",
            "applicants": "/api/admin/applicants",
            "jobs": "/api/admin/jobs",
            "users": "/api/admin/users",
        },
    }
