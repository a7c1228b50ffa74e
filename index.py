"""
Uvicorn Startup Script
----------------------
Starts the auth service or the admin gateway.

    python index.py                  # auth service
    python index.py --service admin  # admin gateway
"""

import argparse

import uvicorn

from ats_auth.core.config_manager import settings

SERVICES = {
    "auth": ("ats_auth.app:build_default_app", settings.fastapi_port),
    "admin": ("ats_auth.gateway_app:build_default_gateway_app", settings.admin_gateway_port),
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an applicant-tracking service")
    parser.add_argument("--service", choices=sorted(SERVICES), default="auth")
    parser.add_argument("--port", type=int, default=None, help="Override the port")
    args = parser.parse_args()

    factory, default_port = SERVICES[args.service]
    uvicorn.run(
        factory,
        factory=True,
        host=settings.fastapi_host,
        port=args.port or default_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
