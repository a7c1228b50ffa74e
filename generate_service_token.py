"""
Helper script for minting a bootstrap service token.

`POST /api/auth/generate` only accepts callers that already hold a service
token, so the first token for a service is minted offline with the shared
secret. Run it with the same JWT_SECRET_KEY / JWT_REFRESH_SECRET_KEY as the
auth service:

    $ JWT_SECRET_KEY=... JWT_REFRESH_SECRET_KEY=... python generate_service_token.py job-service

Export the printed token as SERVICE_TOKEN for that service.
"""

import argparse
import sys
from datetime import timedelta

from ats_auth.auth.token_service import TokenService
from ats_auth.core.config_manager import settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Mint a service token")
    parser.add_argument("service_name", help="Name of the service the token identifies")
    parser.add_argument(
        "--hours",
        type=int,
        default=settings.service_token_expire_hours,
        help="Token lifetime in hours",
    )
    args = parser.parse_args()

    token_service = TokenService.from_settings(settings)
    token_service.service_ttl = timedelta(hours=args.hours)
    print(token_service.generate_service_token(args.service_name))
    return 0


if __name__ == "__main__":
    sys.exit(main())
