"""
Token Codec
-----------
Pure functions to mint and verify signed JWTs with a symmetric secret.

Verification fails closed and reports one of three reasons:
- TokenMalformedError: the token cannot be parsed or lacks `exp`/`iat`
- TokenSignatureError: signature does not match the secret/content
- TokenExpiredError: current time is past `exp`

Callers above this layer collapse the three into a single error kind.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt

DEFAULT_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("exp", "iat")


class TokenCodecError(Exception):
    """Base class for token verification failures."""


class TokenMalformedError(TokenCodecError):
    pass


class TokenSignatureError(TokenCodecError):
    pass


class TokenExpiredError(TokenCodecError):
    pass


def sign(
    payload: Dict[str, Any],
    secret: str,
    ttl: timedelta,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Sign a payload, adding `iat` and `exp` claims.

    Args:
        payload: Claims to embed; not mutated
        secret: Symmetric signing secret
        ttl: Lifetime of the token
        algorithm: HMAC algorithm

    Returns:
        Compact JWT string
    """
    now = datetime.now(timezone.utc)
    claims = dict(payload)
    claims["iat"] = now
    claims["exp"] = now + ttl
    return jwt.encode(claims, secret, algorithm=algorithm)


def verify(token: str, secret: str, algorithm: str = DEFAULT_ALGORITHM) -> Dict[str, Any]:
    """
    Verify a token's structure, signature and expiry.

    Returns:
        The decoded claims

    Raises:
        TokenMalformedError, TokenSignatureError, TokenExpiredError
    """
    if not token or not isinstance(token, str):
        raise TokenMalformedError("Empty token")

    try:
        unverified = jwt.get_unverified_claims(token)
    except JWTError as e:
        raise TokenMalformedError(str(e)) from e

    for claim in REQUIRED_CLAIMS:
        if claim not in unverified:
            raise TokenMalformedError(f"Token missing '{claim}' claim")

    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except JWTError as e:
        raise TokenSignatureError(str(e)) from e
