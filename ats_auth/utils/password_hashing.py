"""
Password hashing for the credential store (bcrypt, cost factor 10)
"""

from functools import lru_cache
from secrets import token_urlsafe

import bcrypt

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Hashes and checks user passwords. Plain text is never stored."""

    ROUNDS = 10

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password with a fresh salt.

        Args:
            password: Plain text password

        Returns:
            `$2b$10$...` hash suitable for the users table
        """
        salt = bcrypt.gensalt(rounds=PasswordHasher.ROUNDS)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Compare a password with a stored hash. A malformed hash never matches."""
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    @lru_cache(maxsize=1)
    def dummy_hash() -> str:
        """
        Hash of a random password, computed once per process.

        Login verifies against it when the email is unknown.
        """
        return PasswordHasher.hash_password(token_urlsafe(16))
